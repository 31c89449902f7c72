"""
Dynagrid: tabular Q-learning and Dyna-Q on a grid world.

A teaching-oriented simulation engine. An agent moves through a small grid
with walls, pits and a goal, picks actions epsilon-greedily, learns action
values with one-step Q-learning, and optionally replays remembered
transitions from a forward model (Dyna-Q planning). Every step comes with a
record of the exact numeric update and a plain-language explanation.
"""

from dynagrid.worlds.grid_env import Action, Cell, Grid, make_small_grid, make_standard_grid
from dynagrid.worlds.world_model import ForwardModel
from dynagrid.qtable import QTable, initialize
from dynagrid.policy import SelectionMethod, choose_action, greedy_policy
from dynagrid.engine import AgentParams, StepRecord, StepResult, step
from dynagrid.session import EpisodeStat, LearningMode, Session
from dynagrid.scheduler import AutoRunner
from dynagrid.rng import set_global_seed

__version__ = "0.1.0"
__all__ = [
    "Action",
    "Cell",
    "Grid",
    "make_small_grid",
    "make_standard_grid",
    "ForwardModel",
    "QTable",
    "initialize",
    "SelectionMethod",
    "choose_action",
    "greedy_policy",
    "AgentParams",
    "StepRecord",
    "StepResult",
    "step",
    "EpisodeStat",
    "LearningMode",
    "Session",
    "AutoRunner",
    "set_global_seed",
]
