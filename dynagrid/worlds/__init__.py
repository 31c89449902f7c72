"""
Grid worlds and the forward model learned from them.

The grid is the fixed, fully known environment; the forward model is the
agent's memory of what each (cell, action) pair led to, used for Dyna-Q
replay.
"""

from dynagrid.worlds.grid_env import (
    Action, Cell, CellType, Grid, Move, Outcome,
    make_small_grid, make_standard_grid, PRESETS,
)
from dynagrid.worlds.world_model import ForwardModel, ModelEntry, ModelKey

__all__ = [
    "Action",
    "Cell",
    "CellType",
    "Grid",
    "Move",
    "Outcome",
    "make_small_grid",
    "make_standard_grid",
    "PRESETS",
    "ForwardModel",
    "ModelEntry",
    "ModelKey",
]
