"""
Action selection — epsilon-greedy over a cell's action-values.

With probability epsilon the agent explores: any of the four actions,
uniformly. Otherwise it exploits: it takes an action with the highest
current estimate. When several actions share the maximum the winner is
drawn uniformly from the tie set, so early on (all values tied at zero)
the greedy policy still wanders instead of always picking UP.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

import numpy as np

from dynagrid.qtable import QTable
from dynagrid.rng import resolve
from dynagrid.worlds.grid_env import Action, Cell, Grid


# Values below this magnitude are treated as "not learned yet"
POLICY_THRESHOLD = 0.01


class SelectionMethod(str, Enum):
    """How an action was chosen."""
    EXPLORATION = "Exploration"
    EXPLOITATION = "Exploitation"


class Choice(NamedTuple):
    action: Action
    method: SelectionMethod


def tied_best_actions(q_values: np.ndarray) -> List[Action]:
    """All actions whose value equals the maximum."""
    q_values = np.asarray(q_values, dtype=float)
    best = np.flatnonzero(q_values == np.max(q_values))
    return [Action(int(i)) for i in best]


def choose_action(q_values: np.ndarray, epsilon: float,
                  rng: Optional[random.Random] = None) -> Choice:
    """Pick an action for a cell with the given action-values."""
    rng = resolve(rng)
    if rng.random() < epsilon:
        return Choice(Action(rng.randrange(len(Action))), SelectionMethod.EXPLORATION)
    return Choice(rng.choice(tied_best_actions(q_values)), SelectionMethod.EXPLOITATION)


def greedy_policy(q_table: QTable, grid: Grid) -> Dict[Cell, Optional[Action]]:
    """
    Best known action for every non-wall cell.

    Terminal cells and cells whose best value is still near zero map to
    None. Ties resolve to the lowest-indexed action, so the result is
    stable for display.
    """
    policy: Dict[Cell, Optional[Action]] = {}
    for cell in grid.cells():
        if grid.is_wall(cell):
            continue
        q_values = q_table[cell]
        if grid.is_terminal(cell) or abs(np.max(q_values)) < POLICY_THRESHOLD:
            policy[cell] = None
        else:
            policy[cell] = Action(int(np.argmax(q_values)))
    return policy
