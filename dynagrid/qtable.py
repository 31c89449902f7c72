"""
Q-value store and the one-step Q-learning update.

The table maps each cell to a vector of four action-values, indexed by
``Action``. It is the only learned artifact besides the forward model.

Tables are persistent values. Every row handed out is a read-only numpy
array, and ``with_value`` builds a new table that shares the untouched rows
with its parent, so older snapshots stay valid after the engine moves on.

Update rule (tabular Q-learning):

    target = reward + gamma * max(Q[next_cell])
    error  = target - Q[cell][action]
    Q[cell][action] ← Q[cell][action] + alpha * error
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import numpy as np

from dynagrid.worlds.grid_env import Action, Cell, as_cell


NUM_ACTIONS = len(Action.all())


def _frozen(values: np.ndarray) -> np.ndarray:
    row = np.array(values, dtype=float)
    row.flags.writeable = False
    return row


_ZERO_ROW = _frozen(np.zeros(NUM_ACTIONS))


class QTable:
    """Immutable mapping from cell to its action-value vector."""

    def __init__(self, rows: Optional[Dict[Cell, np.ndarray]] = None):
        self._rows: Dict[Cell, np.ndarray] = {}
        for cell, values in (rows or {}).items():
            values = np.asarray(values, dtype=float)
            if values.shape != (NUM_ACTIONS,):
                raise ValueError(
                    f"Q-values for {cell} must have shape ({NUM_ACTIONS},), "
                    f"got {values.shape}")
            self._rows[as_cell(cell)] = _frozen(values)

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "QTable":
        """A table with a zero vector for every cell of a rows x cols grid."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
        table = cls()
        for y in range(rows):
            for x in range(cols):
                table._rows[Cell(x, y)] = _ZERO_ROW
        return table

    def __getitem__(self, cell: Cell) -> np.ndarray:
        """Action-values for a cell; cells never stored read as zeros."""
        return self._rows.get(as_cell(cell), _ZERO_ROW)

    def value(self, cell: Cell, action: Action) -> float:
        return float(self[cell][int(action)])

    def max_value(self, cell: Cell) -> float:
        return float(np.max(self[cell]))

    def with_value(self, cell: Cell, action: Action, value: float) -> "QTable":
        """Return a new table with a single entry replaced."""
        cell = as_cell(cell)
        row = np.array(self[cell], dtype=float)
        row[int(action)] = value
        table = QTable()
        table._rows = dict(self._rows)
        table._rows[cell] = _frozen(row)
        return table

    def __contains__(self, cell: object) -> bool:
        return cell in self._rows

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QTable):
            return NotImplemented
        if self._rows.keys() != other._rows.keys():
            return False
        return all(np.array_equal(self._rows[c], other._rows[c]) for c in self._rows)

    def __repr__(self) -> str:
        return f"QTable(cells={len(self._rows)})"

    def as_dict(self) -> Dict[Cell, np.ndarray]:
        """Shallow copy of the rows (arrays stay read-only)."""
        return dict(self._rows)


def initialize(rows: int, cols: int) -> QTable:
    """Zero-filled table covering the whole grid."""
    return QTable.zeros(rows, cols)


# ---------------------------------------------------------------------------
# Update rule
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TDUpdate:
    """The numbers behind one temporal-difference backup."""
    old_q: float
    max_next_q: float
    target: float
    error: float
    new_q: float


def td_update(q_table: QTable, cell: Cell, action: Action, reward: float,
              next_cell: Cell, alpha: float, gamma: float) -> TDUpdate:
    """
    Compute one Q-learning backup against ``q_table``.

    Both Q[cell][action] and max(Q[next_cell]) are read from the table as
    given; nothing is written. Callers apply ``new_q`` with ``with_value``.
    """
    old_q = q_table.value(cell, action)
    max_next_q = q_table.max_value(next_cell)
    target = reward + gamma * max_next_q
    error = target - old_q
    new_q = old_q + alpha * error
    return TDUpdate(old_q=old_q, max_next_q=max_next_q, target=target,
                    error=error, new_q=new_q)
