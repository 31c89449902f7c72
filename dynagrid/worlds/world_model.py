"""
Forward model — remembers what happened after each (state, action) pair.

Dyna-Q learns a model of the environment alongside its value estimates and
replays that model to get extra value updates without touching the real
environment. The environment here is deterministic and stationary, so the
model is a plain lookup table:

    (cell, action) → (reward, next_cell)

Only the most recent outcome is kept for each key (last write wins). The
model records what was actually experienced, including wall bumps where
next_cell equals cell.

ForwardModel values are persistent: ``with_entry`` returns a new model and
leaves the original untouched, so a snapshot handed to a display layer
never changes under it.
"""

from __future__ import annotations

import random
from typing import Dict, Iterator, List, NamedTuple, Optional

from dynagrid.worlds.grid_env import Action, Cell, as_cell


class ModelKey(NamedTuple):
    """A state-action pair the agent has tried."""
    cell: Cell
    action: Action


class ModelEntry(NamedTuple):
    """The outcome last observed for a state-action pair."""
    reward: float
    next_cell: Cell


class ForwardModel:
    """Deterministic last-write-wins model of experienced transitions."""

    def __init__(self, entries: Optional[Dict[ModelKey, ModelEntry]] = None):
        self._entries: Dict[ModelKey, ModelEntry] = dict(entries or {})

    def with_entry(self, cell: Cell, action: Action,
                   reward: float, next_cell: Cell) -> "ForwardModel":
        """Return a new model with the outcome for (cell, action) recorded."""
        entries = dict(self._entries)
        key = ModelKey(as_cell(cell), Action(action))
        entries[key] = ModelEntry(float(reward), as_cell(next_cell))
        return ForwardModel(entries)

    def get(self, cell: Cell, action: Action) -> Optional[ModelEntry]:
        return self._entries.get(ModelKey(as_cell(cell), Action(action)))

    def keys(self) -> List[ModelKey]:
        """Every observed key, in first-observed order."""
        return list(self._entries)

    def sample(self, rng: random.Random) -> ModelKey:
        """
        Draw one observed key uniformly at random.

        Every distinct key has the same weight regardless of how often it
        was visited. Raises IndexError on an empty model.
        """
        return rng.choice(self.keys())

    def __getitem__(self, key: ModelKey) -> ModelEntry:
        return self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[ModelKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ForwardModel):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ForwardModel(entries={len(self._entries)})"

    @property
    def num_states_visited(self) -> int:
        return len({key.cell for key in self._entries})

    def summary(self) -> str:
        """Human-readable listing of the learned transitions."""
        lines = [
            "═" * 50,
            "  Forward Model Summary",
            "═" * 50,
            f"  States visited:       {self.num_states_visited}",
            f"  Unique transitions:   {len(self._entries)}",
            "",
        ]
        for key, entry in self._entries.items():
            lines.append(
                f"  {str(key.cell):8s} {key.action.name:5s} → "
                f"{str(entry.next_cell):8s} r={entry.reward:+.1f}"
            )
        lines.append("═" * 50)
        return "\n".join(lines)
