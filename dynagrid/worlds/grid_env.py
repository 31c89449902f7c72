"""
Grid world model — the immutable environment the agent learns in.

A grid world defines:
- A rectangle of cells addressed as (x, y), x across columns, y down rows
- A start cell and a goal cell
- Walls (impassable) and pits (terminal hazards)
- A reward function evaluated on the cell the agent arrives at

Transition rules (deterministic):
1. Moving off the grid leaves the agent where it is (hit-wall flag set)
2. Moving into a wall leaves the agent where it is (hit-wall flag set)
3. Otherwise the agent moves one cell in the action's direction

Rewards:
    goal  → +100, episode ends
    pit   →  -50, episode ends
    other →   -1, living cost that favours the shortest safe path
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Tuple


GOAL_REWARD = 100.0
PIT_REWARD = -50.0
STEP_REWARD = -1.0


# ---------------------------------------------------------------------------
# Cells, actions and cell types
# ---------------------------------------------------------------------------

class Cell(NamedTuple):
    """A grid coordinate: x is the column, y is the row."""
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


def as_cell(value: Iterable[int]) -> Cell:
    """Normalise an (x, y) pair into a Cell."""
    if isinstance(value, Cell):
        return value
    x, y = value
    return Cell(int(x), int(y))


class Action(IntEnum):
    """The four cardinal directions, in their fixed order."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def delta(self) -> Tuple[int, int]:
        """(dx, dy) displacement for this action."""
        return _DELTAS[self]

    @staticmethod
    def all() -> List["Action"]:
        return [Action.UP, Action.RIGHT, Action.DOWN, Action.LEFT]


_DELTAS: Dict[Action, Tuple[int, int]] = {
    Action.UP: (0, -1),
    Action.RIGHT: (1, 0),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
}


class CellType(Enum):
    """What occupies a grid cell."""
    EMPTY = "EMPTY"
    START = "START"
    GOAL = "GOAL"
    WALL = "WALL"
    PIT = "PIT"


class Move(NamedTuple):
    """Result of applying an action: where the agent ends up."""
    cell: Cell
    hit_wall: bool


class Outcome(NamedTuple):
    """Reward for arriving at a cell and whether the episode ends there."""
    reward: float
    terminal: bool


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Grid:
    """
    Immutable description of a grid world.

    Construction validates the layout and fails fast: dimensions must be
    positive, every special cell must lie inside the grid, and start, goal,
    walls and pits must not overlap. Cell collections may be given as any
    iterable of (x, y) pairs.
    """
    rows: int
    cols: int
    start: Cell
    goal: Cell
    walls: FrozenSet[Cell] = field(default_factory=frozenset)
    pits: FrozenSet[Cell] = field(default_factory=frozenset)
    name: str = "Custom"

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {self.rows}x{self.cols}")

        object.__setattr__(self, "start", as_cell(self.start))
        object.__setattr__(self, "goal", as_cell(self.goal))
        object.__setattr__(self, "walls", frozenset(as_cell(c) for c in self.walls))
        object.__setattr__(self, "pits", frozenset(as_cell(c) for c in self.pits))

        for label, cell in (("Start", self.start), ("Goal", self.goal)):
            if not self.in_bounds(cell):
                raise ValueError(f"{label} position {cell} is out of bounds")
        for label, cells in (("Wall", self.walls), ("Pit", self.pits)):
            for cell in sorted(cells):
                if not self.in_bounds(cell):
                    raise ValueError(f"{label} position {cell} is out of bounds")

        if self.start == self.goal:
            raise ValueError("Start and goal positions cannot be the same")
        for label, cell in (("Start", self.start), ("Goal", self.goal)):
            if cell in self.walls:
                raise ValueError(f"{label} position {cell} overlaps a wall")
            if cell in self.pits:
                raise ValueError(f"{label} position {cell} overlaps a pit")
        shared = self.walls & self.pits
        if shared:
            raise ValueError(f"Cells {sorted(shared)} are both walls and pits")

    # --- Queries ---

    def in_bounds(self, cell: Iterable[int]) -> bool:
        x, y = cell
        return 0 <= x < self.cols and 0 <= y < self.rows

    def is_wall(self, cell: Iterable[int]) -> bool:
        return as_cell(cell) in self.walls

    def is_pit(self, cell: Iterable[int]) -> bool:
        return as_cell(cell) in self.pits

    def is_goal(self, cell: Iterable[int]) -> bool:
        return as_cell(cell) == self.goal

    def is_terminal(self, cell: Iterable[int]) -> bool:
        return self.is_goal(cell) or self.is_pit(cell)

    def cell_type(self, cell: Iterable[int]) -> CellType:
        cell = as_cell(cell)
        if cell == self.goal:
            return CellType.GOAL
        if cell == self.start:
            return CellType.START
        if cell in self.walls:
            return CellType.WALL
        if cell in self.pits:
            return CellType.PIT
        return CellType.EMPTY

    def cells(self) -> Iterator[Cell]:
        """All cells, row by row."""
        for y in range(self.rows):
            for x in range(self.cols):
                yield Cell(x, y)

    # --- Dynamics ---

    def transition(self, cell: Iterable[int], action: Action) -> Move:
        """
        Apply an action from a cell.

        Boundary is checked before walls; either one keeps the agent in
        place and sets the hit-wall flag. No other displacement than the
        action's unit delta is ever produced.
        """
        cell = as_cell(cell)
        dx, dy = Action(action).delta()
        target = Cell(cell.x + dx, cell.y + dy)

        if not self.in_bounds(target):
            return Move(cell, True)
        if target in self.walls:
            return Move(cell, True)
        return Move(target, False)

    def evaluate(self, cell: Iterable[int]) -> Outcome:
        """Reward and termination for arriving at a cell."""
        cell = as_cell(cell)
        if cell == self.goal:
            return Outcome(GOAL_REWARD, True)
        if cell in self.pits:
            return Outcome(PIT_REWARD, True)
        return Outcome(STEP_REWARD, False)


# ---------------------------------------------------------------------------
# Preset layouts
# ---------------------------------------------------------------------------

def make_small_grid() -> Grid:
    """
    4x4 layout used when a session starts.

        S . . .
        . # # .
        . . P .
        . . . G
    """
    return Grid(
        rows=4, cols=4,
        start=(0, 0),
        goal=(3, 3),
        walls=[(1, 1), (2, 1)],
        pits=[(2, 2)],
        name="Small (4x4)",
    )


def make_standard_grid() -> Grid:
    """
    6x6 layout with a corridor of walls and three pits.

        S . . . . .
        . # # # P .
        . . . . . .
        . . P # # .
        . # . . . .
        P . . . . G
    """
    return Grid(
        rows=6, cols=6,
        start=(0, 0),
        goal=(5, 5),
        walls=[(1, 1), (2, 1), (3, 1), (3, 3), (4, 3), (1, 4)],
        pits=[(4, 1), (2, 3), (0, 5)],
        name="Standard (6x6)",
    )


PRESETS: Dict[str, Callable[[], Grid]] = {
    "small": make_small_grid,
    "standard": make_standard_grid,
}
