"""
Training session — episode bookkeeping around the step engine.

The session is the single mutator of the learning state. It holds the
current grid, parameters, Q-table, forward model and agent position, and
tracks episodes with a two-state machine:

    RUNNING  ──(step lands on goal/pit)──▶  FINISHED
    FINISHED ──(next step command)───────▶  RUNNING   (agent back at start)

When an episode ends the agent stays on the terminal cell so it can be
shown there; the next step command only starts a new episode and does
not interact with the environment.

Completed episodes are appended to a bounded history that keeps the most
recent 100 entries.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Deque, Iterator, List, Optional

import numpy as np

from dynagrid.engine import AgentParams, StepRecord, StepResult, step
from dynagrid.qtable import QTable, initialize
from dynagrid.worlds.grid_env import Cell, Grid, make_small_grid, make_standard_grid
from dynagrid.worlds.world_model import ForwardModel


HISTORY_LIMIT = 100
MAX_EPISODE_STEPS = 1000
MODEL_BASED_PLANNING_STEPS = 20


class EpisodeStatus(Enum):
    RUNNING = auto()
    FINISHED = auto()


class LearningMode(Enum):
    """Model-free is plain Q-learning; model-based adds Dyna-Q planning."""
    MODEL_FREE = "Model-Free"
    MODEL_BASED = "Model-Based"

    @property
    def planning_steps(self) -> int:
        return MODEL_BASED_PLANNING_STEPS if self is LearningMode.MODEL_BASED else 0


@dataclass(frozen=True)
class EpisodeStat:
    """Summary of one completed episode."""
    episode_index: int
    total_reward: float
    step_count: int


class EpisodeHistory:
    """The most recent completed episodes, oldest first."""

    def __init__(self, limit: int = HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._stats: Deque[EpisodeStat] = deque(maxlen=limit)

    def append(self, stat: EpisodeStat) -> None:
        self._stats.append(stat)

    def clear(self) -> None:
        self._stats.clear()

    def recent(self, n: int) -> List[EpisodeStat]:
        if n <= 0:
            return []
        return list(self._stats)[-n:]

    def average_reward(self, window: int = 10) -> float:
        stats = self.recent(window)
        if not stats:
            return 0.0
        return float(np.mean([s.total_reward for s in stats]))

    @property
    def last(self) -> Optional[EpisodeStat]:
        return self._stats[-1] if self._stats else None

    def __iter__(self) -> Iterator[EpisodeStat]:
        return iter(list(self._stats))

    def __len__(self) -> int:
        return len(self._stats)


@dataclass(frozen=True)
class FinishResult:
    """Outcome of fast-forwarding to the end of an episode."""
    terminated: bool
    steps: int              # Steps in the episode so far, including earlier manual ones
    total_reward: float
    final_state: Cell
    record: Optional[StepRecord]


class Session:
    """
    Interactive Q-learning / Dyna-Q session on one grid.

    Driving code calls ``step`` once per tick (manually or from an
    AutoRunner) or ``finish_episode`` to fast-forward. Only one call may
    run at a time.
    """

    def __init__(self, grid: Optional[Grid] = None,
                 params: Optional[AgentParams] = None,
                 seed: Optional[int] = None,
                 history_limit: int = HISTORY_LIMIT):
        self.grid = grid or make_small_grid()
        self.params = params or AgentParams()
        self.rng = random.Random(seed)
        self.history = EpisodeHistory(history_limit)
        self.reset()

    # --- Lifecycle ---

    def reset(self, grid: Optional[Grid] = None) -> None:
        """Forget everything learned and start over, optionally on a new grid."""
        if grid is not None:
            self.grid = grid
        self.q_table: QTable = initialize(self.grid.rows, self.grid.cols)
        self.model = ForwardModel()
        self.position: Cell = self.grid.start
        self.status = EpisodeStatus.RUNNING
        self.episodes_completed = 0
        self.episode_reward = 0.0
        self.episode_steps = 0
        self.last_record: Optional[StepRecord] = None
        self.history.clear()

    def toggle_grid(self) -> Grid:
        """Switch between the small and standard layouts and reset."""
        if self.grid.rows == 4:
            self.reset(make_standard_grid())
        else:
            self.reset(make_small_grid())
        return self.grid

    def start_next_episode(self) -> None:
        self.position = self.grid.start
        self.status = EpisodeStatus.RUNNING
        self.episode_reward = 0.0
        self.episode_steps = 0
        self.last_record = None

    # --- Parameters ---

    @property
    def mode(self) -> LearningMode:
        if self.params.planning_steps > 0:
            return LearningMode.MODEL_BASED
        return LearningMode.MODEL_FREE

    def set_mode(self, mode: LearningMode) -> None:
        self.params = replace(self.params, planning_steps=LearningMode(mode).planning_steps)

    def set_params(self, **changes) -> AgentParams:
        """Replace some parameters; the new set is validated as a whole."""
        self.params = replace(self.params, **changes)
        return self.params

    # --- Stepping ---

    @property
    def is_finished(self) -> bool:
        return self.status is EpisodeStatus.FINISHED

    def _advance(self) -> StepResult:
        result = step(self.position, self.q_table, self.model,
                      self.grid, self.params, self.rng)
        self.q_table = result.q_table
        self.model = result.model
        self.position = result.next_state
        self.episode_reward += result.reward
        self.episode_steps += 1
        self.last_record = result.record
        return result

    def _complete_episode(self) -> EpisodeStat:
        self.episodes_completed += 1
        stat = EpisodeStat(
            episode_index=self.episodes_completed,
            total_reward=self.episode_reward,
            step_count=self.episode_steps,
        )
        self.history.append(stat)
        self.status = EpisodeStatus.FINISHED
        return stat

    def step(self) -> Optional[StepResult]:
        """
        Advance one tick.

        Returns the step result, or None when the tick was spent starting
        a new episode after a finished one.
        """
        if self.is_finished:
            self.start_next_episode()
            return None

        result = self._advance()
        if result.terminal:
            self._complete_episode()
        return result

    def finish_episode(self, max_steps: int = MAX_EPISODE_STEPS,
                       verbose: bool = False) -> FinishResult:
        """
        Step until the episode ends or ``max_steps`` steps have been taken.

        The episode's earlier reward and steps carry over. A stat is
        recorded only when the episode actually ends during this call.
        """
        if max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {max_steps}")
        if self.is_finished:
            self.start_next_episode()

        terminated = False
        record = None
        for _ in range(max_steps):
            result = self._advance()
            record = result.record
            if result.terminal:
                terminated = True
                break

        if terminated:
            stat = self._complete_episode()
            if verbose:
                outcome = "goal" if self.grid.is_goal(self.position) else "pit"
                print(f"  [ep {stat.episode_index:4d}] {outcome:4s} "
                      f"steps={stat.step_count:4d}  reward={stat.total_reward:7.1f}")
        elif verbose:
            print(f"  [ep {self.episodes_completed + 1:4d}] did not terminate "
                  f"within {max_steps} steps")

        return FinishResult(
            terminated=terminated,
            steps=self.episode_steps,
            total_reward=self.episode_reward,
            final_state=self.position,
            record=record,
        )

    def run_episodes(self, n: int, max_steps: int = MAX_EPISODE_STEPS,
                     verbose: bool = False) -> List[FinishResult]:
        """Fast-forward through ``n`` episodes back to back."""
        results = []
        for i in range(n):
            result = self.finish_episode(max_steps)
            results.append(result)
            if verbose and i % 10 == 0:
                status = "✓" if result.terminated else "✗"
                print(f"  [ep {self.episodes_completed:4d}] {status} "
                      f"steps={result.steps:4d}  reward={result.total_reward:7.1f}  "
                      f"avg10={self.average_reward():7.1f}")
        return results

    # --- Reporting ---

    def average_reward(self, window: int = 10) -> float:
        return self.history.average_reward(window)

    def context_summary(self) -> str:
        """Plain-text status block for an external tutor or logger."""
        last = self.history.last
        record = self.last_record
        status = ("Episode Finished (At Terminal State)" if self.is_finished
                  else "Exploring")
        return "\n".join([
            f"Mode: {self.mode.value}",
            f"Episode: {self.episodes_completed}",
            f"Status: {status}",
            f"Epsilon: {self.params.epsilon:g}",
            f"Last Reward: {last.total_reward:g}" if last else "Last Reward: N/A",
            f"Agent Pos: {self.position}",
            f"Grid Name: {self.grid.name}",
            f"Last Action: {record.action.name}" if record else "Last Action: None",
            f"Last Math: {record.calculation}" if record else "Last Math: None",
        ])

    def summary(self) -> str:
        lines = [
            "═" * 55,
            "  Session Summary",
            "═" * 55,
            f"  Grid:              {self.grid.name}",
            f"  Mode:              {self.mode.value}",
            f"  Episodes:          {self.episodes_completed}",
            f"  Avg reward (10):   {self.average_reward():.1f}",
            f"  Model transitions: {len(self.model)}",
        ]
        if len(self.history):
            steps = [s.step_count for s in self.history]
            lines.append(f"  Avg steps:         {np.mean(steps):.1f}")
            lines.append(f"  Fewest steps:      {min(steps)}")
        lines.append("═" * 55)
        return "\n".join(lines)
