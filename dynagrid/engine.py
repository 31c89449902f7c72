"""
Step engine — one real interaction plus Dyna-Q planning.

A step from cell s runs, in order:

    1. choose an action (epsilon-greedy)
    2. apply the transition → s', hit-wall flag
    3. evaluate the reward and termination at s'
    4. direct Q-learning update of Q[s][a]
    5. record (reward, s') in the forward model under (s, a)
    6. replay ``planning_steps`` random remembered transitions
    7. explain what happened in a StepRecord

The direct update reads max(Q[s']) from the table as it was before the
step. Planning replays read the running table, including earlier replays
from the same step.

``step`` never mutates its arguments. It returns new QTable and
ForwardModel values; the caller decides whether to keep them.
"""

from __future__ import annotations

import numbers
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from dynagrid.policy import SelectionMethod, choose_action
from dynagrid.qtable import QTable, TDUpdate, initialize, td_update
from dynagrid.rng import resolve
from dynagrid.worlds.grid_env import Action, Cell, Grid, as_cell
from dynagrid.worlds.world_model import ForwardModel

__all__ = ["AgentParams", "StepRecord", "StepResult", "initialize", "plan", "step"]


@dataclass(frozen=True)
class AgentParams:
    """Learning hyper-parameters. planning_steps=0 is plain Q-learning."""
    alpha: float = 0.1           # Learning rate
    gamma: float = 0.9           # Discount factor
    epsilon: float = 0.1         # Exploration probability
    planning_steps: int = 0      # Dyna-Q replays per real step

    def __post_init__(self) -> None:
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0.0 < self.gamma <= 1.0:
            raise ValueError(f"gamma must be in (0, 1], got {self.gamma}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if (isinstance(self.planning_steps, bool)
                or not isinstance(self.planning_steps, numbers.Integral)):
            raise ValueError(
                f"planning_steps must be an integer, got {self.planning_steps!r}")
        if self.planning_steps < 0:
            raise ValueError(
                f"planning_steps must be non-negative, got {self.planning_steps}")


@dataclass(frozen=True)
class StepRecord:
    """Everything an explanation layer needs to narrate one step."""
    state: Cell
    action: Action
    next_state: Cell
    reward: float
    terminal: bool
    hit_wall: bool
    old_q: float
    new_q: float
    target: float
    max_next_q: float
    method: SelectionMethod
    calculation: str
    reasoning: str

    def __repr__(self) -> str:
        return (f"Step({self.state}→{self.next_state} {self.action.name}, "
                f"r={self.reward:+.1f}, Q {self.old_q:.2f}→{self.new_q:.2f})")


@dataclass(frozen=True)
class StepResult:
    """Output of one call to ``step``."""
    next_state: Cell
    reward: float
    terminal: bool
    q_table: QTable
    model: ForwardModel
    record: StepRecord

    @property
    def action(self) -> Action:
        return self.record.action


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def plan(q_table: QTable, model: ForwardModel, n_steps: int,
         alpha: float, gamma: float,
         rng: Optional[random.Random] = None) -> QTable:
    """
    Run ``n_steps`` Dyna-Q replays and return the updated table.

    Each replay draws a remembered (cell, action) uniformly from the model
    and backs up its stored outcome exactly like a real experience. An
    empty model makes this a no-op.
    """
    rng = resolve(rng)
    keys = model.keys()
    for _ in range(n_steps):
        if not keys:
            break
        key = rng.choice(keys)
        entry = model[key]
        update = td_update(q_table, key.cell, key.action, entry.reward,
                           entry.next_cell, alpha, gamma)
        q_table = q_table.with_value(key.cell, key.action, update.new_q)
    return q_table


# ---------------------------------------------------------------------------
# Explanations
# ---------------------------------------------------------------------------

def _fmt(value: float) -> str:
    return f"{value:g}"


def describe_update(update: TDUpdate, reward: float,
                    alpha: float, gamma: float) -> str:
    """The numeric backup, e.g. ``Q = 2.00 + 0.1 [-1 + 0.9 * 5.00 - 2.00] = 2.15``."""
    return (f"Q = {update.old_q:.2f} + {_fmt(alpha)} [{_fmt(reward)} + "
            f"{_fmt(gamma)} * {update.max_next_q:.2f} - {update.old_q:.2f}] "
            f"= {update.new_q:.2f}")


def explain(state: Cell, action: Action, method: SelectionMethod,
            q_values, epsilon: float, next_state: Cell, reward: float,
            terminal: bool, hit_wall: bool, max_next_q: float) -> str:
    """Plain-language rationale for a step, first person."""
    if method is SelectionMethod.EXPLOITATION:
        estimates = ", ".join(
            f"{a.name}:{q_values[a]:.1f}" for a in Action.all())
        text = (f"I am at state {state}. My current estimates for actions were: "
                f"[{estimates}]. I chose {action.name} because it had the highest "
                f"value (or tied for highest). ")
    else:
        text = (f"I am at state {state}. I decided to Explore (random choice due "
                f"to Epsilon {_fmt(epsilon)}). I picked {action.name} randomly, "
                f"ignoring my current Q-values. ")

    if hit_wall:
        text += (f"\n\nResult: I bumped into a wall and stayed at {next_state}, "
                 f"receiving a reward of {_fmt(reward)}. ")
    else:
        text += (f"\n\nResult: I moved to {next_state} and received a reward "
                 f"of {_fmt(reward)}. ")

    if terminal:
        text += "This is a terminal state (Goal or Pit). The episode ends here."
    else:
        text += (f"Looking ahead from the new state {next_state}, the best action "
                 f"has a value of {max_next_q:.2f}. I used this \"max next Q\" to "
                 f"update my previous estimate.")
    return text


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

def step(state: Tuple[int, int], q_table: QTable, model: ForwardModel,
         grid: Grid, params: AgentParams,
         rng: Optional[random.Random] = None) -> StepResult:
    """Take one real step from ``state`` and learn from it."""
    rng = resolve(rng)
    state = as_cell(state)
    q_values = q_table[state]

    action, method = choose_action(q_values, params.epsilon, rng)
    next_state, hit_wall = grid.transition(state, action)
    reward, terminal = grid.evaluate(next_state)

    update = td_update(q_table, state, action, reward, next_state,
                       params.alpha, params.gamma)
    new_table = q_table.with_value(state, action, update.new_q)
    new_model = model.with_entry(state, action, reward, next_state)

    if params.planning_steps > 0:
        new_table = plan(new_table, new_model, params.planning_steps,
                         params.alpha, params.gamma, rng)

    record = StepRecord(
        state=state,
        action=action,
        next_state=next_state,
        reward=reward,
        terminal=terminal,
        hit_wall=hit_wall,
        old_q=update.old_q,
        new_q=update.new_q,
        target=update.target,
        max_next_q=update.max_next_q,
        method=method,
        calculation=describe_update(update, reward, params.alpha, params.gamma),
        reasoning=explain(state, action, method, q_values, params.epsilon,
                          next_state, reward, terminal, hit_wall,
                          update.max_next_q),
    )
    return StepResult(
        next_state=next_state,
        reward=reward,
        terminal=terminal,
        q_table=new_table,
        model=new_model,
        record=record,
    )
