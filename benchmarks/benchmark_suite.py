"""
Benchmark suite for Dynagrid.

Measures how quickly each learning mode settles on a good route, on each
preset grid:
- Episodes until the last 10 episodes average a positive reward
- Mean steps per episode over the last 10 episodes
- Goal rate over all episodes
- Wall-clock time

Every configuration is run over several seeds and averaged.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from dynagrid.engine import AgentParams
from dynagrid.session import LearningMode, Session
from dynagrid.worlds.grid_env import Grid, make_small_grid, make_standard_grid


@dataclass
class BenchmarkProblem:
    """A grid and learning mode to train on."""
    name: str
    make_grid: Callable[[], Grid]
    mode: LearningMode
    episodes: int = 200


# ---------------------------------------------------------------------------
# Benchmark problems
# ---------------------------------------------------------------------------

BENCHMARKS = [
    BenchmarkProblem("small/q", make_small_grid, LearningMode.MODEL_FREE),
    BenchmarkProblem("small/dyna", make_small_grid, LearningMode.MODEL_BASED),
    BenchmarkProblem("standard/q", make_standard_grid, LearningMode.MODEL_FREE, 400),
    BenchmarkProblem("standard/dyna", make_standard_grid, LearningMode.MODEL_BASED, 400),
]


def run_benchmark(problem: BenchmarkProblem,
                  params: Optional[AgentParams] = None,
                  seed: int = 42) -> dict:
    """Train one session and report how fast it converged."""
    grid = problem.make_grid()
    session = Session(grid, params or AgentParams(alpha=0.5, gamma=0.9, epsilon=0.1),
                      seed=seed)
    session.set_mode(problem.mode)

    t0 = time.time()
    converged_at = None
    goals = 0
    for episode in range(1, problem.episodes + 1):
        result = session.finish_episode()
        if result.terminated and grid.is_goal(result.final_state):
            goals += 1
        if (converged_at is None and episode >= 10
                and session.average_reward(10) > 0):
            converged_at = episode
    elapsed = time.time() - t0

    recent = session.history.recent(10)
    return {
        "name": problem.name,
        "converged_at": converged_at,
        "recent_steps": float(np.mean([s.step_count for s in recent])),
        "goal_rate": goals / problem.episodes,
        "time_sec": elapsed,
    }


def run_all_benchmarks(seeds=(0, 1, 2, 3, 4), verbose: bool = True):
    """Run all benchmark problems over several seeds and print a summary table."""
    print("=" * 72)
    print("  Dynagrid — Benchmark Suite")
    print("=" * 72)
    print()

    results = []
    for problem in BENCHMARKS:
        runs = [run_benchmark(problem, seed=s) for s in seeds]
        converged = [r["converged_at"] for r in runs if r["converged_at"] is not None]
        summary = {
            "name": problem.name,
            "converged": len(converged),
            "mean_converged_at": float(np.mean(converged)) if converged else None,
            "recent_steps": float(np.mean([r["recent_steps"] for r in runs])),
            "goal_rate": float(np.mean([r["goal_rate"] for r in runs])),
            "time_sec": float(np.sum([r["time_sec"] for r in runs])),
        }
        results.append(summary)
        if verbose:
            at = summary["mean_converged_at"]
            at_str = f"{at:6.1f}" if at is not None else "   n/a"
            print(f"  {problem.name:15s} converged {summary['converged']}/{len(seeds)}  "
                  f"at ep {at_str}  "
                  f"steps={summary['recent_steps']:5.1f}  "
                  f"goal={summary['goal_rate']:.0%}  "
                  f"time={summary['time_sec']:.1f}s")

    print()
    print("=" * 72)
    return results


if __name__ == "__main__":
    run_all_benchmarks()
