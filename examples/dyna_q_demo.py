"""
Dyna-Q demo: model-free vs model-based learning on both preset grids.

With planning enabled the agent replays remembered transitions from its
forward model after every real step, so value estimates spread back from
the goal much faster than with plain Q-learning.
"""

from dynagrid.engine import AgentParams
from dynagrid.session import LearningMode, Session
from dynagrid.worlds.grid_env import make_small_grid, make_standard_grid


def main():
    print("=" * 60)
    print("  Dynagrid — Q-learning vs Dyna-Q")
    print("=" * 60)

    for grid in (make_small_grid(), make_standard_grid()):
        for mode in (LearningMode.MODEL_FREE, LearningMode.MODEL_BASED):
            print(f"\n--- {grid.name}, {mode.value} ---\n")
            session = Session(grid, AgentParams(alpha=0.5, gamma=0.9, epsilon=0.1),
                              seed=42)
            session.set_mode(mode)
            session.run_episodes(50, verbose=True)
            print()
            print(session.summary())

    print()
    print(session.model.summary())


if __name__ == "__main__":
    main()
