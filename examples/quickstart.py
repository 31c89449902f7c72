"""
Quick start example for Dynagrid.

Demonstrates the core workflow:
1. Create a session on the small preset grid
2. Take a few single steps and read their explanations
3. Fast-forward through episodes and inspect what was learned
"""

from dynagrid import AgentParams, Session, greedy_policy


def main():
    session = Session(params=AgentParams(alpha=0.5, gamma=0.9, epsilon=0.1), seed=42)

    print("Dynagrid — Quick Start")
    print("=" * 50)
    print(f"Grid: {session.grid.name}")
    print()

    # --- Single steps with explanations ---
    for _ in range(3):
        result = session.step()
        if result is None:
            print("(new episode started)")
            continue
        print(result.record.calculation)
        print(result.record.reasoning)
        print("-" * 50)

    # --- Fast-forward ---
    print("\nTraining for 100 episodes...")
    session.run_episodes(100, verbose=True)

    print()
    print(session.summary())

    # --- Learned policy ---
    policy = greedy_policy(session.q_table, session.grid)
    print("\n  Greedy policy:")
    for cell, action in policy.items():
        label = action.name if action is not None else "-"
        print(f"    {str(cell):8s} {label}")

    print()
    print(session.context_summary())


if __name__ == "__main__":
    main()
