"""Example workflows using the Erlang B calculator utilities."""

import numpy as np
from erlang_calculator import TABLES, History, erlang_b, inverse_erlang_b, solve


def run_basic_workflow() -> None:
    """Run the textbook three-trunk example and print the results."""
    traffic = 0.65
    channels = 3

    b = erlang_b(traffic, channels)
    a = inverse_erlang_b(channels, b)

    print("=== Basic Workflow ===")
    print(f"Erlang B Blocking: {b:.4f}")
    print(f"Recovered Traffic: {a:.4f} erlangs")


def run_combinations_example() -> History:
    """Solve one case for every pair of known parameters and print the history."""
    history = History()
    cases = [
        {"v": 3, "a": 0.65},
        {"v": 3, "b": 0.049},
        {"v": 3, "m": 0.618},
        {"a": 0.65, "b": 0.05},
        {"a": 0.65, "m": 0.6},
        {"b": 0.05, "m": 0.618},
    ]
    for values in cases:
        history.record(solve(values.keys(), values))
    print("=== All Combinations ===")
    print(history.to_frame())
    return history


def run_sensitivity_example() -> None:
    """Show how many trunks keep blocking at 1% as traffic grows."""
    traffic_range = np.linspace(1, 20, 5)
    df = TABLES.channels_vs_traffic(traffic_range, target_blocking=0.01)
    print("=== Trunk Sizing ===")
    print(df)


if __name__ == "__main__":
    run_basic_workflow()
    run_combinations_example()
    run_sensitivity_example()
