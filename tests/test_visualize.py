import matplotlib

matplotlib.use("Agg")

from visualize import plot_cycles_by_policy, plot_hit_miss_rate  # noqa: E402

SUMMARIES = [
    {"policy": "LRU", "hit_rate": 0.75, "total_cycles": 2530},
    {"policy": "FIFO", "hit_rate": 0.7, "total_cycles": 3070},
    {"policy": "Random", "hit_rate": 0.68, "total_cycles": 3268},
]


def test_plots_are_written(tmp_path):
    hitmiss = tmp_path / "plots" / "hit_miss.png"
    cycles = tmp_path / "plots" / "cycles.png"
    plot_hit_miss_rate(SUMMARIES, str(hitmiss))
    plot_cycles_by_policy(SUMMARIES, str(cycles))
    assert hitmiss.stat().st_size > 0
    assert cycles.stat().st_size > 0
