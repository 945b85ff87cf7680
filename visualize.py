# visualize.py
import os
import matplotlib.pyplot as plt


def _ensure_dir(outpath):
    dirname = os.path.dirname(outpath)
    if dirname:
        os.makedirs(dirname, exist_ok=True)


def plot_hit_miss_rate(summaries, outpath):
    """Stacked hit/miss share per replacement policy."""
    _ensure_dir(outpath)
    labels = [s["policy"] for s in summaries]
    hit_rates = [s["hit_rate"] for s in summaries]
    miss_rates = [1.0 - r for r in hit_rates]
    plt.figure(figsize=(6, 4))
    plt.bar(labels, hit_rates, label="Hit")
    plt.bar(labels, miss_rates, bottom=hit_rates, label="Miss")
    plt.title("Cache Hit/Miss Rate by Policy")
    plt.ylabel("Fraction of accesses")
    plt.ylim(0, 1)
    plt.legend()
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()


def plot_cycles_by_policy(summaries, outpath):
    _ensure_dir(outpath)
    labels = [s["policy"] for s in summaries]
    cycles = [s["total_cycles"] for s in summaries]
    plt.figure(figsize=(6, 4))
    plt.bar(labels, cycles)
    for i, c in enumerate(cycles):
        plt.annotate(str(c), (i, c), ha="center", va="bottom")
    plt.title("Total Cycles by Policy")
    plt.ylabel("Cycles")
    plt.grid(True, axis="y")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
