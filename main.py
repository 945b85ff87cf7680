# main.py
import argparse
import json
import logging
import os
import sys

from benchmark import BenchmarkRunner
from cache import ReplacementPolicy
from instructions import load_trace, read_trace
from simulator import format_result, run_simulation
from visualize import plot_cycles_by_policy, plot_hit_miss_rate

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config.json"

CACHE_SIZES = [1024, 2048, 4096]
BLOCK_SIZES = [16, 32, 64]
ASSOCIATIVITIES = [2, 4, 8]
POLICIES = [
    ("LRU (Least Recently Used)", ReplacementPolicy.LRU),
    ("FIFO (First In, First Out)", ReplacementPolicy.FIFO),
    ("Random", ReplacementPolicy.RANDOM),
]


def load_config(path=DEFAULT_CONFIG):
    with open(path, "r") as f:
        return json.load(f)


def get_user_choice(input_fn, message, options):
    """Print a numbered menu and return the 0-based index of the choice."""
    print(message)
    for i, option in enumerate(options, start=1):
        print(f"{i}. {option}")
    try:
        answer = input_fn("Choose: ")
    except EOFError:
        raise ValueError("No choice given.") from None
    try:
        choice = int(answer)
    except ValueError:
        raise ValueError("Invalid choice, try again.") from None
    if choice < 1 or choice > len(options):
        raise ValueError("Invalid choice, try again.")
    return choice - 1


def _read_lines(input_fn):
    while True:
        try:
            yield input_fn("")
        except EOFError:
            return


def prompt_simulation(input_fn=input):
    """Ask for a cache configuration through numbered menus, then read commands until 'exit'."""
    size = CACHE_SIZES[get_user_choice(input_fn, "Select cache size:", [f"{s} bytes" for s in CACHE_SIZES])]
    block = BLOCK_SIZES[get_user_choice(input_fn, "Select block size:", [f"{b} bytes" for b in BLOCK_SIZES])]
    assoc = ASSOCIATIVITIES[get_user_choice(input_fn, "Select associativity:",
                                            [f"{a}-way" for a in ASSOCIATIVITIES])]
    policy = POLICIES[get_user_choice(input_fn, "Select replacement policy:", [p[0] for p in POLICIES])][1]

    print("\nEnter commands (e.g., L 100, S 200) - type 'exit' to quit:")
    trace = read_trace(_read_lines(input_fn))
    cache_cfg = {
        "size_bytes": size,
        "block_size_bytes": block,
        "associativity": assoc,
        "policy": policy.value,
    }
    return cache_cfg, trace


def run_benchmark(cfg):
    runner = BenchmarkRunner(cfg)
    print("Starting benchmark with config:", cfg.get("benchmark", {}))
    summaries = runner.run()
    out_cfg = cfg.get("output", {})
    results_path = runner.save_results(summaries, out_cfg)
    for s in summaries:
        print(f"{s['policy']:>6}: hit rate {s['hit_rate']:.3f}, {s['total_cycles']} cycles")
    print("Results saved to:", results_path)

    plot_hit_miss_rate(summaries, out_cfg.get("hitmiss_plot", "results/hit_miss_rate.png"))
    plot_cycles_by_policy(summaries, out_cfg.get("cycles_plot", "results/cycles_by_policy.png"))
    print("Plots saved in", out_cfg.get("results_dir", "results") + "/")
    return summaries


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Set-associative cache simulator")
    ap.add_argument("--config", default=DEFAULT_CONFIG, help="JSON configuration file")
    ap.add_argument("--trace", help="trace file to replay (overrides trace.path in the config)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--interactive", action="store_true", help="prompt for cache settings and commands")
    mode.add_argument("--benchmark", action="store_true", help="run the synthetic per-policy benchmark")
    ap.add_argument("--log-level", help="logging level (overrides logging.level in the config)")
    return ap.parse_args(argv)


def main(argv=None, input_fn=input):
    args = parse_args(argv)
    try:
        if args.config != DEFAULT_CONFIG or os.path.exists(args.config):
            cfg = load_config(args.config)
        else:
            cfg = {}
        level = args.log_level or cfg.get("logging", {}).get("level", "WARNING")
        if isinstance(level, str):
            level = level.upper()
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

        if args.benchmark:
            run_benchmark(cfg)
            return 0

        if args.interactive:
            cache_cfg, trace = prompt_simulation(input_fn)
        else:
            cache_cfg = cfg.get("cache", {})
            trace_path = args.trace or cfg.get("trace", {}).get("path")
            if not trace_path:
                raise ValueError("No trace given: pass --trace or set trace.path in the config")
            trace = load_trace(trace_path)

        result = run_simulation(cache_cfg, trace)
        print(format_result(result))
        return 0
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        print("Error: " + str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
