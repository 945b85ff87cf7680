# benchmark.py
import os
import json
import time
import logging
import numpy as np
from cache import CacheGeometry, ReplacementPolicy
from instructions import Instruction, Operation
from simulator import build_cache, simulate

logger = logging.getLogger(__name__)


class TraceGenerator:
    """
    Synthetic load/store trace over a byte address space.
    Patterns: "sequential" walks block by block with wrap-around, "random"
    picks uniformly, "mixed" is mostly sequential with some random jumps.
    """

    def __init__(self, rng, num_requests=10000, address_space_bytes=65536,
                 block_size=32, read_ratio=0.8, access_pattern="mixed"):
        if access_pattern not in ("sequential", "random", "mixed"):
            raise ValueError(f"Unknown access pattern {access_pattern!r}")
        self.rng = rng
        self.num_requests = num_requests
        self.block_size = block_size
        self.num_blocks = max(1, address_space_bytes // block_size)
        self.read_ratio = read_ratio
        self.access_pattern = access_pattern
        self._seq_ptr = 0

    def _next_sequential(self):
        block = self._seq_ptr
        self._seq_ptr = (block + 1) % self.num_blocks
        return block

    def _next_block(self):
        if self.access_pattern == "sequential":
            return self._next_sequential()
        elif self.access_pattern == "random":
            return int(self.rng.integers(0, self.num_blocks))
        else:  # mixed
            if self.rng.random() < 0.8:
                return self._next_sequential()
            return int(self.rng.integers(0, self.num_blocks))

    def generate(self):
        trace = []
        for _ in range(self.num_requests):
            offset = int(self.rng.integers(0, self.block_size))
            address = self._next_block() * self.block_size + offset
            op = Operation.LOAD if self.rng.random() < self.read_ratio else Operation.STORE
            trace.append(Instruction(op, address))
        return trace


class BenchmarkRunner:
    def __init__(self, cfg):
        self.cfg = cfg
        bench_cfg = cfg.get("benchmark", {})
        self.seed = bench_cfg.get("random_seed", None)
        self.rng = np.random.default_rng(self.seed)
        self.cache_cfg = cfg.get("cache", {})
        # rejects a bad geometry before any trace is generated
        self.geometry = CacheGeometry(
            self.cache_cfg.get("size_bytes", 1024),
            self.cache_cfg.get("block_size_bytes", 32),
            self.cache_cfg.get("associativity", 2),
        )
        self.policies = [ReplacementPolicy.parse(p)
                         for p in bench_cfg.get("policies", [p.value for p in ReplacementPolicy])]
        self.generator = TraceGenerator(
            self.rng,
            num_requests=bench_cfg.get("num_requests", 10000),
            address_space_bytes=bench_cfg.get("address_space_bytes", 65536),
            block_size=self.geometry.block_size,
            read_ratio=bench_cfg.get("read_ratio", 0.8),
            access_pattern=bench_cfg.get("access_pattern", "mixed"),
        )

    def run(self):
        """Replay one generated trace against a fresh cache per policy."""
        trace = self.generator.generate()
        logger.info("Generated %d-instruction %s trace", len(trace), self.generator.access_pattern)
        summaries = []
        for policy in self.policies:
            cache_cfg = dict(self.cache_cfg, policy=policy.value)
            # one independent random stream per policy
            cache = build_cache(cache_cfg, rng=np.random.default_rng(int(self.rng.integers(0, 2**32))))
            start = time.time()
            result = simulate(cache, trace)
            end = time.time()
            stats = cache.stats()
            summary = {
                "policy": policy.value,
                "total_requests": result.accesses,
                "hit_rate": result.hit_rate,
                "avg_cycles_per_access": result.total_cycles / result.accesses if result.accesses else 0,
                "evictions": stats["evictions"],
                "used_lines": stats["used_lines"],
                "num_sets": stats["num_sets"],
                "duration_s": end - start,
            }
            summary.update(result.to_dict())
            summaries.append(summary)
        return summaries

    def save_results(self, summaries, out_cfg):
        results_dir = out_cfg.get("results_dir", "results")
        os.makedirs(results_dir, exist_ok=True)
        path = os.path.join(results_dir, out_cfg.get("results_file", "results.json"))
        with open(path, "w") as f:
            json.dump({"cache": self.cache_cfg, "random_seed": self.seed, "runs": summaries}, f, indent=2)
        return path
