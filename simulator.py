# simulator.py
import logging
from dataclasses import dataclass, asdict

import numpy as np

from cache import CacheGeometry, ReplacementPolicy, SetAssociativeCache
from instructions import Operation

logger = logging.getLogger(__name__)

# Fixed cost model: a hit costs one cycle, a miss a memory round trip.
HIT_CYCLES = 1
MISS_CYCLES = 100


@dataclass(frozen=True)
class SimulationResult:
    load_count: int = 0
    load_misses: int = 0
    store_count: int = 0
    store_misses: int = 0
    total_cycles: int = 0

    @property
    def accesses(self):
        return self.load_count + self.store_count

    @property
    def misses(self):
        return self.load_misses + self.store_misses

    @property
    def hits(self):
        return self.accesses - self.misses

    @property
    def hit_rate(self):
        return self.hits / self.accesses if self.accesses else 0.0

    def to_dict(self):
        return asdict(self)


def simulate(cache, trace):
    """
    Replay `trace` (an iterable of Instruction) against `cache` in order and
    return the accumulated SimulationResult.
    """
    load_count = load_misses = 0
    store_count = store_misses = 0
    total_cycles = 0

    for instr in trace:
        hit = cache.access(instr.address, instr.op)
        if instr.op is Operation.STORE:
            store_count += 1
            if not hit:
                store_misses += 1
        else:
            load_count += 1
            if not hit:
                load_misses += 1
        total_cycles += HIT_CYCLES if hit else MISS_CYCLES

    result = SimulationResult(
        load_count=load_count,
        load_misses=load_misses,
        store_count=store_count,
        store_misses=store_misses,
        total_cycles=total_cycles,
    )
    logger.info("Simulated %d accesses: %d misses, %d cycles",
                result.accesses, result.misses, result.total_cycles)
    return result


def build_cache(cache_cfg, rng=None):
    """
    Build a SetAssociativeCache from a config mapping with keys size_bytes,
    block_size_bytes, associativity, policy and (optionally) random_seed.
    An explicit `rng` wins over random_seed.
    """
    geometry = CacheGeometry(
        cache_cfg.get("size_bytes", 1024),
        cache_cfg.get("block_size_bytes", 32),
        cache_cfg.get("associativity", 2),
    )
    policy = ReplacementPolicy.parse(cache_cfg.get("policy", "LRU"))
    if rng is None:
        rng = np.random.default_rng(cache_cfg.get("random_seed", None))
    return SetAssociativeCache(geometry, policy, rng=rng)


def run_simulation(cache_cfg, trace, rng=None):
    cache = build_cache(cache_cfg, rng=rng)
    return simulate(cache, trace)


def format_result(result):
    return "\n".join([
        "Simulation Results:",
        f"Load Count: {result.load_count}",
        f"Load Miss: {result.load_misses}",
        f"Store Count: {result.store_count}",
        f"Store Miss: {result.store_misses}",
        f"Total Cycles: {result.total_cycles}",
    ])
