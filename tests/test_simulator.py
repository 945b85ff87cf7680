import dataclasses

import numpy as np
import pytest

from cache import CacheGeometry, ConfigurationError, SetAssociativeCache
from instructions import Instruction, Operation, read_trace
from simulator import (
    HIT_CYCLES,
    MISS_CYCLES,
    SimulationResult,
    build_cache,
    format_result,
    run_simulation,
    simulate,
)

LRU_CFG = {"size_bytes": 1024, "block_size_bytes": 32, "associativity": 2, "policy": "LRU"}


def L(addr):
    return Instruction(Operation.LOAD, addr)


def S(addr):
    return Instruction(Operation.STORE, addr)


def random_trace(seed, n=500):
    rng = np.random.default_rng(seed)
    ops = rng.random(n) < 0.7
    addrs = rng.integers(0, 8192, size=n)
    return [L(int(a)) if is_load else S(int(a)) for is_load, a in zip(ops, addrs)]


def test_same_set_different_tag_scenario():
    result = run_simulation(LRU_CFG, [L(0), L(0), L(32768)])
    assert result == SimulationResult(load_count=3, load_misses=2, total_cycles=201)


def test_fifo_scenario_evicts_oldest_placement():
    cfg = dict(LRU_CFG, policy="FIFO")
    # fill set 0, touch the first block again, then bring in a third tag
    trace = [L(0), L(512), L(0), L(1024), L(0)]
    result = run_simulation(cfg, trace)
    assert result.load_misses == 4
    lru = run_simulation(LRU_CFG, trace)
    assert lru.load_misses == 3


def test_empty_trace_gives_zero_result():
    result = run_simulation(LRU_CFG, [])
    assert result == SimulationResult()
    assert result.hit_rate == 0.0


def test_store_accounting():
    result = run_simulation(LRU_CFG, [S(0), S(4), L(8), S(64)])
    assert result.store_count == 3
    assert result.store_misses == 2
    assert result.load_count == 1
    assert result.load_misses == 0
    assert result.total_cycles == 2 * MISS_CYCLES + 2 * HIT_CYCLES


@pytest.mark.parametrize("policy", ["LRU", "FIFO", "Random"])
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_counters_are_consistent(policy, seed):
    trace = random_trace(seed)
    result = run_simulation(dict(LRU_CFG, policy=policy, random_seed=seed), trace)
    assert result.load_count + result.store_count == len(trace)
    assert result.load_misses <= result.load_count
    assert result.store_misses <= result.store_count
    assert result.total_cycles == HIT_CYCLES * result.hits + MISS_CYCLES * result.misses


@pytest.mark.parametrize("policy", ["LRU", "FIFO"])
def test_lru_and_fifo_runs_are_deterministic(policy):
    trace = random_trace(11)
    cfg = dict(LRU_CFG, policy=policy)
    assert run_simulation(cfg, trace) == run_simulation(cfg, trace)


def test_seeded_random_runs_repeat():
    trace = random_trace(5)
    cfg = dict(LRU_CFG, policy="Random", random_seed=99)
    assert run_simulation(cfg, trace) == run_simulation(cfg, trace)


def test_first_touch_of_every_block_misses():
    # 64 distinct blocks spread across all sets
    trace = [L(i * 32) for i in range(64)]
    result = run_simulation(dict(LRU_CFG, size_bytes=4096), trace)
    assert result.load_misses == 64


def test_result_is_immutable():
    result = run_simulation(LRU_CFG, [L(0)])
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.load_count = 5


def test_simulate_accepts_a_prebuilt_cache():
    cache = SetAssociativeCache(CacheGeometry(2048, 64, 4), "FIFO")
    result = simulate(cache, read_trace(["L 0", "L 0", "S 0", "exit"]))
    assert result.hits == 2
    assert cache.clock == 3


def test_build_cache_rejects_bad_config_before_running():
    with pytest.raises(ConfigurationError):
        build_cache({"size_bytes": 1000, "block_size_bytes": 32, "associativity": 2})
    with pytest.raises(ConfigurationError):
        build_cache(dict(LRU_CFG, policy="LFU"))


def test_build_cache_defaults():
    cache = build_cache({})
    assert cache.geometry.num_sets == 16
    assert cache.policy.value == "LRU"


def test_format_result():
    text = format_result(SimulationResult(3, 2, 1, 0, 202))
    assert text.splitlines() == [
        "Simulation Results:",
        "Load Count: 3",
        "Load Miss: 2",
        "Store Count: 1",
        "Store Miss: 0",
        "Total Cycles: 202",
    ]
