# cache.py
import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a cache cannot be built from the given parameters."""


class ReplacementPolicy(Enum):
    LRU = "LRU"
    FIFO = "FIFO"
    RANDOM = "Random"

    @classmethod
    def parse(cls, name):
        if isinstance(name, cls):
            return name
        for policy in cls:
            if str(name).strip().lower() == policy.value.lower():
                return policy
        raise ConfigurationError(
            f"Unknown replacement policy {name!r} (expected one of: "
            + ", ".join(p.value for p in cls) + ")"
        )


class CacheGeometry:
    """
    Address decomposition for a set-associative cache.
    A byte address maps to block number address // block_size, which is then
    split into set index (block % num_sets) and tag (block // num_sets).
    """

    def __init__(self, cache_size, block_size, associativity):
        for name, value in (("cache size", cache_size),
                            ("block size", block_size),
                            ("associativity", associativity)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        if cache_size % (block_size * associativity) != 0:
            raise ConfigurationError(
                f"cache size {cache_size} is not a multiple of "
                f"block size x associativity ({block_size} x {associativity})"
            )
        self.cache_size = int(cache_size)
        self.block_size = int(block_size)
        self.associativity = int(associativity)
        self.num_sets = self.cache_size // (self.block_size * self.associativity)

    def set_index(self, address):
        return (address // self.block_size) % self.num_sets

    def tag(self, address):
        return (address // self.block_size) // self.num_sets

    def decompose(self, address):
        block = address // self.block_size
        return block % self.num_sets, block // self.num_sets

    def __repr__(self):
        return (f"CacheGeometry(cache_size={self.cache_size}, block_size={self.block_size}, "
                f"associativity={self.associativity}, num_sets={self.num_sets})")


class Block:
    """One cache line slot. Tag and timestamps are meaningless while invalid."""

    __slots__ = ("valid", "tag", "last_used_time", "arrival_time")

    def __init__(self):
        self.valid = False
        self.tag = -1
        self.last_used_time = 0
        self.arrival_time = 0

    def fill(self, tag, now):
        self.valid = True
        self.tag = tag
        self.last_used_time = now
        self.arrival_time = now

    def __repr__(self):
        return (f"Block(valid={self.valid}, tag={self.tag}, "
                f"last_used={self.last_used_time}, arrival={self.arrival_time})")


def _lru_victim(blocks, rng):
    # min() keeps the first of several equal keys
    return min(range(len(blocks)), key=lambda i: blocks[i].last_used_time)


def _fifo_victim(blocks, rng):
    return min(range(len(blocks)), key=lambda i: blocks[i].arrival_time)


def _random_victim(blocks, rng):
    return int(rng.integers(0, len(blocks)))


_VICTIM_SELECTORS = {
    ReplacementPolicy.LRU: _lru_victim,
    ReplacementPolicy.FIFO: _fifo_victim,
    ReplacementPolicy.RANDOM: _random_victim,
}


class SetAssociativeCache:
    """
    Set-associative cache model driven by a logical clock.
    The clock advances once per access and orders both recency (LRU) and
    arrival (FIFO). Random replacement draws from `rng`, which must expose
    numpy's Generator.integers(low, high); pass a seeded generator for
    reproducible runs.
    """

    def __init__(self, geometry, policy=ReplacementPolicy.LRU, rng=None):
        self.geometry = geometry
        self.policy = ReplacementPolicy.parse(policy)
        self.rng = rng if rng is not None else np.random.default_rng()
        self._select_victim = _VICTIM_SELECTORS[self.policy]
        self.sets = [[Block() for _ in range(geometry.associativity)]
                     for _ in range(geometry.num_sets)]
        self.clock = 0
        self.evictions = 0
        logger.info("Built %d-byte %d-way cache: %d sets of %d-byte blocks, %s replacement",
                    geometry.cache_size, geometry.associativity, geometry.num_sets,
                    geometry.block_size, self.policy.value)

    def access(self, address, op=None):
        """
        Access byte `address`. Return True if hit, False if miss.
        A miss fills the first empty block of the set, or evicts the block
        chosen by the replacement policy when the set is full.
        """
        self.clock += 1
        set_index, tag = self.geometry.decompose(address)
        blocks = self.sets[set_index]

        empty_index = -1
        for i, block in enumerate(blocks):
            if block.valid and block.tag == tag:
                block.last_used_time = self.clock
                logger.debug("%s %d: hit in set %d (tag %d)", op or "access", address, set_index, tag)
                return True
            if not block.valid and empty_index == -1:
                empty_index = i

        if empty_index != -1:
            blocks[empty_index].fill(tag, self.clock)
            logger.debug("%s %d: miss in set %d, placed tag %d in block %d",
                         op or "access", address, set_index, tag, empty_index)
        else:
            victim = self._select_victim(blocks, self.rng)
            logger.debug("%s %d: miss in set %d, evicting tag %d from block %d",
                         op or "access", address, set_index, blocks[victim].tag, victim)
            blocks[victim].fill(tag, self.clock)
            self.evictions += 1
        return False

    def stats(self):
        used_lines = sum(1 for s in self.sets for b in s if b.valid)
        return {
            "cache_size_bytes": self.geometry.cache_size,
            "block_size": self.geometry.block_size,
            "associativity": self.geometry.associativity,
            "num_sets": self.geometry.num_sets,
            "policy": self.policy.value,
            "clock": self.clock,
            "used_lines": used_lines,
            "evictions": self.evictions,
        }
