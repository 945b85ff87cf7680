# instructions.py
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL = "exit"


class MalformedInstructionError(ValueError):
    """Raised for trace lines or instructions the simulator cannot replay."""


class Operation(Enum):
    LOAD = "Load"
    STORE = "Store"

    @classmethod
    def parse(cls, token):
        key = str(token).strip().lower()
        if key in ("l", "load"):
            return cls.LOAD
        if key in ("s", "store"):
            return cls.STORE
        raise MalformedInstructionError(f"Unknown operation {token!r} (expected L/Load or S/Store)")

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Instruction:
    op: Operation
    address: int

    def __post_init__(self):
        if not isinstance(self.op, Operation):
            raise MalformedInstructionError(f"Unknown operation {self.op!r}")
        if isinstance(self.address, bool) or not isinstance(self.address, int):
            raise MalformedInstructionError(f"Address must be an integer, got {self.address!r}")
        if self.address < 0:
            raise MalformedInstructionError(f"Address must be non-negative, got {self.address}")


def _parse_address(token):
    text = token.strip().lower()
    try:
        if text.startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        raise MalformedInstructionError(f"Invalid address {token!r}") from None


def parse_instruction(line):
    """Parse one trace line such as "L 100", "S 0x40" or "Store 2048"."""
    parts = line.split()
    if len(parts) != 2:
        raise MalformedInstructionError(f"Expected '<op> <address>', got {line.strip()!r}")
    return Instruction(Operation.parse(parts[0]), _parse_address(parts[1]))


def read_trace(lines, sentinel=DEFAULT_SENTINEL):
    """
    Parse trace lines until `sentinel` (case-insensitive) or end of input.
    Blank lines and lines starting with '#' are skipped. Parse errors are
    re-raised with the 1-based line number attached.
    """
    trace = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if sentinel is not None and line.lower() == sentinel.lower():
            logger.debug("Trace sentinel reached at line %d", lineno)
            break
        if not line or line.startswith("#"):
            continue
        try:
            trace.append(parse_instruction(line))
        except MalformedInstructionError as e:
            raise MalformedInstructionError(f"line {lineno}: {e}") from e
    return trace


def load_trace(path, sentinel=DEFAULT_SENTINEL):
    with open(path, "r") as f:
        trace = read_trace(f, sentinel=sentinel)
    logger.info("Loaded %d instructions from %s", len(trace), path)
    return trace
