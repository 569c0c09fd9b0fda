import enum
from typing import Any, NamedTuple


class ExceptionFlags(enum.Flag):
    """IEEE 754 status flags, bit positions as in the RISC-V fflags CSR"""

    NONE = 0
    INEXACT = 0x01
    UNDERFLOW = 0x02
    OVERFLOW = 0x04
    DIVIDE_BY_ZERO = 0x08
    INVALID = 0x10


class OperationResult(NamedTuple):
    value: Any
    flags: ExceptionFlags = ExceptionFlags.NONE


class FlagAccumulator:
    """Caller-owned sticky flag register.

    Flags OR in on every `record` and stay set until `clear`. One accumulator
    belongs to one thread of control; workers keep their own and the caller
    folds them together with `merge`.
    """

    def __init__(self, flags: ExceptionFlags = ExceptionFlags.NONE):
        self.flags = flags

    def record(self, flags: ExceptionFlags) -> ExceptionFlags:
        self.flags |= flags
        return self.flags

    def merge(self, other: "FlagAccumulator") -> ExceptionFlags:
        return self.record(other.flags)

    def clear(self) -> ExceptionFlags:
        raised = self.flags
        self.flags = ExceptionFlags.NONE
        return raised

    def __contains__(self, flag: ExceptionFlags) -> bool:
        return flag in self.flags

    def __repr__(self):
        return f"FlagAccumulator({self.flags!r})"
