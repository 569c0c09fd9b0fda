import enum
import logging
import struct

import adder
import comparator
import converter
import divider
import fma
import multiplier
import square_root
from flags import ExceptionFlags, FlagAccumulator, OperationResult
from float_format import BFLOAT16, DOUBLE, HALF, QUAD, SINGLE, FormatSpec
from rounder import RoundingMode

logger = logging.getLogger(__name__)


class Opcode(enum.Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    SQRT = "sqrt"
    FMA = "fma"
    EQ = "eq"
    LT = "lt"
    LE = "le"
    CONVERT = "convert"
    INT_TO_FLOAT = "int_to_float"
    FLOAT_TO_INT = "float_to_int"


class SoftFloat:
    """Soft-float engine bound to one FormatSpec.

    Every method is a pure function of its operands and rounding mode and
    returns the flags raised by that call alone. Pass a FlagAccumulator to
    `evaluate` to collect sticky flags across calls.
    """

    def __init__(self, fmt: FormatSpec):
        self.fmt = fmt

        self._cores = {
            Opcode.ADD: self.add,
            Opcode.SUB: self.sub,
            Opcode.MUL: self.mul,
            Opcode.DIV: self.div,
            Opcode.SQRT: self.sqrt,
            Opcode.FMA: self.fma,
            Opcode.EQ: lambda a, b, mode: self._predicate(comparator.equal, a, b),
            Opcode.LT: lambda a, b, mode: self._predicate(comparator.less_than, a, b),
            Opcode.LE: lambda a, b, mode: self._predicate(comparator.less_or_equal, a, b),
            Opcode.CONVERT: self.convert_to,
            Opcode.INT_TO_FLOAT: self.from_int,
            Opcode.FLOAT_TO_INT: self.to_int,
        }

    def __repr__(self):
        fmt = self.fmt
        return f"SoftFloat(e{fmt.exp_width}m{fmt.mant_width})"

    def evaluate(
        self,
        opcode: Opcode,
        *operands: int,
        mode=RoundingMode.TO_NEAREST_EVEN,
        accumulator: FlagAccumulator | None = None,
    ) -> OperationResult:
        opcode = Opcode(opcode)
        mode = RoundingMode(mode)

        core = self._cores[opcode]
        result = core(*operands, mode)

        if result.flags != ExceptionFlags.NONE:
            logger.debug("%r %s%r mode=%s raised %s", self, opcode.name, operands, mode.name, result.flags)
        if accumulator is not None:
            accumulator.record(result.flags)

        return result

    # ---- Arithmetic ----

    def add(self, a: int, b: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return adder.add(self.fmt, a, b, mode)

    def sub(self, a: int, b: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return adder.subtract(self.fmt, a, b, mode)

    def mul(self, a: int, b: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return multiplier.multiply(self.fmt, a, b, mode)

    def div(self, a: int, b: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return divider.divide(self.fmt, a, b, mode)

    def sqrt(self, a: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return square_root.square_root(self.fmt, a, mode)

    def fma(self, a: int, b: int, c: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return fma.fused_multiply_add(self.fmt, a, b, c, mode)

    # ---- Comparison ----

    def compare(self, a: int, b: int) -> comparator.ComparisonResult:
        return comparator.compare(self.fmt, a, b)

    def _predicate(self, predicate, a: int, b: int) -> OperationResult:
        result = predicate(self.fmt, a, b)
        return OperationResult(int(result.value), result.flags)

    # ---- Conversion ----

    def convert_to(self, dst: FormatSpec, a: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return converter.convert(self.fmt, dst, a, mode)

    def from_int(self, value: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
        return converter.int_to_float(self.fmt, value, mode)

    def to_int(
        self,
        a: int,
        mode=RoundingMode.TO_NEAREST_EVEN,
        width: int = 32,
        signed: bool = True,
    ) -> OperationResult:
        return converter.float_to_int(self.fmt, a, mode, width, signed)

    def from_float(self, f: float, mode=RoundingMode.TO_NEAREST_EVEN) -> int:
        fp64_bits = struct.unpack(">Q", struct.pack(">d", f))[0]
        return converter.convert(DOUBLE, self.fmt, fp64_bits, mode).value

    def to_float(self, bits: int) -> float:
        fp64_bits = converter.convert(self.fmt, DOUBLE, bits).value
        return struct.unpack(">d", struct.pack(">Q", fp64_bits))[0]


half = SoftFloat(HALF)
single = SoftFloat(SINGLE)
double = SoftFloat(DOUBLE)
quad = SoftFloat(QUAD)
bfloat16 = SoftFloat(BFLOAT16)
