from amaranth import *
from amaranth.build import Platform
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out

from flags import ExceptionFlags, OperationResult
from float_format import FloatKind, FloatValue, FormatSpec


def classify(fmt: FormatSpec, bits: int) -> FloatKind:
    _, exp, mant = fmt.unpack(bits & fmt.width_mask)

    if exp == 0:
        return FloatKind.ZERO if mant == 0 else FloatKind.SUBNORMAL
    if exp == fmt.exp_max:
        if mant == 0:
            return FloatKind.INFINITY
        if mant & fmt.quiet_bit:
            return FloatKind.QUIET_NAN
        return FloatKind.SIGNALING_NAN
    return FloatKind.NORMAL


def decode(fmt: FormatSpec, bits: int) -> FloatValue:
    bits &= fmt.width_mask
    sign, exp, mant = fmt.unpack(bits)
    return FloatValue(bool(sign), exp, mant, classify(fmt, bits))


def encode(fmt: FormatSpec, value: FloatValue) -> int:
    return fmt.pack(value.sign, value.biased_exponent, value.mantissa)


def nan_result(fmt: FormatSpec, *operands: FloatValue) -> OperationResult:
    """Canonical quiet NaN; INVALID only when a signaling NaN was consumed"""
    flags = ExceptionFlags.NONE
    if any(v.is_signaling for v in operands):
        flags = ExceptionFlags.INVALID
    return OperationResult(fmt.quiet_nan(), flags)


def expand(fmt: FormatSpec, value: FloatValue) -> tuple[int, int]:
    """(exponent, significand) with the implicit bit made explicit.

    Subnormals share the scale of exponent 1 and carry an implicit 0.
    """
    if value.biased_exponent == 0:
        return 1, value.mantissa
    return value.biased_exponent, (1 << fmt.mant_width) | value.mantissa


def significand(fmt: FormatSpec, value: FloatValue) -> tuple[int, int]:
    """(exponent, significand) with the leading one at bit mant_width.

    Subnormals are shifted up and get exponents <= 0.
    """
    exp, sig = expand(fmt, value)
    shift = fmt.mant_width + 1 - sig.bit_length()
    return exp - shift, sig << shift


class Classifier(wiring.Component):
    """One-hot IEEE class of a packed operand"""

    def __init__(self, fmt: FormatSpec):
        self.fmt = fmt

        super().__init__(
            {
                "value": In(fmt.layout),
                "is_zero": Out(1),
                "is_subnormal": Out(1),
                "is_normal": Out(1),
                "is_infinite": Out(1),
                "is_quiet_nan": Out(1),
                "is_signaling_nan": Out(1),
            }
        )

    def elaborate(self, platform: Platform | None) -> Module:
        m = Module()

        exp_zero = Signal()
        exp_ones = Signal()
        mant_zero = Signal()
        quiet = Signal()

        m.d.comb += exp_zero.eq(self.value.exponent == 0)
        m.d.comb += exp_ones.eq(self.value.exponent == self.fmt.exp_max)
        m.d.comb += mant_zero.eq(self.value.mantissa == 0)
        m.d.comb += quiet.eq(self.value.mantissa[-1])

        m.d.comb += self.is_zero.eq(exp_zero & mant_zero)
        m.d.comb += self.is_subnormal.eq(exp_zero & ~mant_zero)
        m.d.comb += self.is_normal.eq(~exp_zero & ~exp_ones)
        m.d.comb += self.is_infinite.eq(exp_ones & mant_zero)
        m.d.comb += self.is_quiet_nan.eq(exp_ones & ~mant_zero & quiet)
        m.d.comb += self.is_signaling_nan.eq(exp_ones & ~mant_zero & ~quiet)

        return m
