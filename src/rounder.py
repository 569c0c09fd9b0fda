import enum

from amaranth import *
from amaranth.build import Platform
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out

from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from normalizer import Normalized, normalize


class RoundingMode(enum.IntEnum):
    TO_NEAREST_EVEN = 0
    TOWARD_ZERO = 1
    TOWARD_NEGATIVE = 2
    TOWARD_POSITIVE = 3


def round_increment(mode: RoundingMode, sign: bool, lsb: bool, guard: bool, sticky: bool) -> bool:
    if mode == RoundingMode.TO_NEAREST_EVEN:
        return guard and (sticky or lsb)
    if mode == RoundingMode.TOWARD_ZERO:
        return False
    if mode == RoundingMode.TOWARD_POSITIVE:
        return not sign and (guard or sticky)
    return sign and (guard or sticky)


def overflow_result(fmt: FormatSpec, sign: bool, mode: RoundingMode) -> OperationResult:
    """Infinity, or the largest finite value when the mode rounds toward it"""
    if mode == RoundingMode.TOWARD_ZERO:
        to_infinity = False
    elif mode == RoundingMode.TOWARD_POSITIVE:
        to_infinity = not sign
    elif mode == RoundingMode.TOWARD_NEGATIVE:
        to_infinity = sign
    else:
        to_infinity = True

    bits = fmt.infinity(sign) if to_infinity else fmt.max_finite(sign)
    return OperationResult(bits, ExceptionFlags.OVERFLOW | ExceptionFlags.INEXACT)


def round_normalized(fmt: FormatSpec, n: Normalized, mode: RoundingMode) -> OperationResult:
    if n.overflow:
        return overflow_result(fmt, n.sign, mode)

    flags = ExceptionFlags.NONE
    significand = n.significand
    exponent = n.exponent

    if n.guard or n.sticky:
        flags |= ExceptionFlags.INEXACT
        if n.tiny:
            flags |= ExceptionFlags.UNDERFLOW

        if round_increment(mode, n.sign, bool(significand & 1), n.guard, n.sticky):
            significand += 1
            # NOTE: all-ones mantissa carried into bit mant_width + 1
            if significand >> (fmt.mant_width + 1):
                significand >>= 1
                exponent += 1
                if exponent >= fmt.exp_max:
                    return OperationResult(fmt.infinity(n.sign), flags | ExceptionFlags.OVERFLOW)

    # subnormal that rounded up to the smallest normal
    if exponent == 0 and significand >> fmt.mant_width:
        exponent = 1

    return OperationResult(fmt.pack(n.sign, exponent, significand & fmt.mant_mask), flags)


def round_pack(
    fmt: FormatSpec,
    sign: bool,
    exponent: int,
    significand: int,
    extra_bits: int,
    mode: RoundingMode,
    sticky: bool = False,
) -> OperationResult:
    """normalize() followed by round_normalized()"""
    n = normalize(fmt, sign, exponent, significand, extra_bits, sticky)
    return round_normalized(fmt, n, mode)


class Rounder(wiring.Component):
    def __init__(self, width: int = 8):
        self.width = width

        super().__init__(
            {
                "mantissa_in": In(width),
                "guard": In(1),
                "round_bit": In(1),
                "sticky": In(1),
                "sign": In(1),
                "mode": In(2),
                "mantissa_out": Out(width),
                "overflow": Out(1),
                "inexact": Out(1),
            }
        )

    def elaborate(self, platform: Platform | None) -> Module:
        m = Module()

        lsb = self.mantissa_in[0]
        lost = Signal()
        m.d.comb += lost.eq(self.round_bit | self.sticky)

        round_up = Signal()
        with m.Switch(self.mode):
            with m.Case(RoundingMode.TO_NEAREST_EVEN):
                m.d.comb += round_up.eq(self.guard & (lost | lsb))
            with m.Case(RoundingMode.TOWARD_ZERO):
                m.d.comb += round_up.eq(0)
            with m.Case(RoundingMode.TOWARD_NEGATIVE):
                m.d.comb += round_up.eq(self.sign & (self.guard | lost))
            with m.Case(RoundingMode.TOWARD_POSITIVE):
                m.d.comb += round_up.eq(~self.sign & (self.guard | lost))

        incremented = Signal(self.width + 1)
        m.d.comb += incremented.eq(self.mantissa_in + round_up)

        m.d.comb += self.mantissa_out.eq(incremented[0 : self.width])
        m.d.comb += self.overflow.eq(incremented[self.width])
        m.d.comb += self.inexact.eq(self.guard | lost)

        return m
