from typing import NamedTuple

from amaranth import *
from amaranth.build import Platform
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out

from aligner import shift_right_sticky
from float_format import FormatSpec


class Normalized(NamedTuple):
    sign: bool
    exponent: int
    significand: int
    guard: bool
    sticky: bool
    tiny: bool = False
    overflow: bool = False


def normalize(
    fmt: FormatSpec,
    sign: bool,
    exponent: int,
    significand: int,
    extra_bits: int,
    sticky: bool = False,
) -> Normalized:
    """Bring a raw significand back to canonical position.

    The input encodes ``significand * 2**(exponent - bias - mant_width - extra_bits)``,
    so a significand whose leading one sits at bit ``mant_width + extra_bits``
    needs no shift. ``sticky`` carries bits already lost below bit 0 (e.g. a
    division remainder). The significand must be nonzero.

    The returned significand holds ``mant_width + 1`` bits; ``exponent`` is 0
    for subnormal results, in which case the implicit bit is 0.
    """
    target = fmt.mant_width + extra_bits

    # ---- Leading one to canonical position ----
    shift = significand.bit_length() - 1 - target
    if shift > 0:
        significand, lost = shift_right_sticky(significand, shift)
        sticky |= lost
    elif shift < 0:
        significand <<= -shift
    exponent += shift

    if exponent >= fmt.exp_max:
        return Normalized(sign, exponent, 0, False, True, overflow=True)

    # ---- Denormalize ----
    tiny = exponent <= 0
    if tiny:
        significand, lost = shift_right_sticky(significand, 1 - exponent)
        sticky |= lost
        exponent = 0

    # ---- Split off guard and sticky ----
    guard = bool((significand >> (extra_bits - 1)) & 1)
    sticky |= (significand & ((1 << (extra_bits - 1)) - 1)) != 0
    significand >>= extra_bits

    return Normalized(sign, exponent, significand, guard, sticky, tiny=tiny)


class Normalizer(wiring.Component):
    """Leading-one detector + barrel shifter (left-shift)

    - shift_amount is the leading zero count, width when value_in is 0
    """

    def __init__(self, width: int = 26):
        self.width = width
        self.count_bits = width.bit_length()

        super().__init__(
            {
                "value_in": In(width),
                "value_out": Out(width),
                "shift_amount": Out(self.count_bits),
                "zero": Out(1),
            }
        )

    def elaborate(self, platform: Platform | None) -> Module:
        m = Module()

        # ---- Leading Zero Count ----
        lz_count = self.width
        for i in range(self.width):
            lz_count = Mux(self.value_in[i], self.width - 1 - i, lz_count)

        m.d.comb += self.shift_amount.eq(lz_count)
        m.d.comb += self.zero.eq(self.value_in == 0)

        # ---- Left Shift ----
        m.d.comb += self.value_out.eq(self.value_in << self.shift_amount)

        return m
