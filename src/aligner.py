from amaranth import *
from amaranth.build import Platform
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out


def shift_right_sticky(value: int, amount: int) -> tuple[int, bool]:
    """Right shift that reports whether any set bit was shifted out"""
    if amount <= 0:
        return value, False
    lost = value & ((1 << amount) - 1)
    return value >> amount, lost != 0


class Aligner(wiring.Component):
    def __init__(self, width: int = 26):
        self.width = width
        self.shift_bits = width.bit_length()

        super().__init__(
            {
                "value_in": In(width),
                "shift_amount": In(self.shift_bits),
                "value_out": Out(width),
                "sticky": Out(1),
            }
        )

    def elaborate(self, platform: Platform | None) -> Module:
        m = Module()

        m.d.comb += self.value_out.eq(self.value_in >> self.shift_amount)

        # ---- Sticky ----
        # shifting back loses nothing iff no set bit fell off the bottom
        m.d.comb += self.sticky.eq((self.value_out << self.shift_amount) != self.value_in)

        return m
