import itertools
import sys

from amaranth.sim import Simulator

import rounder
from flags import ExceptionFlags
from float_format import HALF
from normalizer import Normalized
from rounder import RoundingMode

RNE = RoundingMode.TO_NEAREST_EVEN
RTZ = RoundingMode.TOWARD_ZERO
RDN = RoundingMode.TOWARD_NEGATIVE
RUP = RoundingMode.TOWARD_POSITIVE


def test_round_increment_table():
    test_cases = [
        # (mode, sign, lsb, guard, sticky, expected)
        (RNE, False, 0, False, False, False),
        (RNE, False, 0, True, False, False),  # tie, even stays
        (RNE, False, 1, True, False, True),  # tie, odd rounds to even
        (RNE, True, 0, True, True, True),
        (RNE, False, 1, False, True, False),
        (RTZ, False, 1, True, True, False),
        (RTZ, True, 1, True, True, False),
        (RUP, False, 0, False, True, True),
        (RUP, True, 0, True, True, False),
        (RUP, False, 0, False, False, False),
        (RDN, True, 0, False, True, True),
        (RDN, False, 0, True, True, False),
        (RDN, True, 1, False, False, False),
    ]

    for mode, sign, lsb, guard, sticky, expected in test_cases:
        result = rounder.round_increment(mode, sign, bool(lsb), guard, sticky)
        assert result == expected, f"{mode.name} sign={sign} l={lsb} g={guard} s={sticky}: got {result}"


def test_round_normalized_exact():
    n = Normalized(False, 15, 0b110_0000_0000, False, False)

    assert rounder.round_normalized(HALF, n, RNE) == (0x3E00, ExceptionFlags.NONE)


def test_round_normalized_inexact():
    n = Normalized(True, 15, 0b100_0000_0001, True, False)

    assert rounder.round_normalized(HALF, n, RNE) == (0xBC02, ExceptionFlags.INEXACT)
    assert rounder.round_normalized(HALF, n, RTZ) == (0xBC01, ExceptionFlags.INEXACT)
    assert rounder.round_normalized(HALF, n, RUP) == (0xBC01, ExceptionFlags.INEXACT)
    assert rounder.round_normalized(HALF, n, RDN) == (0xBC02, ExceptionFlags.INEXACT)


def test_round_normalized_mantissa_carry():
    n = Normalized(False, 15, 0b111_1111_1111, True, True)

    assert rounder.round_normalized(HALF, n, RNE) == (0x4000, ExceptionFlags.INEXACT)


def test_round_normalized_carry_into_infinity():
    n = Normalized(False, 30, 0b111_1111_1111, True, False)
    overflow = ExceptionFlags.OVERFLOW | ExceptionFlags.INEXACT

    assert rounder.round_normalized(HALF, n, RNE) == (0x7C00, overflow)
    assert rounder.round_normalized(HALF, n, RTZ) == (0x7BFF, ExceptionFlags.INEXACT)


def test_round_normalized_subnormal_to_normal():
    n = Normalized(False, 0, 0b011_1111_1111, True, True, tiny=True)
    underflow = ExceptionFlags.UNDERFLOW | ExceptionFlags.INEXACT

    assert rounder.round_normalized(HALF, n, RNE) == (0x0400, underflow)
    assert rounder.round_normalized(HALF, n, RTZ) == (0x03FF, underflow)


def test_round_normalized_exact_subnormal_no_underflow():
    n = Normalized(False, 0, 0b000_0000_0001, False, False, tiny=True)

    assert rounder.round_normalized(HALF, n, RNE) == (0x0001, ExceptionFlags.NONE)


def test_overflow_result_per_mode():
    overflow = ExceptionFlags.OVERFLOW | ExceptionFlags.INEXACT

    test_cases = [
        # (mode, sign, expected)
        (RNE, False, 0x7C00),
        (RNE, True, 0xFC00),
        (RTZ, False, 0x7BFF),
        (RTZ, True, 0xFBFF),
        (RUP, False, 0x7C00),
        (RUP, True, 0xFBFF),
        (RDN, False, 0x7BFF),
        (RDN, True, 0xFC00),
    ]

    for mode, sign, expected in test_cases:
        n = Normalized(sign, 31, 0, False, True, overflow=True)
        assert rounder.round_normalized(HALF, n, mode) == (expected, overflow), f"{mode.name} sign={sign}"


def test_rounder_tie_to_even(request):
    """Test round-to-nearest-even (ties go to even LSB)"""
    dut = rounder.Rounder(width=8)

    test_cases = [
        # (mantissa, guard, round, sticky, expected_result, expected_overflow)
        # GRS = 100, LSB=0: round down (tie to even)
        (0b10000000, 1, 0, 0, 0b10000000, 0),
        (0b10101010, 1, 0, 0, 0b10101010, 0),
        (0b11111110, 1, 0, 0, 0b11111110, 0),
        # GRS = 100, LSB=1: round up (tie to even)
        (0b10000001, 1, 0, 0, 0b10000010, 0),
        (0b10101011, 1, 0, 0, 0b10101100, 0),
        (0b11111111, 1, 0, 0, 0b00000000, 1),  # Overflow case
        # GRS = 0xx: round down
        (0b11111111, 0, 1, 1, 0b11111111, 0),
    ]

    async def bench(ctx):
        ctx.set(dut.mode, RNE)
        ctx.set(dut.sign, 0)
        for mantissa, guard, round_bit, sticky, expected, expected_ovf in test_cases:
            ctx.set(dut.mantissa_in, mantissa)
            ctx.set(dut.guard, guard)
            ctx.set(dut.round_bit, round_bit)
            ctx.set(dut.sticky, sticky)

            result = ctx.get(dut.mantissa_out)
            overflow = ctx.get(dut.overflow)

            lsb = mantissa & 1
            assert result == expected, (
                f"GRS={guard}{round_bit}{sticky}, LSB={lsb}: mantissa=0b{mantissa:08b}, "
                f"got=0b{result:08b}, expected=0b{expected:08b}"
            )
            assert overflow == expected_ovf, (
                f"GRS={guard}{round_bit}{sticky}, LSB={lsb}: overflow={overflow}, expected={expected_ovf}"
            )

    sim = Simulator(dut)
    sim.add_testbench(bench)

    if request.config.getoption("--vcd"):
        vcd_name = f"Rounder_{sys._getframe().f_code.co_name}.vcd"
        with sim.write_vcd(vcd_name):
            sim.run()
    else:
        sim.run()


def test_rounder_all_modes(request):
    """Every mode/sign/GRS/LSB combination against round_increment"""
    dut = rounder.Rounder(width=4)

    async def bench(ctx):
        for mode, sign, mantissa, guard, round_bit, sticky in itertools.product(
            RoundingMode, (0, 1), (0b0110, 0b0111, 0b1111), (0, 1), (0, 1), (0, 1)
        ):
            ctx.set(dut.mode, mode)
            ctx.set(dut.sign, sign)
            ctx.set(dut.mantissa_in, mantissa)
            ctx.set(dut.guard, guard)
            ctx.set(dut.round_bit, round_bit)
            ctx.set(dut.sticky, sticky)

            lost = bool(round_bit or sticky)
            up = rounder.round_increment(mode, bool(sign), bool(mantissa & 1), bool(guard), lost)
            expected = mantissa + up

            result = ctx.get(dut.mantissa_out)
            overflow = ctx.get(dut.overflow)
            inexact = ctx.get(dut.inexact)

            assert result == expected & 0b1111, (
                f"{mode.name} sign={sign} GRS={guard}{round_bit}{sticky}: mantissa=0b{mantissa:04b}, "
                f"got=0b{result:04b}, expected=0b{expected & 0b1111:04b}"
            )
            assert overflow == expected >> 4
            assert inexact == (guard or lost)

    sim = Simulator(dut)
    sim.add_testbench(bench)

    if request.config.getoption("--vcd"):
        vcd_name = f"Rounder_{sys._getframe().f_code.co_name}.vcd"
        with sim.write_vcd(vcd_name):
            sim.run()
    else:
        sim.run()
