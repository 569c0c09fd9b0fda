from aligner import shift_right_sticky
from decoder import decode, significand
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_increment, round_pack

GUARD_BITS = 3


def convert(src: FormatSpec, dst: FormatSpec, bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    """Float-to-float conversion through the shared normalize/round path.

    Widening is exact; narrowing overflows, underflows and rounds like an
    arithmetic result.
    """
    v = decode(src, bits)

    if v.is_nan:
        # keep the top payload bits, quieted
        shift = dst.mant_width - src.mant_width
        if shift >= 0:
            payload = v.mantissa << shift
        else:
            payload = v.mantissa >> -shift
        flags = ExceptionFlags.INVALID if v.is_signaling else ExceptionFlags.NONE
        return OperationResult(dst.pack(v.sign, dst.exp_max, payload | dst.quiet_bit), flags)
    if v.is_infinite:
        return OperationResult(dst.infinity(v.sign))
    if v.is_zero:
        return OperationResult(dst.zero(v.sign))

    # ---- Re-bias ----
    exp, sig = significand(src, v)
    dst_exp = exp - src.bias + dst.bias + dst.mant_width + GUARD_BITS - src.mant_width

    return round_pack(dst, v.sign, dst_exp, sig, GUARD_BITS, mode)


def int_to_float(fmt: FormatSpec, value: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    if value == 0:
        return OperationResult(fmt.zero())

    sign = value < 0
    magnitude = abs(value)

    # magnitude * 2**0
    return round_pack(fmt, sign, fmt.bias + fmt.mant_width + GUARD_BITS, magnitude, GUARD_BITS, mode)


def integer_range(width: int, signed: bool) -> tuple[int, int]:
    if signed:
        return -(1 << (width - 1)), (1 << (width - 1)) - 1
    return 0, (1 << width) - 1


def float_to_int(
    fmt: FormatSpec,
    bits: int,
    mode=RoundingMode.TO_NEAREST_EVEN,
    width: int = 32,
    signed: bool = True,
) -> OperationResult:
    """Round to an integer of the given width.

    NaN, infinities and values outside the integer range raise INVALID and
    saturate (NaN goes to the maximum). TOWARD_ZERO gives C-style truncation.
    """
    lowest, highest = integer_range(width, signed)
    v = decode(fmt, bits)

    if v.is_nan:
        return OperationResult(highest, ExceptionFlags.INVALID)
    if v.is_infinite:
        return OperationResult(lowest if v.sign else highest, ExceptionFlags.INVALID)
    if v.is_zero:
        return OperationResult(0)

    exp, sig = significand(fmt, v)
    scale = exp - fmt.bias - fmt.mant_width

    flags = ExceptionFlags.NONE
    if scale >= 0:
        magnitude = sig << scale
    else:
        # ---- Split integer and fraction ----
        magnitude, sticky = shift_right_sticky(sig, -scale - 1)
        guard = bool(magnitude & 1)
        magnitude >>= 1
        if guard or sticky:
            flags = ExceptionFlags.INEXACT
            if round_increment(mode, v.sign, bool(magnitude & 1), guard, sticky):
                magnitude += 1

    result = -magnitude if v.sign else magnitude
    if result < lowest:
        return OperationResult(lowest, ExceptionFlags.INVALID)
    if result > highest:
        return OperationResult(highest, ExceptionFlags.INVALID)
    return OperationResult(result, flags)
