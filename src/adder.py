from aligner import shift_right_sticky
from decoder import decode, encode, expand, nan_result
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_pack

# guard, round, sticky
GUARD_BITS = 3


def add(fmt: FormatSpec, a_bits: int, b_bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    a = decode(fmt, a_bits)
    b = decode(fmt, b_bits)

    # ---- Special cases ----
    if a.is_nan or b.is_nan:
        return nan_result(fmt, a, b)
    if a.is_infinite and b.is_infinite:
        if a.sign == b.sign:
            return OperationResult(fmt.infinity(a.sign))
        return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
    if a.is_infinite:
        return OperationResult(encode(fmt, a))
    if b.is_infinite:
        return OperationResult(encode(fmt, b))
    if a.is_zero and b.is_zero:
        if a.sign == b.sign:
            return OperationResult(fmt.zero(a.sign))
        return OperationResult(fmt.zero(mode == RoundingMode.TOWARD_NEGATIVE))
    if a.is_zero:
        return OperationResult(encode(fmt, b))
    if b.is_zero:
        return OperationResult(encode(fmt, a))

    # ---- Unpack ----
    a_exp, a_sig = expand(fmt, a)
    b_exp, b_sig = expand(fmt, b)
    a_sig <<= GUARD_BITS
    b_sig <<= GUARD_BITS

    # larger magnitude first, it decides the exponent and the sign
    if (a_exp, a_sig) < (b_exp, b_sig):
        a, b = b, a
        a_exp, a_sig, b_exp, b_sig = b_exp, b_sig, a_exp, a_sig

    # ---- Align ----
    b_sig, sticky = shift_right_sticky(b_sig, a_exp - b_exp)
    b_sig |= sticky

    # ---- Add / Subtract ----
    if a.sign == b.sign:
        sum_sig = a_sig + b_sig
    else:
        sum_sig = a_sig - b_sig
        if sum_sig == 0:
            return OperationResult(fmt.zero(mode == RoundingMode.TOWARD_NEGATIVE))

    return round_pack(fmt, a.sign, a_exp, sum_sig, GUARD_BITS, mode)


def subtract(fmt: FormatSpec, a_bits: int, b_bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    return add(fmt, a_bits, (b_bits & fmt.width_mask) ^ fmt.sign_mask, mode)
