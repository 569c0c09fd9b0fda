from decoder import decode, nan_result, significand
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_pack

# quotient bits kept below the mantissa, the remainder becomes sticky
QUOTIENT_EXTRA_BITS = 5


def divide(fmt: FormatSpec, a_bits: int, b_bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    a = decode(fmt, a_bits)
    b = decode(fmt, b_bits)

    sign = a.sign ^ b.sign

    # ---- Special cases ----
    if a.is_nan or b.is_nan:
        return nan_result(fmt, a, b)
    if (a.is_infinite and b.is_infinite) or (a.is_zero and b.is_zero):
        return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
    if a.is_infinite:
        return OperationResult(fmt.infinity(sign))
    if b.is_infinite:
        return OperationResult(fmt.zero(sign))
    if b.is_zero:
        return OperationResult(fmt.infinity(sign), ExceptionFlags.DIVIDE_BY_ZERO)
    if a.is_zero:
        return OperationResult(fmt.zero(sign))

    # ---- Mantissa Divide ----
    a_exp, a_sig = significand(fmt, a)
    b_exp, b_sig = significand(fmt, b)

    # both significands are in [2**m, 2**(m+1)), so the quotient's leading
    # one is at bit m + extra or one below
    quotient, remainder = divmod(a_sig << (fmt.mant_width + QUOTIENT_EXTRA_BITS), b_sig)

    # ---- Exponent Subtraction ----
    exp_diff = a_exp - b_exp + fmt.bias

    return round_pack(
        fmt,
        sign,
        exp_diff,
        quotient,
        QUOTIENT_EXTRA_BITS,
        mode,
        sticky=remainder != 0,
    )
