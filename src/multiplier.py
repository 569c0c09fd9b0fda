from decoder import decode, nan_result, significand
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_pack


def multiply(fmt: FormatSpec, a_bits: int, b_bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    """a * b

    The (mant_width + 1)-bit significands give a 2 * (mant_width + 1)-bit
    product whose leading one is at bit 2 * mant_width or one above, so the
    low mant_width bits of the product act as the rounding bits.
    """
    a = decode(fmt, a_bits)
    b = decode(fmt, b_bits)

    # ---- Result Sign ----
    sign = a.sign ^ b.sign

    # ---- Special cases ----
    if a.is_nan or b.is_nan:
        return nan_result(fmt, a, b)
    if a.is_infinite or b.is_infinite:
        if a.is_zero or b.is_zero:
            return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
        return OperationResult(fmt.infinity(sign))
    if a.is_zero or b.is_zero:
        return OperationResult(fmt.zero(sign))

    # ---- Mantissa Multiply ----
    a_exp, a_sig = significand(fmt, a)
    b_exp, b_sig = significand(fmt, b)
    product = a_sig * b_sig

    # ---- Exponent Addition ----
    exp_sum = a_exp + b_exp - fmt.bias

    return round_pack(fmt, sign, exp_sum, product, fmt.mant_width, mode)
