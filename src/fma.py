from decoder import decode, encode, significand
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_pack

GUARD_BITS = 3


def fused_multiply_add(
    fmt: FormatSpec,
    a_bits: int,
    b_bits: int,
    c_bits: int,
    mode=RoundingMode.TO_NEAREST_EVEN,
) -> OperationResult:
    """(a * b) + c with a single rounding

    The product and the addend are lined up as exact integers at the
    smaller of their two scales, so the only loss happens in round_pack.
    """
    a = decode(fmt, a_bits)
    b = decode(fmt, b_bits)
    c = decode(fmt, c_bits)

    product_sign = a.sign ^ b.sign
    invalid_product = (a.is_infinite and b.is_zero) or (a.is_zero and b.is_infinite)

    # ---- Special cases ----
    if a.is_nan or b.is_nan or c.is_nan:
        flags = ExceptionFlags.NONE
        if a.is_signaling or b.is_signaling or c.is_signaling or invalid_product:
            flags = ExceptionFlags.INVALID
        return OperationResult(fmt.quiet_nan(), flags)
    if invalid_product:
        return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
    if a.is_infinite or b.is_infinite:
        if c.is_infinite and c.sign != product_sign:
            return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
        return OperationResult(fmt.infinity(product_sign))
    if c.is_infinite:
        return OperationResult(encode(fmt, c))
    if a.is_zero or b.is_zero:
        if not c.is_zero:
            return OperationResult(encode(fmt, c))
        if c.sign == product_sign:
            return OperationResult(fmt.zero(c.sign))
        return OperationResult(fmt.zero(mode == RoundingMode.TOWARD_NEGATIVE))

    # ---- Exact Product ----
    a_exp, a_sig = significand(fmt, a)
    b_exp, b_sig = significand(fmt, b)
    product = a_sig * b_sig
    product_scale = a_exp + b_exp - 2 * (fmt.bias + fmt.mant_width)

    if c.is_zero:
        return round_pack(fmt, product_sign, a_exp + b_exp - fmt.bias, product, fmt.mant_width, mode)

    # ---- Exact Sum ----
    c_exp, c_sig = significand(fmt, c)
    c_scale = c_exp - fmt.bias - fmt.mant_width

    low = min(product_scale, c_scale)
    product_term = product << (product_scale - low)
    c_term = c_sig << (c_scale - low)

    total = (-product_term if product_sign else product_term) + (-c_term if c.sign else c_term)
    if total == 0:
        return OperationResult(fmt.zero(mode == RoundingMode.TOWARD_NEGATIVE))

    return round_pack(
        fmt,
        total < 0,
        low + fmt.bias + fmt.mant_width + GUARD_BITS,
        abs(total),
        GUARD_BITS,
        mode,
    )
