import math

from decoder import decode, encode, nan_result, significand
from flags import ExceptionFlags, OperationResult
from float_format import FormatSpec
from rounder import RoundingMode, round_pack

GUARD_BITS = 3


def square_root(fmt: FormatSpec, a_bits: int, mode=RoundingMode.TO_NEAREST_EVEN) -> OperationResult:
    a = decode(fmt, a_bits)

    # ---- Special cases ----
    if a.is_nan:
        return nan_result(fmt, a)
    if a.is_zero:
        return OperationResult(encode(fmt, a))
    if a.sign:
        return OperationResult(fmt.quiet_nan(), ExceptionFlags.INVALID)
    if a.is_infinite:
        return OperationResult(fmt.infinity())

    # value = sig * 2**scale
    exp, sig = significand(fmt, a)
    scale = exp - fmt.bias - fmt.mant_width

    # widen the radicand so the root has mant_width + GUARD_BITS + 1 bits,
    # keeping the remaining scale even
    shift = fmt.mant_width + 2 * GUARD_BITS + 2
    if (scale - shift) % 2:
        shift += 1
    radicand = sig << shift

    root = math.isqrt(radicand)
    sticky = root * root != radicand

    # root * 2**((scale - shift) // 2), re-expressed for the normalizer
    root_exp = (scale - shift) // 2 + fmt.bias + fmt.mant_width + GUARD_BITS

    return round_pack(fmt, False, root_exp, root, GUARD_BITS, mode, sticky=sticky)
