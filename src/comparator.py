from typing import NamedTuple

from decoder import decode
from flags import ExceptionFlags, OperationResult
from float_format import FloatValue, FormatSpec


class ComparisonResult(NamedTuple):
    equal: bool
    less_than: bool
    less_or_equal: bool
    unordered: bool
    flags: ExceptionFlags = ExceptionFlags.NONE


def _order_key(fmt: FormatSpec, value: FloatValue) -> int:
    # magnitude bits sort like (biased_exponent, mantissa); negatives flip,
    # and both zeros land on 0
    magnitude = (value.biased_exponent << fmt.mant_width) | value.mantissa
    return -magnitude if value.sign else magnitude


def compare(fmt: FormatSpec, a_bits: int, b_bits: int) -> ComparisonResult:
    a = decode(fmt, a_bits)
    b = decode(fmt, b_bits)

    # flags are those of the ordered predicates
    if a.is_nan or b.is_nan:
        flags = ExceptionFlags.NONE
        if a.is_signaling or b.is_signaling:
            flags = ExceptionFlags.INVALID
        return ComparisonResult(False, False, False, True, flags)

    a_key = _order_key(fmt, a)
    b_key = _order_key(fmt, b)
    return ComparisonResult(a_key == b_key, a_key < b_key, a_key <= b_key, False)


def equal(fmt: FormatSpec, a_bits: int, b_bits: int) -> OperationResult:
    # equality is a quiet predicate: unordered is never an error
    result = compare(fmt, a_bits, b_bits)
    return OperationResult(result.equal, result.flags & ~ExceptionFlags.INVALID)



def less_than(fmt: FormatSpec, a_bits: int, b_bits: int) -> OperationResult:
    result = compare(fmt, a_bits, b_bits)
    return OperationResult(result.less_than, result.flags)


def less_or_equal(fmt: FormatSpec, a_bits: int, b_bits: int) -> OperationResult:
    result = compare(fmt, a_bits, b_bits)
    return OperationResult(result.less_or_equal, result.flags)
