import enum
from dataclasses import dataclass

from amaranth.lib import data


class FormatError(ValueError):
    pass


@dataclass(frozen=True)
class FormatSpec:
    """Binary interchange format: 1 sign + exp_width exponent + mant_width mantissa

    Fixed for the lifetime of an engine; every derived constant below is
    computed from the three widths.
    """

    total_width: int
    exp_width: int
    mant_width: int

    def __post_init__(self):
        if self.total_width != 1 + self.exp_width + self.mant_width:
            raise FormatError(
                f"total_width={self.total_width} does not match "
                f"1 + exp_width({self.exp_width}) + mant_width({self.mant_width})"
            )
        if self.exp_width < 2:
            raise FormatError(f"exp_width must be at least 2, got {self.exp_width}")
        if self.mant_width < 1:
            raise FormatError(f"mant_width must be at least 1, got {self.mant_width}")

    @property
    def bias(self) -> int:
        return (1 << (self.exp_width - 1)) - 1

    @property
    def exp_max(self) -> int:
        return (1 << self.exp_width) - 1

    @property
    def width_mask(self) -> int:
        return (1 << self.total_width) - 1

    @property
    def sign_mask(self) -> int:
        return 1 << (self.total_width - 1)

    @property
    def exp_mask(self) -> int:
        return self.exp_max << self.mant_width

    @property
    def mant_mask(self) -> int:
        return (1 << self.mant_width) - 1

    @property
    def quiet_bit(self) -> int:
        return 1 << (self.mant_width - 1)

    @property
    def layout(self) -> data.StructLayout:
        return data.StructLayout(
            {
                "mantissa": self.mant_width,
                "exponent": self.exp_width,
                "sign": 1,
            }
        )

    def unpack(self, bits: int) -> tuple[int, int, int]:
        sign = (bits >> (self.total_width - 1)) & 0x1
        exp = (bits >> self.mant_width) & self.exp_max
        mant = bits & self.mant_mask
        return sign, exp, mant

    def pack(self, sign: int, exp: int, mant: int) -> int:
        return (int(sign) << (self.total_width - 1)) | (exp << self.mant_width) | mant

    def zero(self, sign=False) -> int:
        return self.pack(sign, 0, 0)

    def infinity(self, sign=False) -> int:
        return self.pack(sign, self.exp_max, 0)

    def quiet_nan(self) -> int:
        return self.pack(0, self.exp_max, self.quiet_bit)

    def max_finite(self, sign=False) -> int:
        return self.pack(sign, self.exp_max - 1, self.mant_mask)


class FloatKind(enum.Enum):
    ZERO = enum.auto()
    SUBNORMAL = enum.auto()
    NORMAL = enum.auto()
    INFINITY = enum.auto()
    QUIET_NAN = enum.auto()
    SIGNALING_NAN = enum.auto()


@dataclass(frozen=True)
class FloatValue:
    sign: bool
    biased_exponent: int
    mantissa: int
    kind: FloatKind

    @property
    def is_nan(self) -> bool:
        return self.kind in (FloatKind.QUIET_NAN, FloatKind.SIGNALING_NAN)

    @property
    def is_signaling(self) -> bool:
        return self.kind is FloatKind.SIGNALING_NAN

    @property
    def is_infinite(self) -> bool:
        return self.kind is FloatKind.INFINITY

    @property
    def is_zero(self) -> bool:
        return self.kind is FloatKind.ZERO

    @property
    def is_finite(self) -> bool:
        return self.kind in (FloatKind.ZERO, FloatKind.SUBNORMAL, FloatKind.NORMAL)


HALF = FormatSpec(16, 5, 10)
SINGLE = FormatSpec(32, 8, 23)
DOUBLE = FormatSpec(64, 11, 52)
QUAD = FormatSpec(128, 15, 112)
BFLOAT16 = FormatSpec(16, 8, 7)
