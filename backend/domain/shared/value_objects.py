"""
Shared Value Objects used across the catalog.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
Every operation returns a new instance.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, Tuple, Union
import re

from .exceptions import CurrencyMismatchException, ValidationException


Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
MILLI = Decimal("0.001")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """
    Coerce user input to Decimal.

    Floats go through str() so 99.99 stays 99.99 instead of its binary
    expansion. NaN and infinities are returned as-is for the caller to reject.
    """
    if isinstance(value, bool):
        raise ValidationException(f"{field} must be a valid number", field, value)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValidationException(f"{field} must be a valid number", field, value) from None
    raise ValidationException(f"{field} must be a valid number", field, value)


def round_to(value: Decimal, step: Decimal) -> Decimal:
    return value.quantize(step, rounding=ROUND_HALF_UP)


# =============================================================================
# MONEY
# =============================================================================

SUPPORTED_CURRENCIES: Tuple[str, ...] = ("THB", "USD", "EUR", "GBP", "JPY", "SGD")

CURRENCY_SYMBOLS: Dict[str, str] = {
    "THB": "฿",
    "USD": "$",
    "EUR": "€",
}

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")

MAX_AMOUNT_EXPONENT = 25


@dataclass(frozen=True)
class Money:
    """
    Value object representing monetary amount.
    Immutable and includes currency.
    """

    amount: Decimal
    currency: str = "THB"

    def __post_init__(self):
        amount = to_decimal(self.amount, "amount")
        if amount.is_nan():
            raise ValidationException("Money amount must be a valid number", "amount", self.amount)
        if amount.is_infinite():
            raise ValidationException("Money amount must be finite", "amount", self.amount)
        if amount < 0:
            raise ValidationException("Money amount cannot be negative", "amount", self.amount)
        if amount == 0:
            amount = amount.copy_abs()
        self._ensure_within_precision(amount)
        if round_to(amount, CENT) != amount:
            raise ValidationException(
                "Money amount cannot have more than 2 decimal places", "amount", self.amount
            )
        self._validate_currency(self.currency)
        object.__setattr__(self, "amount", round_to(amount, CENT))

    @staticmethod
    def _ensure_within_precision(amount: Decimal) -> None:
        # cents must still fit in the 28-digit decimal context
        if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
            raise ValidationException("Money amount is too large", "amount", amount)

    @staticmethod
    def _validate_currency(currency: Any) -> None:
        if not currency or not isinstance(currency, str):
            raise ValidationException("Currency must be a non-empty string", "currency", currency)
        if len(currency) != 3:
            raise ValidationException("Currency must be a 3-letter ISO code", "currency", currency)
        if not _CURRENCY_CODE.match(currency):
            raise ValidationException("Currency must be 3 uppercase letters", "currency", currency)
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationException(f"Unsupported currency: {currency}", "currency", currency)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def create(cls, amount: Number, currency: str = "THB") -> Money:
        return cls(to_decimal(amount, "amount"), currency)

    @classmethod
    def from_string(cls, value: str, currency: str = "THB") -> Money:
        """Parse a plain decimal string such as '1000.50'."""
        try:
            amount = Decimal((value or "").strip())
        except InvalidOperation:
            raise ValidationException("Invalid money amount format", "amount", value) from None
        if amount.is_nan():
            raise ValidationException("Invalid money amount format", "amount", value)
        return cls(amount, currency)

    @classmethod
    def zero(cls, currency: str = "THB") -> Money:
        return cls(Decimal("0"), currency)

    @staticmethod
    def min(first: Money, second: Money) -> Money:
        return first if first.is_less_than(second) else second

    @staticmethod
    def max(first: Money, second: Money) -> Money:
        return first if first.is_greater_than(second) else second

    @classmethod
    def sum(cls, items: Iterable[Money]) -> Money:
        items = list(items)
        if not items:
            raise ValidationException("Cannot sum empty list of money")
        total = cls.zero(items[0].currency)
        for money in items:
            total = total.add(money)
        return total

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchException(self.currency, other.currency)

    def add(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._check_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise ValidationException("Money amount cannot be negative after subtraction")
        return Money(result, self.currency)

    def multiply(self, factor: Number) -> Money:
        factor = to_decimal(factor, "factor")
        if factor < 0:
            raise ValidationException("Cannot multiply money by negative factor", "factor", factor)
        result = self.amount * factor
        self._ensure_within_precision(result)
        return Money(round_to(result, CENT), self.currency)

    def divide(self, divisor: Number) -> Money:
        divisor = to_decimal(divisor, "divisor")
        if divisor <= 0:
            raise ValidationException(
                "Cannot divide money by zero or negative number", "divisor", divisor
            )
        result = self.amount / divisor
        self._ensure_within_precision(result)
        return Money(round_to(result, CENT), self.currency)

    def percentage(self, percent: Number) -> Money:
        return self.multiply(to_decimal(percent, "percent") / 100)

    def add_percentage(self, percent: Number) -> Money:
        return self.add(self.percentage(percent))

    def subtract_percentage(self, percent: Number) -> Money:
        return self.subtract(self.percentage(percent))

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def equals(self, other: Money) -> bool:
        return self.amount == other.amount and self.currency == other.currency

    def is_greater_than(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def is_less_than(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def is_greater_than_or_equal(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount >= other.amount

    def is_less_than_or_equal(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply
    __truediv__ = divide
    __gt__ = is_greater_than
    __lt__ = is_less_than
    __ge__ = is_greater_than_or_equal
    __le__ = is_less_than_or_equal

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def to_display_string(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency)
        if symbol is None:
            return str(self)
        return f"{symbol}{self.amount:,.2f}"

    def to_dict(self) -> Dict[str, str]:
        return {"amount": f"{self.amount:.2f}", "currency": self.currency}

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


# =============================================================================
# PHYSICAL QUANTITIES
# =============================================================================

class WeightUnit(str, Enum):
    """Units accepted for product weight."""

    GRAMS = "g"
    KILOGRAMS = "kg"
    POUNDS = "lb"
    OUNCES = "oz"

    @property
    def grams_factor(self) -> Decimal:
        return _GRAMS_PER_UNIT[self]

    @classmethod
    def parse(cls, value: Union[str, WeightUnit]) -> WeightUnit:
        if isinstance(value, WeightUnit):
            return value
        key = str(value).strip().lower()
        unit = _WEIGHT_ALIASES.get(key)
        if unit is None:
            raise ValidationException(f"Invalid weight unit: {value}", "unit", value)
        return unit


_GRAMS_PER_UNIT: Dict[WeightUnit, Decimal] = {
    WeightUnit.GRAMS: Decimal("1"),
    WeightUnit.KILOGRAMS: Decimal("1000"),
    WeightUnit.POUNDS: Decimal("453.592"),
    WeightUnit.OUNCES: Decimal("28.3495"),
}

_WEIGHT_ALIASES: Dict[str, WeightUnit] = {
    "g": WeightUnit.GRAMS, "gram": WeightUnit.GRAMS, "grams": WeightUnit.GRAMS,
    "kg": WeightUnit.KILOGRAMS, "kilogram": WeightUnit.KILOGRAMS, "kilograms": WeightUnit.KILOGRAMS,
    "lb": WeightUnit.POUNDS, "pound": WeightUnit.POUNDS, "pounds": WeightUnit.POUNDS,
    "oz": WeightUnit.OUNCES, "ounce": WeightUnit.OUNCES, "ounces": WeightUnit.OUNCES,
}

MAX_WEIGHT_GRAMS = Decimal("1000000")  # 1000 kg


class WeightShippingCategory(str, Enum):
    """Shipping bucket derived from weight alone."""

    LETTER = "Letter"
    SMALL = "Small Package"
    STANDARD = "Standard Package"
    LARGE = "Large Package"
    HEAVY = "Heavy Package"


@dataclass(frozen=True)
class Weight:
    """
    Value object representing a product weight.

    Comparisons go through grams. Arithmetic between two weights answers in
    the unit of the left operand.
    """

    value: Decimal
    unit: WeightUnit = WeightUnit.GRAMS

    def __post_init__(self):
        value = to_decimal(self.value, "value")
        unit = WeightUnit.parse(self.unit)
        if value.is_nan():
            raise ValidationException("Weight value must be a valid number", "value", self.value)
        if value.is_infinite():
            raise ValidationException("Weight must be finite", "value", self.value)
        if value < 0:
            raise ValidationException("Weight cannot be negative", "value", self.value)
        if value == 0:
            value = value.copy_abs()
        if value * unit.grams_factor > MAX_WEIGHT_GRAMS:
            raise ValidationException("Weight exceeds maximum allowed value", "value", self.value)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "unit", unit)

    @classmethod
    def create(cls, value: Number, unit: Union[str, WeightUnit] = WeightUnit.GRAMS) -> Weight:
        return cls(to_decimal(value, "value"), WeightUnit.parse(unit))

    @classmethod
    def from_string(cls, text: str) -> Weight:
        """Parse '100 g', '1.5 kg', '2lb'."""
        match = re.match(r"^(\d+(?:\.\d+)?)\s*(g|kg|lb|oz)$", (text or "").strip(), re.IGNORECASE)
        if not match:
            raise ValidationException(
                'Invalid weight format. Expected format: "100 g", "1.5 kg", etc.', "weight", text
            )
        return cls.create(match.group(1), match.group(2).lower())

    @classmethod
    def zero(cls) -> Weight:
        return cls(Decimal("0"), WeightUnit.GRAMS)

    @staticmethod
    def min(first: Weight, second: Weight) -> Weight:
        return first if first.is_less_than(second) else second

    @staticmethod
    def max(first: Weight, second: Weight) -> Weight:
        return first if first.is_greater_than(second) else second

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_grams(self) -> Decimal:
        return self.value * self.unit.grams_factor

    def to_kilograms(self) -> Decimal:
        return self.to_grams() / _GRAMS_PER_UNIT[WeightUnit.KILOGRAMS]

    def to_pounds(self) -> Decimal:
        return self.to_grams() / _GRAMS_PER_UNIT[WeightUnit.POUNDS]

    def to_ounces(self) -> Decimal:
        return self.to_grams() / _GRAMS_PER_UNIT[WeightUnit.OUNCES]

    def convert_to(self, unit: Union[str, WeightUnit]) -> Weight:
        """Convert through grams, rounded to 3 decimals."""
        unit = WeightUnit.parse(unit)
        if unit == self.unit:
            return self
        converted = round_to(self.to_grams() / unit.grams_factor, MILLI)
        return Weight(converted, unit)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: Weight) -> Weight:
        grams = self.to_grams() + other.to_grams()
        return Weight(grams, WeightUnit.GRAMS).convert_to(self.unit)

    def subtract(self, other: Weight) -> Weight:
        grams = self.to_grams() - other.to_grams()
        if grams < 0:
            raise ValidationException("Weight cannot be negative after subtraction")
        return Weight(grams, WeightUnit.GRAMS).convert_to(self.unit)

    def multiply(self, factor: Number) -> Weight:
        factor = to_decimal(factor, "factor")
        if factor < 0:
            raise ValidationException("Cannot multiply weight by negative factor", "factor", factor)
        return Weight(self.value * factor, self.unit)

    def divide(self, divisor: Number) -> Weight:
        divisor = to_decimal(divisor, "divisor")
        if divisor <= 0:
            raise ValidationException(
                "Cannot divide weight by zero or negative number", "divisor", divisor
            )
        return Weight(self.value / divisor, self.unit)

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply
    __truediv__ = divide

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def equals(self, other: Weight) -> bool:
        return self.to_grams() == other.to_grams()

    def is_greater_than(self, other: Weight) -> bool:
        return self.to_grams() > other.to_grams()

    def is_less_than(self, other: Weight) -> bool:
        return self.to_grams() < other.to_grams()

    def is_greater_than_or_equal(self, other: Weight) -> bool:
        return self.to_grams() >= other.to_grams()

    def is_less_than_or_equal(self, other: Weight) -> bool:
        return self.to_grams() <= other.to_grams()

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    @property
    def is_lightweight(self) -> bool:
        return self.to_grams() < 500

    @property
    def is_heavy(self) -> bool:
        return self.to_kilograms() > 5

    @property
    def shipping_category(self) -> WeightShippingCategory:
        grams = self.to_grams()
        if grams <= 100:
            return WeightShippingCategory.LETTER
        if grams <= 500:
            return WeightShippingCategory.SMALL
        if grams <= 2000:
            return WeightShippingCategory.STANDARD
        if grams <= 10000:
            return WeightShippingCategory.LARGE
        return WeightShippingCategory.HEAVY

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def to_display_string(self) -> str:
        return f"{_trim(round_to(self.value, CENT))} {self.unit.value}"

    def to_display_string_optimal(self) -> str:
        grams = self.to_grams()
        if grams >= 1000:
            return f"{_trim(round_to(grams / 1000, CENT))} kg"
        return f"{_trim(round_to(grams, Decimal('0.1')))} g"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": str(self.value),
            "unit": self.unit.value,
            "grams": str(self.to_grams()),
            "display_string": self.to_display_string(),
            "shipping_category": self.shipping_category.value,
        }

    def __str__(self) -> str:
        return f"{_trim(self.value)} {self.unit.value}"


class DimensionUnit(str, Enum):
    """Units accepted for product dimensions."""

    MILLIMETERS = "mm"
    CENTIMETERS = "cm"
    METERS = "m"
    INCHES = "in"
    FEET = "ft"

    @property
    def mm_factor(self) -> Decimal:
        return _MM_PER_UNIT[self]

    @classmethod
    def parse(cls, value: Union[str, DimensionUnit]) -> DimensionUnit:
        if isinstance(value, DimensionUnit):
            return value
        key = str(value).strip().lower()
        unit = _DIMENSION_ALIASES.get(key)
        if unit is None:
            raise ValidationException(f"Invalid dimension unit: {value}", "unit", value)
        return unit


_MM_PER_UNIT: Dict[DimensionUnit, Decimal] = {
    DimensionUnit.MILLIMETERS: Decimal("1"),
    DimensionUnit.CENTIMETERS: Decimal("10"),
    DimensionUnit.METERS: Decimal("1000"),
    DimensionUnit.INCHES: Decimal("25.4"),
    DimensionUnit.FEET: Decimal("304.8"),
}

_DIMENSION_ALIASES: Dict[str, DimensionUnit] = {
    "mm": DimensionUnit.MILLIMETERS, "millimeter": DimensionUnit.MILLIMETERS,
    "millimeters": DimensionUnit.MILLIMETERS,
    "cm": DimensionUnit.CENTIMETERS, "centimeter": DimensionUnit.CENTIMETERS,
    "centimeters": DimensionUnit.CENTIMETERS,
    "m": DimensionUnit.METERS, "meter": DimensionUnit.METERS, "meters": DimensionUnit.METERS,
    "in": DimensionUnit.INCHES, "inch": DimensionUnit.INCHES, "inches": DimensionUnit.INCHES,
    "ft": DimensionUnit.FEET, "foot": DimensionUnit.FEET, "feet": DimensionUnit.FEET,
}

MAX_DIMENSION_MM = Decimal("100000")  # 100 m
SHAPE_TOLERANCE = Decimal("0.001")

Triple = Tuple[Decimal, Decimal, Decimal]


class DimensionShippingCategory(str, Enum):
    """Shipping bucket derived from package size."""

    SMALL = "Small Package"
    MEDIUM = "Medium Package"
    LARGE = "Large Package"
    OVERSIZED = "Oversized Package"


@dataclass(frozen=True)
class Dimensions:
    """
    Value object representing length x width x height in one unit.
    Conversions go through millimeters.
    """

    length: Decimal
    width: Decimal
    height: Decimal
    unit: DimensionUnit = DimensionUnit.CENTIMETERS

    def __post_init__(self):
        unit = DimensionUnit.parse(self.unit)
        for name in ("length", "width", "height"):
            value = to_decimal(getattr(self, name), name)
            if value.is_nan():
                raise ValidationException(f"{name} must be a valid number", name, value)
            if value.is_infinite():
                raise ValidationException(f"{name} must be finite", name, value)
            if value <= 0:
                raise ValidationException(f"{name} must be positive", name, value)
            if value * unit.mm_factor > MAX_DIMENSION_MM:
                raise ValidationException("Dimensions exceed maximum allowed values", name, value)
            object.__setattr__(self, name, value)
        object.__setattr__(self, "unit", unit)

    @classmethod
    def create(
        cls,
        length: Number,
        width: Number,
        height: Number,
        unit: Union[str, DimensionUnit] = DimensionUnit.CENTIMETERS,
    ) -> Dimensions:
        return cls(
            to_decimal(length, "length"),
            to_decimal(width, "width"),
            to_decimal(height, "height"),
            DimensionUnit.parse(unit),
        )

    @classmethod
    def from_string(cls, text: str) -> Dimensions:
        """Parse '10x15x20 cm' or '10 × 15 × 20 cm'."""
        match = re.match(
            r"^(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*(mm|cm|m|in|ft)$",
            (text or "").strip(),
            re.IGNORECASE,
        )
        if not match:
            raise ValidationException(
                'Invalid dimensions format. Expected format: "10x15x20 cm"', "dimensions", text
            )
        return cls.create(match.group(1), match.group(2), match.group(3), match.group(4).lower())

    @property
    def sides(self) -> Triple:
        return (self.length, self.width, self.height)

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def _scaled(self, divisor: Decimal) -> Triple:
        factor = self.unit.mm_factor
        return tuple(side * factor / divisor for side in self.sides)  # type: ignore[return-value]

    def to_millimeters(self) -> Triple:
        return self._scaled(_MM_PER_UNIT[DimensionUnit.MILLIMETERS])

    def to_centimeters(self) -> Triple:
        return self._scaled(_MM_PER_UNIT[DimensionUnit.CENTIMETERS])

    def to_meters(self) -> Triple:
        return self._scaled(_MM_PER_UNIT[DimensionUnit.METERS])

    def to_inches(self) -> Triple:
        return self._scaled(_MM_PER_UNIT[DimensionUnit.INCHES])

    def to_feet(self) -> Triple:
        return self._scaled(_MM_PER_UNIT[DimensionUnit.FEET])

    def convert_to(self, unit: Union[str, DimensionUnit]) -> Dimensions:
        unit = DimensionUnit.parse(unit)
        if unit == self.unit:
            return self
        length, width, height = (round_to(side, MILLI) for side in self._scaled(unit.mm_factor))
        return Dimensions(length, width, height, unit)

    # -------------------------------------------------------------------------
    # Derived measurements
    # -------------------------------------------------------------------------

    @property
    def volume(self) -> Decimal:
        """Volume in the object's own unit cubed."""
        return self.length * self.width * self.height

    @property
    def volume_cm3(self) -> Decimal:
        length, width, height = self.to_centimeters()
        return length * width * height

    @property
    def volume_m3(self) -> Decimal:
        length, width, height = self.to_meters()
        return length * width * height

    @property
    def surface_area(self) -> Decimal:
        return 2 * (
            self.length * self.width
            + self.width * self.height
            + self.height * self.length
        )

    @property
    def longest_side(self) -> Decimal:
        return max(self.sides)

    @property
    def shortest_side(self) -> Decimal:
        return min(self.sides)

    @property
    def is_square(self) -> bool:
        return abs(self.length - self.width) < SHAPE_TOLERANCE

    @property
    def is_cube(self) -> bool:
        return (
            abs(self.length - self.width) < SHAPE_TOLERANCE
            and abs(self.width - self.height) < SHAPE_TOLERANCE
        )

    @property
    def is_flat(self) -> bool:
        return self.shortest_side / self.longest_side < Decimal("0.1")

    @property
    def is_compact(self) -> bool:
        return all(side <= 30 for side in self.to_centimeters())

    @property
    def is_bulky(self) -> bool:
        return any(side > 1 for side in self.to_meters())

    @property
    def shipping_category(self) -> DimensionShippingCategory:
        volume = self.volume_cm3
        longest = max(self.to_centimeters())
        if volume <= 1000 and longest <= 20:
            return DimensionShippingCategory.SMALL
        if volume <= 8000 and longest <= 35:
            return DimensionShippingCategory.MEDIUM
        if volume <= 27000 and longest <= 60:
            return DimensionShippingCategory.LARGE
        return DimensionShippingCategory.OVERSIZED

    def fits_in_box(self, box: Dimensions) -> bool:
        """True when this item fits inside `box` in some axis-aligned orientation."""
        mine = sorted(self.to_millimeters())
        theirs = sorted(box.to_millimeters())
        return all(a <= b for a, b in zip(mine, theirs))

    def equals(self, other: Dimensions) -> bool:
        return self.to_millimeters() == other.to_millimeters()

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def to_display_string(self) -> str:
        sides = " × ".join(_trim(round_to(side, CENT)) for side in self.sides)
        return f"{sides} {self.unit.value}"

    def to_display_string_optimal(self) -> str:
        volume = self.volume_cm3
        if volume < 1000:
            return self.convert_to(DimensionUnit.MILLIMETERS).to_display_string()
        if volume < 1000000:
            return self.convert_to(DimensionUnit.CENTIMETERS).to_display_string()
        return self.convert_to(DimensionUnit.METERS).to_display_string()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "length": str(self.length),
            "width": str(self.width),
            "height": str(self.height),
            "unit": self.unit.value,
            "volume": str(self.volume),
            "volume_cm3": str(self.volume_cm3),
            "surface_area": str(self.surface_area),
            "display_string": self.to_display_string(),
            "shipping_category": self.shipping_category.value,
        }

    def __str__(self) -> str:
        return f"{_trim(self.length)}x{_trim(self.width)}x{_trim(self.height)} {self.unit.value}"


def _trim(value: Decimal) -> str:
    """Render a Decimal without trailing zeros or exponent notation."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
