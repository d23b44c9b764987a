"""
Unit types for the unitcalc IR.

Defines the fixed set of base units, the categories they belong to, the
static conversion table between them, and the composite ``Unit`` value
that the unit algebra operates on.

A ``Unit`` is an ordered list of (type, degree) terms:
- ``km`` → [(km, 1)]
- ``m s^-2`` → [(m, 1), (s, -2)]

Two sentinel values exist:
- ``Unit.none()``: dimensionless, the identity for combination
- ``Unit.unknown()``: a unit error was already reported for this subtree
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Base units
# ---------------------------------------------------------------------------


class UnitType(StrEnum):
    """Base units. The value is the symbol used in input and display."""

    # Distance
    CENTIMETER = "cm"
    METER = "m"
    KILOMETER = "km"
    INCH = "in"
    FOOT = "ft"
    MILE = "mi"
    # Time
    SECOND = "s"
    MINUTE = "min"
    HOUR = "h"
    # Mass
    GRAM = "g"
    KILOGRAM = "kg"
    POUND = "lb"
    OUNCE = "oz"
    # Sentinels
    NONE = "none"
    UNKNOWN = "unknown"


class UnitCategory(StrEnum):
    """Base dimensions used to decide whether two unit types are convertible."""

    DISTANCE = "distance"
    TIME = "time"
    MASS = "mass"
    NONE = "none"


_CATEGORIES: dict[UnitType, UnitCategory] = {
    UnitType.CENTIMETER: UnitCategory.DISTANCE,
    UnitType.METER: UnitCategory.DISTANCE,
    UnitType.KILOMETER: UnitCategory.DISTANCE,
    UnitType.INCH: UnitCategory.DISTANCE,
    UnitType.FOOT: UnitCategory.DISTANCE,
    UnitType.MILE: UnitCategory.DISTANCE,
    UnitType.SECOND: UnitCategory.TIME,
    UnitType.MINUTE: UnitCategory.TIME,
    UnitType.HOUR: UnitCategory.TIME,
    UnitType.GRAM: UnitCategory.MASS,
    UnitType.KILOGRAM: UnitCategory.MASS,
    UnitType.POUND: UnitCategory.MASS,
    UnitType.OUNCE: UnitCategory.MASS,
}

# Symbols the tokenizer recognises as unit literals (sentinels excluded).
UNIT_SYMBOLS: dict[str, UnitType] = {t.value: t for t in _CATEGORIES}


def unit_category(unit_type: UnitType) -> UnitCategory:
    """Category of a base unit; sentinels belong to ``UnitCategory.NONE``."""
    return _CATEGORIES.get(unit_type, UnitCategory.NONE)


# ---------------------------------------------------------------------------
# Conversion table
# ---------------------------------------------------------------------------

_CM = UnitType.CENTIMETER
_M = UnitType.METER
_KM = UnitType.KILOMETER
_IN = UnitType.INCH
_FT = UnitType.FOOT
_MI = UnitType.MILE
_S = UnitType.SECOND
_MIN = UnitType.MINUTE
_H = UnitType.HOUR
_G = UnitType.GRAM
_KG = UnitType.KILOGRAM
_LB = UnitType.POUND
_OZ = UnitType.OUNCE

# Multiply a value in the row unit by the factor to get the column unit.
# Only same-category pairs are present; every other pair is 0.
CONVERSION_TABLE: dict[UnitType, dict[UnitType, float]] = {
    _CM: {_CM: 1, _M: 0.01, _KM: 0.00001, _IN: 1 / 2.54, _FT: 1 / (2.54 * 12), _MI: 1 / (2.54 * 12 * 5280)},
    _M: {_CM: 100, _M: 1, _KM: 0.001, _IN: 39.3700787, _FT: 3.2808399, _MI: 3.2808399 / 5280},
    _KM: {_CM: 100000, _M: 1000, _KM: 1, _IN: 39370.0787, _FT: 3280.8399, _MI: 0.62137119},
    _IN: {_CM: 2.54, _M: 0.0254, _KM: 0.0000254, _IN: 1, _FT: 1 / 12, _MI: 1 / (12 * 5280)},
    _FT: {_CM: 30.48, _M: 0.3048, _KM: 0.0003048, _IN: 12, _FT: 1, _MI: 1 / 5280},
    _MI: {_CM: 160934.4, _M: 1609.344, _KM: 1.609344, _IN: 63360, _FT: 5280, _MI: 1},
    _S: {_S: 1, _MIN: 1 / 60, _H: 1 / 3600},
    _MIN: {_S: 60, _MIN: 1, _H: 1 / 60},
    _H: {_S: 3600, _MIN: 60, _H: 1},
    _G: {_G: 1, _KG: 0.001, _LB: 0.00220462262, _OZ: 0.0352739619},
    _KG: {_G: 1000, _KG: 1, _LB: 2.20462262, _OZ: 35.2739619},
    _LB: {_G: 453.59237, _KG: 0.45359237, _LB: 1, _OZ: 16},
    _OZ: {_G: 28.3495231, _KG: 0.0283495231, _LB: 1 / 16, _OZ: 1},
}


def table_factor(source: UnitType, target: UnitType) -> float:
    """Pairwise factor from ``source`` to ``target``.

    Returns 0.0 for units of different categories. Dimensionless sentinels
    convert to anything with a factor of 1.
    """
    if source == UnitType.NONE or target == UnitType.NONE:
        return 1.0
    return float(CONVERSION_TABLE.get(source, {}).get(target, 0.0))


# ---------------------------------------------------------------------------
# Composite units
# ---------------------------------------------------------------------------


class UnitTerm(BaseModel):
    """A single base unit raised to an integer degree."""

    type: UnitType
    degree: int

    model_config = ConfigDict(frozen=True)

    @property
    def category(self) -> UnitCategory:
        return unit_category(self.type)

    def __str__(self) -> str:
        if self.degree == 1:
            return self.type.value
        return f"{self.type.value}^{self.degree}"


class Unit(BaseModel):
    """
    A composite dimensional quantity: an ordered list of unit terms.

    No two terms share a UnitType and no term has degree 0, except for the
    two sentinels which are a single term of type NONE / UNKNOWN.
    """

    terms: tuple[UnitTerm, ...] = Field(description="(type, degree) terms in insertion order")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def none(cls) -> Unit:
        return cls(terms=(UnitTerm(type=UnitType.NONE, degree=0),))

    @classmethod
    def unknown(cls) -> Unit:
        return cls(terms=(UnitTerm(type=UnitType.UNKNOWN, degree=0),))

    @classmethod
    def single(cls, unit_type: UnitType, degree: int = 1) -> Unit:
        return cls(terms=(UnitTerm(type=unit_type, degree=degree),))

    @property
    def is_none(self) -> bool:
        return len(self.terms) == 1 and self.terms[0].type == UnitType.NONE

    @property
    def is_unknown(self) -> bool:
        return len(self.terms) == 1 and self.terms[0].type == UnitType.UNKNOWN

    def __len__(self) -> int:
        return len(self.terms)

    def as_set(self) -> frozenset[tuple[UnitType, int]]:
        """Order-insensitive view, for comparing units regardless of term order."""
        return frozenset((t.type, t.degree) for t in self.terms)

    def __str__(self) -> str:
        if self.is_none:
            return ""
        if self.is_unknown:
            return "unknown"
        return " ".join(str(t) for t in self.terms)
