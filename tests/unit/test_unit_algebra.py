"""Tests for unit combination, cancellation and conversion."""

from __future__ import annotations

import itertools

import pytest

from unitcalc.core.expression_lang.unit_algebra import (
    check_convertible,
    combine,
    conversion_factor,
    convertible,
    display_unit,
    invert,
    raise_degree,
)
from unitcalc.core.ir.units import (
    CONVERSION_TABLE,
    UNIT_SYMBOLS,
    Unit,
    UnitTerm,
    UnitType,
    table_factor,
    unit_category,
)

KM = Unit.single(UnitType.KILOMETER)
M = Unit.single(UnitType.METER)
MI = Unit.single(UnitType.MILE)
S = Unit.single(UnitType.SECOND)
H = Unit.single(UnitType.HOUR)
KG = Unit.single(UnitType.KILOGRAM)


def unit(*terms: tuple[UnitType, int]) -> Unit:
    return Unit(terms=tuple(UnitTerm(type=t, degree=d) for t, d in terms))


class TestUnitValues:
    """Unit construction and display."""

    def test_sentinels(self) -> None:
        assert Unit.none().is_none
        assert Unit.unknown().is_unknown
        assert not KM.is_none

    def test_str(self) -> None:
        assert str(unit((UnitType.METER, 1), (UnitType.SECOND, -2))) == "m s^-2"
        assert str(Unit.none()) == ""

    def test_display(self) -> None:
        assert display_unit(Unit.none()) == ""
        assert display_unit(Unit.none(), debug=True) == "none"
        assert display_unit(KM) == "km"

    def test_symbols_exclude_sentinels(self) -> None:
        assert "none" not in UNIT_SYMBOLS
        assert "unknown" not in UNIT_SYMBOLS
        assert len(UNIT_SYMBOLS) == 13


class TestCombine:
    """Multiplying units merges terms of the same category."""

    def test_none_is_identity(self) -> None:
        assert combine(Unit.none(), KM) == KM
        assert combine(KM, Unit.none()) == KM

    def test_unknown_poisons(self) -> None:
        assert combine(Unit.unknown(), KM).is_unknown
        assert combine(KM, Unit.unknown()).is_unknown

    def test_same_type_adds_degrees(self) -> None:
        assert combine(KM, KM) == Unit.single(UnitType.KILOMETER, 2)

    def test_same_category_keeps_left_type(self) -> None:
        assert combine(KM, MI) == Unit.single(UnitType.KILOMETER, 2)

    def test_different_categories_append(self) -> None:
        assert combine(KM, S) == unit((UnitType.KILOMETER, 1), (UnitType.SECOND, 1))

    def test_cancellation(self) -> None:
        assert combine(KM, invert(KM)).is_none
        assert combine(KM, invert(M)).is_none

    def test_composite_cancellation(self) -> None:
        energy = unit((UnitType.KILOGRAM, 1), (UnitType.METER, 2), (UnitType.SECOND, -2))
        assert combine(energy, invert(energy)).is_none
        assert combine(invert(energy), energy).is_none

    def test_composite_cancellation_across_types(self) -> None:
        energy = unit((UnitType.KILOGRAM, 1), (UnitType.METER, 2), (UnitType.SECOND, -2))
        imperial = unit((UnitType.POUND, 1), (UnitType.FOOT, 2), (UnitType.MINUTE, -2))
        assert combine(energy, invert(imperial)).is_none
        assert combine(invert(imperial), energy).is_none

    def test_partial_cancellation(self) -> None:
        speed = unit((UnitType.KILOMETER, 1), (UnitType.SECOND, -1))
        assert combine(speed, S) == KM

    def test_reject_same_category(self) -> None:
        assert combine(KM, M, reject_same_category=True).is_unknown
        assert combine(KM, KM, reject_same_category=True) == Unit.single(UnitType.KILOMETER, 2)
        assert not combine(KG, S, reject_same_category=True).is_unknown


class TestInvertAndRaise:
    """Degree arithmetic."""

    def test_invert(self) -> None:
        assert invert(unit((UnitType.KILOMETER, 1), (UnitType.SECOND, -1))) == unit(
            (UnitType.KILOMETER, -1), (UnitType.SECOND, 1)
        )

    def test_invert_round_trip(self) -> None:
        u = unit((UnitType.KILOGRAM, 1), (UnitType.METER, 1), (UnitType.SECOND, -2))
        assert invert(invert(u)) == u

    def test_invert_sentinels(self) -> None:
        assert invert(Unit.none()).is_none
        assert invert(Unit.unknown()).is_unknown

    def test_raise(self) -> None:
        assert raise_degree(S, -2) == Unit.single(UnitType.SECOND, -2)

    def test_raise_to_zero(self) -> None:
        assert raise_degree(S, 0).is_none


class TestConvertible:
    """Convertibility requires matching categories and degrees."""

    def test_same_category(self) -> None:
        assert convertible(KM, MI)
        assert check_convertible(KM, MI) is None

    def test_composite(self) -> None:
        a = unit((UnitType.METER, 1), (UnitType.SECOND, -1))
        b = unit((UnitType.KILOMETER, 1), (UnitType.HOUR, -1))
        assert convertible(a, b)

    def test_term_order_does_not_matter(self) -> None:
        a = unit((UnitType.METER, 1), (UnitType.SECOND, -1))
        b = unit((UnitType.HOUR, -1), (UnitType.KILOMETER, 1))
        assert convertible(a, b)

    def test_none_to_none(self) -> None:
        assert convertible(Unit.none(), Unit.none())

    def test_different_category(self) -> None:
        assert check_convertible(KG, H) == "no mass unit to match 'kg'"

    def test_length_mismatch(self) -> None:
        assert not convertible(M, unit((UnitType.METER, 1), (UnitType.SECOND, 1)))

    def test_degree_mismatch(self) -> None:
        assert not convertible(Unit.single(UnitType.METER, 2), KM)

    def test_unknown(self) -> None:
        assert check_convertible(Unit.unknown(), KM) == "unknown unit"


class TestConversionFactor:
    """Factors come from the static table, raised to each term's degree."""

    def test_simple(self) -> None:
        assert conversion_factor(KM, M) == 1000
        assert conversion_factor(KM, Unit.single(UnitType.INCH)) == 39370.0787

    def test_identity(self) -> None:
        assert conversion_factor(KM, KM) == 1

    def test_degree(self) -> None:
        km2 = Unit.single(UnitType.KILOMETER, 2)
        m2 = Unit.single(UnitType.METER, 2)
        assert conversion_factor(km2, m2) == pytest.approx(1e6)

    def test_composite(self) -> None:
        ms = unit((UnitType.METER, 1), (UnitType.SECOND, -1))
        kmh = unit((UnitType.KILOMETER, 1), (UnitType.HOUR, -1))
        assert conversion_factor(ms, kmh) == pytest.approx(3.6)

    def test_dimensionless(self) -> None:
        assert conversion_factor(Unit.none(), Unit.none()) == 1
        assert conversion_factor(Unit.none(), KM) == 1

    def test_pound_ounce(self) -> None:
        assert table_factor(UnitType.POUND, UnitType.OUNCE) == 16
        assert table_factor(UnitType.OUNCE, UnitType.POUND) == 1 / 16

    def test_cross_category_is_zero(self) -> None:
        assert table_factor(UnitType.KILOMETER, UnitType.SECOND) == 0

    def test_table_round_trip(self) -> None:
        for a, b in itertools.product(CONVERSION_TABLE, repeat=2):
            if unit_category(a) != unit_category(b):
                continue
            assert table_factor(a, b) * table_factor(b, a) == pytest.approx(1.0, rel=1e-6), (a, b)

    def test_table_covers_each_category(self) -> None:
        for a, row in CONVERSION_TABLE.items():
            same = {b for b in CONVERSION_TABLE if unit_category(b) == unit_category(a)}
            assert set(row) == same

    def test_zero_factor_is_symmetric(self) -> None:
        for a, b in itertools.product(UNIT_SYMBOLS.values(), repeat=2):
            forward = table_factor(a, b)
            backward = table_factor(b, a)
            assert (forward == 0) == (backward == 0), (a, b)
            assert (forward == 0) == (unit_category(a) != unit_category(b)), (a, b)


class TestRoundTrip:
    """Converting a value there and back returns the original magnitude."""

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (MI, Unit.single(UnitType.CENTIMETER)),
            (Unit.single(UnitType.OUNCE), KG),
            (H, S),
            (
                unit((UnitType.METER, 1), (UnitType.SECOND, -1)),
                unit((UnitType.KILOMETER, 1), (UnitType.HOUR, -1)),
            ),
            (
                unit((UnitType.KILOGRAM, 1), (UnitType.METER, 2), (UnitType.SECOND, -2)),
                unit((UnitType.POUND, 1), (UnitType.FOOT, 2), (UnitType.MINUTE, -2)),
            ),
        ],
    )
    def test_value_round_trip(self, source: Unit, target: Unit) -> None:
        value = 12.5
        there = value * conversion_factor(source, target)
        back = there * conversion_factor(target, source)
        assert back == pytest.approx(value, rel=1e-6)

    def test_every_same_category_pair(self) -> None:
        for a, b in itertools.product(UNIT_SYMBOLS.values(), repeat=2):
            if unit_category(a) != unit_category(b):
                continue
            source, target = Unit.single(a), Unit.single(b)
            back = 3.0 * conversion_factor(source, target) * conversion_factor(target, source)
            assert back == pytest.approx(3.0, rel=1e-6), (a, b)
