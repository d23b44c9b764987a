"""
Unit algebra for unitcalc.

Combination, cancellation and conversion of composite units. All functions
are pure and return new ``Unit`` values.
"""

from __future__ import annotations

import logging

from unitcalc.core.ir.units import Unit, UnitTerm, UnitType, table_factor, unit_category

logger = logging.getLogger(__name__)


def combine(a: Unit, b: Unit, reject_same_category: bool = False) -> Unit:
    """Multiply two units, merging terms of the same category.

    Args:
        a: Left unit. Merged terms keep a's unit type.
        b: Right unit.
        reject_same_category: If set, two terms of the same category but a
            different unit type make the result Unknown. Used for implicit
            adjacency (``km m``), where folding one unit into the other would
            silently change the magnitude.

    Returns:
        The combined unit. Terms whose degrees cancel are dropped and an
        empty result is the None unit. Unknown in either operand propagates.
    """
    if a.is_unknown or b.is_unknown:
        return Unit.unknown()
    if a.is_none:
        return b
    if b.is_none:
        return a

    degrees = [[t.type, t.degree] for t in a.terms]
    leftover: list[UnitTerm] = []
    for term in b.terms:
        for entry in degrees:
            entry_type, entry_degree = entry
            if unit_category(entry_type) != term.category:
                continue
            if reject_same_category and entry_type != term.type:
                logger.debug("Rejecting same-category combination: %s %s", entry_type, term.type)
                return Unit.unknown()
            entry[1] = entry_degree + term.degree
            break
        else:
            leftover.append(term)

    terms = [UnitTerm(type=t, degree=d) for t, d in degrees if d != 0] + leftover
    if not terms:
        return Unit.none()
    return Unit(terms=tuple(terms))


def invert(unit: Unit) -> Unit:
    """Negate every degree (``km s^-1`` → ``km^-1 s``). Sentinels are unchanged."""
    if unit.is_none or unit.is_unknown:
        return unit
    return Unit(terms=tuple(UnitTerm(type=t.type, degree=-t.degree) for t in unit.terms))


def raise_degree(unit: Unit, power: int) -> Unit:
    """Multiply the degree of every term by ``power``; a zero power gives None."""
    if unit.is_none or unit.is_unknown:
        return unit
    if power == 0:
        return Unit.none()
    return Unit(terms=tuple(UnitTerm(type=t.type, degree=t.degree * power) for t in unit.terms))


def _counterpart(term: UnitTerm, unit: Unit) -> UnitTerm | None:
    """The term of ``unit`` in the same category as ``term``, if any."""
    for other in unit.terms:
        if other.category == term.category:
            return other
    return None


def check_convertible(a: Unit, b: Unit) -> str | None:
    """Explain why ``a`` cannot be converted to ``b``.

    Convertible means the same number of terms, and every term of ``a`` has
    a same-category term in ``b`` with the same degree. Unit types within a
    category may differ (km and mi are both distance).

    Returns:
        None if convertible, otherwise a short reason.
    """
    if a.is_unknown or b.is_unknown:
        return "unknown unit"
    if len(a) != len(b):
        return f"{len(a)} unit term(s) vs {len(b)}"
    for term in a.terms:
        other = _counterpart(term, b)
        if other is None:
            return f"no {term.category} unit to match '{term}'"
        if other.degree != term.degree:
            return f"degree of '{term}' does not match '{other}'"
    return None


def convertible(a: Unit, b: Unit) -> bool:
    """True if a value in unit ``a`` can be expressed in unit ``b``."""
    return check_convertible(a, b) is None


def conversion_factor(a: Unit, b: Unit) -> float:
    """Factor that converts a magnitude in unit ``a`` into unit ``b``.

    For every term of ``a`` the pairwise table factor to its same-category
    term in ``b`` is raised to the term's degree; the product is returned.
    Terms of ``a`` with no counterpart in ``b`` contribute 1, which lets the
    evaluator scale the matching part of a partially compatible divisor.
    """
    factor = 1.0
    for term in a.terms:
        other = _counterpart(term, b)
        if other is None:
            continue
        factor *= table_factor(term.type, other.type) ** term.degree
    logger.debug(
        "Conversion factor %s -> %s: %r",
        display_unit(a, debug=True),
        display_unit(b, debug=True),
        factor,
    )
    return factor


def display_unit(unit: Unit, debug: bool = False) -> str:
    """Render a unit as space-separated ``sym`` / ``sym^degree`` terms.

    The None unit renders as an empty string, or ``none`` when ``debug``.
    """
    if unit.is_none:
        return UnitType.NONE.value if debug else ""
    return str(unit)
