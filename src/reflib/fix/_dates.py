"""Partial date disambiguation."""

from collections.abc import Mapping
from datetime import date
from typing import Any

from reflib.errors import InternalInvariantViolation
from reflib.models import Reference
from reflib.settings import ParseSettings, coerce_parse_settings

from ._helpers import MONTH_ABBREVIATIONS
from ._patterns import match_date

# Stands in for "now" while parsing. A parsed year equal to SENTINEL_YEAR is
# indistinguishable from a defaulted one and is treated as not supplied.
SENTINEL_YEAR = 1000
SENTINEL_INSTANT = date(SENTINEL_YEAR, 2, 1)


def fix_dates(
    ref: Reference,
    settings: ParseSettings | Mapping[str, Any] | None = None,
    *,
    reference: date = SENTINEL_INSTANT,
) -> Reference:
    """Work out which parts of a free-form ``date`` are actually known.

    The first rule in ``settings.date_formats`` whose pattern strictly
    parses ``ref["date"]`` decides the outcome:

    - year, month and day supplied: ``date`` becomes a ``datetime.date``
    - year supplied: ``year`` is set to the integer year
    - month supplied: ``month`` is set to the three-letter abbreviation

    Unparseable dates are left alone.

    Parameters
    ----------
    ref : Reference
        Reference to fix in place.
    settings : ParseSettings | Mapping[str, Any] | None, optional
        Supplies the date rules; defaults when None.
    reference : date, optional
        Instant used for components a pattern does not supply.

    Returns
    -------
    Reference
        The same reference.

    Raises
    ------
    InternalInvariantViolation
        If the matcher reports a pattern that is not in the rule list.
    """
    raw = ref.get("date")
    if not raw or not isinstance(raw, str):
        return ref

    rules = coerce_parse_settings(settings).date_formats
    match = match_date(raw, [rule.pattern for rule in rules], reference)
    if match is None:
        return ref

    rule = next((r for r in rules if r.pattern == match.pattern), None)
    if rule is None:
        raise InternalInvariantViolation(
            f"Date matched pattern {match.pattern!r} which is not in the configured rules"
        )

    has_year = rule.has_year and match.value.year != reference.year

    if has_year and rule.has_month and rule.has_day:
        ref["date"] = match.value

    if has_year:
        ref["year"] = match.value.year

    if rule.has_month:
        ref["month"] = MONTH_ABBREVIATIONS[match.value.month - 1]

    return ref
