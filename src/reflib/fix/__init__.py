"""Reference normalization fixes.

Three independent, stateless passes applied to parsed references:

- ``authors``: split a single semicolon-joined author string
- ``dates``: disambiguate partial dates into ``date``/``year``/``month``
- ``pages``: repair abbreviated page ranges such as ``"123-4"``

Each takes a reference, fixes it in place and returns it. None of them
raises on malformed field content.
"""

from reflib.models import Reference
from reflib.settings import ParseSettings

from ._authors import fix_authors
from ._dates import SENTINEL_INSTANT, SENTINEL_YEAR, fix_dates
from ._pages import fix_pages

authors = fix_authors
dates = fix_dates
pages = fix_pages

__all__ = [
    "authors",
    "dates",
    "pages",
    "fix_authors",
    "fix_dates",
    "fix_pages",
    "apply_fixes",
    "SENTINEL_INSTANT",
    "SENTINEL_YEAR",
]


def apply_fixes(ref: Reference, settings: ParseSettings) -> Reference:
    """Run the fixes enabled in ``settings``: authors, then dates, then pages.

    Parameters
    ----------
    ref : Reference
        Reference fresh from a driver.
    settings : ParseSettings
        Parse settings with the fix switches and date rules.

    Returns
    -------
    Reference
        The fixed reference.
    """
    if settings.fixes.authors:
        ref = fix_authors(ref)
    if settings.fixes.dates:
        ref = fix_dates(ref, settings)
    if settings.fixes.pages:
        ref = fix_pages(ref)
    return ref
