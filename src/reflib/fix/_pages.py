"""Page range repair."""

from reflib.models import Reference

from ._helpers import PAGE_RANGE_RE


def _strip_zeros(digits: str) -> str:
    # Compared as digit strings; int() rejects very long inputs.
    return digits.lstrip("0") or "0"


def fix_pages(ref: Reference) -> Reference:
    """Normalize a numeric page range and expand an elided end page.

    ``"123-4"`` becomes ``"123-124"``: when the end page is numerically
    smaller than the start page, the missing leading digits are borrowed
    from the start page. Every matching range is rewritten with a single
    hyphen and no spaces; anything else is left unchanged.

    Parameters
    ----------
    ref : Reference
        Reference to fix in place.

    Returns
    -------
    Reference
        The same reference.
    """
    pages = ref.get("pages")
    if not isinstance(pages, str):
        return ref

    match = PAGE_RANGE_RE.match(pages)
    if not match:
        return ref

    left = _strip_zeros(match.group(1))
    right = _strip_zeros(match.group(2))

    if (len(right), right) < (len(left), left):
        right = left[: len(left) - len(right)] + right

    ref["pages"] = f"{left}-{right}"
    return ref
