"""Author list splitting."""

from reflib.models import Reference

from ._helpers import AUTHOR_SEPARATOR_RE


def fix_authors(ref: Reference) -> Reference:
    """Split a single semicolon-joined author string into separate authors.

    Only a list holding exactly one string that contains ``;`` is touched.
    Lists with several authors, or a lone author without a semicolon, are
    left as they are.

    Parameters
    ----------
    ref : Reference
        Reference to fix in place.

    Returns
    -------
    Reference
        The same reference.

    Examples
    --------
        >>> fix_authors({"authors": ["Smith, J; Doe, A"]})
        {'authors': ['Smith, J', 'Doe, A']}
    """
    authors = ref.get("authors")
    if (
        isinstance(authors, list)
        and len(authors) == 1
        and isinstance(authors[0], str)
        and ";" in authors[0]
    ):
        ref["authors"] = AUTHOR_SEPARATOR_RE.split(authors[0])
    return ref
