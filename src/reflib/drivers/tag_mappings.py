"""Tag mappings for the tagged text formats (RIS, MEDLINE).

Each format maps a reference field to the tags that carry it, in priority
order. The first tag listed is also the one written on output. Adding a
field requires only adding an entry here.
"""

from reflib.models import REF_TYPE_IDS, Reference

from .base import first_year

# Fields that hold a list of values, one tag occurrence per value
LIST_FIELDS: frozenset[str] = frozenset({"authors", "keywords", "urls"})

TAG_MAPPINGS: dict[str, dict[str, list[str]]] = {
    "ris": {
        "type": ["TY"],
        "title": ["TI", "T1"],
        "authors": ["AU", "A1"],
        "year": ["PY", "Y1"],
        "date": ["DA"],
        "journal": ["JO", "JF", "T2"],
        "volume": ["VL"],
        "number": ["IS"],
        "pages": ["SP"],
        "abstract": ["AB", "N2"],
        "keywords": ["KW"],
        "doi": ["DO"],
        "urls": ["UR"],
        "notes": ["N1"],
        "isbn": ["SN"],
        "publisher": ["PB"],
        "address": ["CY"],
        "language": ["LA"],
        "label": ["LB"],
    },
    "medline": {
        "pmid": ["PMID"],
        "type": ["PT"],
        "title": ["TI"],
        "authors": ["AU", "FAU"],
        "date": ["DP"],
        "journal": ["JT"],
        "journalAbbrev": ["TA"],
        "volume": ["VI"],
        "number": ["IP"],
        "pages": ["PG"],
        "abstract": ["AB"],
        "keywords": ["MH", "OT"],
        "isbn": ["IS"],
        "language": ["LA"],
        "address": ["AD"],
    },
}

# Native type code -> shared reference type id
TYPE_MAPPINGS: dict[str, dict[str, str]] = {
    "ris": {
        "ABST": "generic",
        "BOOK": "book",
        "CHAP": "bookSection",
        "CONF": "conferenceProceedings",
        "CPAPER": "conferencePaper",
        "DATA": "dataset",
        "EBOOK": "electronicBook",
        "ECHAP": "electronicBookSection",
        "EDBOOK": "editedBook",
        "EJOUR": "electronicArticle",
        "ELEC": "web",
        "GEN": "generic",
        "GOVDOC": "governmentDocument",
        "JOUR": "journalArticle",
        "MGZN": "magazineArticle",
        "NEWS": "newspaperArticle",
        "PAT": "patent",
        "RPRT": "report",
        "THES": "thesis",
        "UNPB": "unpublished",
    },
    "medline": {
        "Journal Article": "journalArticle",
        "Review": "journalArticle",
        "Book": "book",
        "Book Chapter": "bookSection",
        "Congress": "conferencePaper",
        "Dataset": "dataset",
        "Government Publication": "governmentDocument",
        "Technical Report": "report",
        "Preprint": "unpublished",
    },
}


def get_tags(format_id: str, field: str) -> list[str]:
    """Get tag names for a field in a given format.

    Parameters
    ----------
    format_id : str
        Tagged format id (``ris`` or ``medline``).
    field : str
        Reference field name (e.g. ``title``, ``authors``).

    Returns
    -------
    list[str]
        Tag names for the field in priority order; empty if unmapped.

    Raises
    ------
    ValueError
        If the format has no tag mapping.
    """
    if format_id not in TAG_MAPPINGS:
        raise ValueError(
            f"No tag mapping for format {format_id!r}. Mapped formats: {sorted(TAG_MAPPINGS)}"
        )
    return TAG_MAPPINGS[format_id].get(field, [])


def type_from_code(format_id: str, code: str) -> str:
    """Map a native type code to a shared reference type id (``generic`` if unknown)."""
    return TYPE_MAPPINGS[format_id].get(code.strip(), "generic")


def code_from_type(format_id: str, ref_type: str | None, default: str) -> str:
    """Map a shared reference type id back to the first native code using it."""
    if ref_type in REF_TYPE_IDS:
        for code, type_id in TYPE_MAPPINGS[format_id].items():
            if type_id == ref_type:
                return code
    return default


def build_tagged_reference(format_id: str, tags: list[tuple[str, str]]) -> Reference:
    """Build a reference from the ``(tag, value)`` pairs of one record.

    For every mapped field the highest-priority tag present wins; list
    fields keep every occurrence of that tag, other fields its first value.

    Parameters
    ----------
    format_id : str
        Tagged format id.
    tags : list[tuple[str, str]]
        Tag/value pairs in file order.

    Returns
    -------
    Reference
        Reference with mapped fields; unmapped tags are dropped.
    """
    by_tag: dict[str, list[str]] = {}
    for tag, value in tags:
        if value:
            by_tag.setdefault(tag, []).append(value)

    ref: Reference = {}
    for field, field_tags in TAG_MAPPINGS[format_id].items():
        found = next((by_tag[tag] for tag in field_tags if tag in by_tag), None)
        if found is None:
            continue

        if field in LIST_FIELDS:
            ref[field] = list(found)
        elif field == "type":
            ref["type"] = type_from_code(format_id, found[0])
        elif field == "year":
            year = first_year(found[0])
            if year is not None:
                ref["year"] = year
        else:
            ref[field] = found[0]

    return ref
