"""Tests for the format registry."""

from pathlib import Path

import pytest

from reflib.errors import UnsupportedFormat
from reflib.formats import (
    DEFAULT_REGISTRY,
    REF_TYPES,
    SUPPORTED_FORMATS,
    FormatDescriptor,
    FormatRegistry,
    identify,
)


@pytest.mark.unit
def test_registry_table() -> None:
    """Test the built-in registry lists every format with its metadata."""
    table = {d.id: (d.name, d.extensions, d.filename) for d in SUPPORTED_FORMATS}

    assert table == {
        "csv": ("Comma Separated Values", frozenset({".csv"}), "references.csv"),
        "endnotexml": ("EndNote XML file", frozenset({".xml"}), "endnote.xml"),
        "json": ("JSON file", frozenset({".json"}), "library.json"),
        "medline": ("MEDLINE / PubMed file", frozenset({".nbib"}), "medline.nbib"),
        "ris": ("RIS file", frozenset({".ris"}), "ris.ris"),
        "tsv": ("Tab Separated Values", frozenset({".tsv"}), "references.tsv"),
    }


@pytest.mark.unit
@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("report.csv", "csv"),
        ("REPORT.CSV", "csv"),
        ("dir/export.Ris", "ris"),
        ("pubmed.nbib", "medline"),
        ("library.json", "json"),
        ("endnote.xml", "endnotexml"),
        ("sheet.tsv", "tsv"),
        (Path("a/b/c.ris"), "ris"),
    ],
)
def test_identify_known_extensions(filename: str | Path, expected: str) -> None:
    """Test identify maps extensions case-insensitively."""
    assert identify(filename) == expected


@pytest.mark.unit
@pytest.mark.parametrize("filename", ["report.unknown", "noextension", "", "archive.ris.gz"])
def test_identify_unknown_returns_none(filename: str) -> None:
    """Test identify returns None instead of raising."""
    assert identify(filename) is None


@pytest.mark.unit
def test_get_unknown_format_raises() -> None:
    """Test lookup of an unknown id raises UnsupportedFormat carrying the id."""
    with pytest.raises(UnsupportedFormat) as exc_info:
        DEFAULT_REGISTRY.get("bibtex")

    assert exc_info.value.format_id == "bibtex"
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.unit
def test_for_path_unknown_extension_raises() -> None:
    """Test path resolution raises UnsupportedFormat carrying the path."""
    with pytest.raises(UnsupportedFormat) as exc_info:
        DEFAULT_REGISTRY.for_path("notes.txt")

    assert exc_info.value.path == "notes.txt"


@pytest.mark.unit
def test_first_declared_format_wins_on_shared_extension() -> None:
    """Test extension lookup uses declaration order."""
    ris = DEFAULT_REGISTRY.get("ris")
    first = FormatDescriptor("first", "First", frozenset({".txt"}), "a.txt", ris.driver)
    second = FormatDescriptor("second", "Second", frozenset({".txt"}), "b.txt", ris.driver)

    assert FormatRegistry((first, second)).identify("x.TXT") == "first"


@pytest.mark.unit
def test_registry_rejects_duplicate_ids() -> None:
    """Test a registry cannot hold two formats with the same id."""
    ris = DEFAULT_REGISTRY.get("ris")

    with pytest.raises(ValueError, match="Duplicate"):
        FormatRegistry((ris, ris))


@pytest.mark.unit
def test_descriptor_rejects_malformed_extension() -> None:
    """Test extensions must be lower-case with a leading dot."""
    ris = DEFAULT_REGISTRY.get("ris")

    with pytest.raises(ValueError):
        FormatDescriptor("x", "X", frozenset({"RIS"}), "x.ris", ris.driver)


@pytest.mark.unit
def test_ref_types_vocabulary() -> None:
    """Test the shared reference type vocabulary has unique ids."""
    ids = [t.id for t in REF_TYPES]

    assert len(ids) == len(set(ids))
    assert {"journalArticle", "book", "bookSection", "thesis", "report", "generic"} <= set(ids)
    assert next(t.title for t in REF_TYPES if t.id == "journalArticle") == "Journal Article"
