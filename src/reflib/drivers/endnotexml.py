"""EndNote XML format driver.

Documents look like ``<xml><records><record>...</record></records></xml>``.
Field text is usually wrapped in one or more ``<style>`` elements, so text
is always read with ``itertext``.
"""

from collections.abc import Iterator
from datetime import date
from typing import TextIO
from xml.etree import ElementTree as ET

from reflib.models import REF_TYPES, Progress, Reference
from reflib.settings import OutputSettings

from .base import Driver, ReferenceWriter, first_year
from .tag_mappings import LIST_FIELDS

# Reference field -> element paths inside <record>, in priority order.
# The first path is the one written on output.
FIELD_PATHS: dict[str, list[str]] = {
    "title": ["titles/title"],
    "journal": ["titles/secondary-title", "periodical/full-title"],
    "authors": ["contributors/authors/author"],
    "year": ["dates/year"],
    "date": ["dates/pub-dates/date"],
    "volume": ["volume"],
    "number": ["number"],
    "pages": ["pages"],
    "abstract": ["abstract"],
    "keywords": ["keywords/keyword"],
    "doi": ["electronic-resource-num"],
    "urls": ["urls/related-urls/url"],
    "notes": ["notes"],
    "isbn": ["isbn"],
    "publisher": ["publisher"],
    "address": ["pub-location"],
    "language": ["language"],
    "label": ["label"],
}

# EndNote ref-type number -> shared reference type id
REF_TYPE_CODES: dict[str, str] = {
    "17": "journalArticle",
    "6": "book",
    "5": "bookSection",
    "28": "editedBook",
    "10": "conferenceProceedings",
    "47": "conferencePaper",
    "32": "thesis",
    "27": "report",
    "12": "web",
    "13": "generic",
    "19": "magazineArticle",
    "23": "newspaperArticle",
    "25": "patent",
    "34": "unpublished",
    "43": "electronicArticle",
    "44": "electronicBook",
    "46": "governmentDocument",
    "59": "dataset",
    "60": "electronicBookSection",
}

STYLE_ATTRIBUTES = {"face": "normal", "font": "default", "size": "100%"}


def element_text(element: ET.Element) -> str:
    """Return all text below ``element`` with surrounding whitespace removed."""
    return "".join(element.itertext()).strip()


class EndNoteXmlDriver(Driver):
    """Reads and writes EndNote XML exports."""

    format_id = "endnotexml"

    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield one reference per ``<record>`` element.

        Raises
        ------
        xml.etree.ElementTree.ParseError
            If the document is not well-formed XML.
        """
        root = ET.fromstring(stream.read())
        records = list(root.iter("record"))
        total = len(records)
        for index, record in enumerate(records, start=1):
            yield record_to_reference(record)
            yield Progress(index, total)

    def output(self, settings: OutputSettings) -> "EndNoteXmlWriter":
        """Return an EndNote XML writer for ``settings``."""
        return EndNoteXmlWriter(settings, self.format_id)


def record_to_reference(record: ET.Element) -> Reference:
    """Convert one ``<record>`` element into a reference."""
    ref: Reference = {}

    ref_type = record.find("ref-type")
    if ref_type is not None:
        ref["type"] = REF_TYPE_CODES.get(element_text(ref_type), "generic")

    for field, paths in FIELD_PATHS.items():
        for path in paths:
            values = [element_text(el) for el in record.findall(path)]
            values = [v for v in values if v]
            if not values:
                continue
            if field in LIST_FIELDS:
                ref[field] = values
            elif field == "year":
                year = first_year(values[0])
                ref[field] = year if year is not None else values[0]
            else:
                ref[field] = values[0]
            break

    return ref


class EndNoteXmlWriter(ReferenceWriter):
    """Streams ``<record>`` elements inside a single ``<records>`` wrapper."""

    def _write_header(self) -> None:
        self.stream.write('<?xml version="1.0" encoding="UTF-8"?>\n<xml><records>\n')

    def _write_record(self, ref: Reference, index: int) -> None:
        record = reference_to_record(ref, self.selected_fields(ref))
        self.stream.write(ET.tostring(record, encoding="unicode"))
        self.stream.write("\n")

    def _write_footer(self) -> None:
        self.stream.write("</records></xml>\n")


def reference_to_record(ref: Reference, fields: list[str]) -> ET.Element:
    """Build a ``<record>`` element from the selected fields of ``ref``."""
    record = ET.Element("record")

    if "type" in fields:
        code, name = _type_code(ref.get("type"))
        ET.SubElement(record, "ref-type", name=name).text = code

    for field in fields:
        paths = FIELD_PATHS.get(field)
        value = ref[field]
        if not paths or value in (None, "", []):
            continue

        parent_path, _, leaf = paths[0].rpartition("/")
        parent = _ensure_path(record, parent_path)
        values = value if field in LIST_FIELDS and isinstance(value, list) else [value]
        for item in values:
            _styled(ET.SubElement(parent, leaf), item)

    return record


def _type_code(ref_type: str | None) -> tuple[str, str]:
    for code, type_id in REF_TYPE_CODES.items():
        if type_id == ref_type:
            title = next(t.title for t in REF_TYPES if t.id == type_id)
            return code, title
    return "13", "Generic"


def _ensure_path(root: ET.Element, path: str) -> ET.Element:
    node = root
    if not path:
        return node
    for part in path.split("/"):
        child = node.find(part)
        if child is None:
            child = ET.SubElement(node, part)
        node = child
    return node


def _styled(element: ET.Element, value: object) -> None:
    style = ET.SubElement(element, "style", STYLE_ATTRIBUTES)
    style.text = value.isoformat() if isinstance(value, date) else str(value)
