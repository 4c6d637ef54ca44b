"""Shared value types exchanged between drivers, the fix pipeline and callers."""

from dataclasses import dataclass
from typing import Any, NamedTuple

__all__ = [
    "Reference",
    "Progress",
    "RefType",
    "REF_TYPES",
    "REF_TYPE_IDS",
    "MONTH_NAMES",
    "MONTH_ABBREVIATIONS",
]

# One bibliographic entry. Open-ended: drivers decide which fields exist.
Reference = dict[str, Any]


class Progress(NamedTuple):
    """Progress report yielded by a driver between references.

    Attributes
    ----------
    current : int
        Number of references produced so far.
    total : int | None
        Total number of references, when the driver knows it.
    """

    current: int
    total: int | None = None


@dataclass(frozen=True)
class RefType:
    """Reference type shared by every driver's type mapping."""

    id: str
    title: str


REF_TYPES: tuple[RefType, ...] = (
    RefType("aggregatedDatabase", "Aggregated Database"),
    RefType("ancientText", "Ancient Text"),
    RefType("artwork", "Artwork"),
    RefType("audiovisualMaterial", "Audiovisual Material"),
    RefType("bill", "Bill"),
    RefType("blog", "Blog"),
    RefType("book", "Book"),
    RefType("bookSection", "Book Section"),
    RefType("case", "Case"),
    RefType("catalog", "Catalog"),
    RefType("chartOrTable", "Chart or Table"),
    RefType("classicalWork", "Classical Work"),
    RefType("computerProgram", "Computer Program"),
    RefType("conferencePaper", "Conference Paper"),
    RefType("conferenceProceedings", "Conference Proceedings"),
    RefType("dataset", "Dataset"),
    RefType("dictionary", "Dictionary"),
    RefType("editedBook", "Edited Book"),
    RefType("electronicArticle", "Electronic Article"),
    RefType("electronicBook", "Electronic Book"),
    RefType("electronicBookSection", "Electronic Book Section"),
    RefType("encyclopedia", "Encyclopedia"),
    RefType("equation", "Equation"),
    RefType("figure", "Figure"),
    RefType("filmOrBroadcast", "Film or Broadcast"),
    RefType("generic", "Generic"),
    RefType("governmentDocument", "Government Document"),
    RefType("grant", "Grant"),
    RefType("hearing", "Hearing"),
    RefType("journalArticle", "Journal Article"),
    RefType("legalRuleOrRegulation", "Legal Rule or Regulation"),
    RefType("magazineArticle", "Magazine Article"),
    RefType("manuscript", "Manuscript"),
    RefType("map", "Map"),
    RefType("music", "Music"),
    RefType("newspaperArticle", "Newspaper Article"),
    RefType("onlineDatabase", "Online Database"),
    RefType("onlineMultimedia", "Online Multimedia"),
    RefType("pamphlet", "Pamphlet"),
    RefType("patent", "Patent"),
    RefType("personalCommunication", "Personal Communication"),
    RefType("report", "Report"),
    RefType("serial", "Serial"),
    RefType("standard", "Standard"),
    RefType("statute", "Statute"),
    RefType("thesis", "Thesis"),
    RefType("unpublished", "Unpublished Work"),
    RefType("web", "Web Page"),
)

REF_TYPE_IDS: frozenset[str] = frozenset(t.id for t in REF_TYPES)

# Fixed English tables so results never depend on the process locale
MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
MONTH_ABBREVIATIONS: tuple[str, ...] = tuple(name[:3] for name in MONTH_NAMES)
