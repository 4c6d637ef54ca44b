"""MEDLINE / PubMed (.nbib) format driver.

PubMed fields begin with 2-4 char tags, continuation lines are indented.
Record boundaries: blank line or new PMID field.
Reference: https://www.nlm.nih.gov/bsd/mms/medlineelements.html
"""

import re
from collections.abc import Iterator
from datetime import date
from typing import TextIO

from reflib.models import MONTH_ABBREVIATIONS, Progress, Reference
from reflib.settings import OutputSettings

from .base import Driver, ReferenceWriter, first_year
from .tag_mappings import LIST_FIELDS, build_tagged_reference, code_from_type, get_tags

TAG_PATTERN = re.compile(r"^([A-Z]{2,4})\s*-\s+(.*)$")
CONTINUATION_PATTERN = re.compile(r"^      ")
DOI_AID_RE = re.compile(r"^(\S+)\s*\[doi\]\s*$", re.IGNORECASE)


class MedlineDriver(Driver):
    """Reads and writes MEDLINE tagged files."""

    format_id = "medline"

    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield one reference per MEDLINE record."""
        count = 0
        current_tags: list[tuple[str, list[str]]] = []
        current_tag: str | None = None
        current_value_lines: list[str] = []

        for raw_line in stream:
            line = raw_line.rstrip("\n")
            match = TAG_PATTERN.match(line)

            if match:
                if current_tag is not None:
                    current_tags.append((current_tag, current_value_lines))

                tag, value = match.groups()

                if tag == "PMID" and current_tags:
                    count += 1
                    yield build_reference(current_tags)
                    yield Progress(count)
                    current_tags = []

                current_tag = tag
                current_value_lines = [value]

            elif line.strip() == "":
                if current_tag is not None:
                    current_tags.append((current_tag, current_value_lines))
                    current_tag = None
                    current_value_lines = []

                if current_tags:
                    count += 1
                    yield build_reference(current_tags)
                    yield Progress(count)
                    current_tags = []

            elif CONTINUATION_PATTERN.match(line) and current_tag is not None:
                current_value_lines.append(line)

        if current_tag is not None:
            current_tags.append((current_tag, current_value_lines))
        if current_tags:
            count += 1
            yield build_reference(current_tags)
            yield Progress(count)

    def output(self, settings: OutputSettings) -> "MedlineWriter":
        """Return a MEDLINE writer for ``settings``."""
        return MedlineWriter(settings, self.format_id)


def build_reference(tags: list[tuple[str, list[str]]]) -> Reference:
    """Build a reference from the raw tags of one MEDLINE record.

    ``DP`` provides both ``date`` and ``year``; an ``AID`` marked ``[doi]``
    provides ``doi``.
    """
    joined = [(tag, " ".join(v.strip() for v in lines).strip()) for tag, lines in tags]
    ref = build_tagged_reference("medline", joined)

    if "date" in ref:
        year = first_year(ref["date"])
        if year is not None:
            ref["year"] = year

    for tag, value in joined:
        doi_match = DOI_AID_RE.match(value) if tag in ("AID", "LID") else None
        if doi_match:
            ref["doi"] = doi_match.group(1)
            break

    return ref


class MedlineWriter(ReferenceWriter):
    """Writes references as MEDLINE records separated by a blank line."""

    def _write_record(self, ref: Reference, index: int) -> None:
        if index > 0:
            self.stream.write("\n")
        for line in format_medline_record(ref, self.selected_fields(ref)):
            self.stream.write(line + "\n")


def format_medline_record(ref: Reference, fields: list[str]) -> list[str]:
    """Format selected fields of a reference as MEDLINE lines."""
    lines: list[str] = []

    for field in fields:
        value = ref[field]
        if value in (None, "", []):
            continue

        if field == "doi":
            lines.append(_line("AID", f"{value} [doi]"))
            continue

        tags = get_tags("medline", field)
        if not tags:
            continue
        tag = tags[0]

        if field in LIST_FIELDS:
            values = value if isinstance(value, list) else [value]
            lines.extend(_line(tag, v) for v in values)
        elif field == "type":
            lines.append(_line(tag, code_from_type("medline", value, "Journal Article")))
        elif isinstance(value, date):
            month = MONTH_ABBREVIATIONS[value.month - 1]
            lines.append(_line(tag, f"{value.year} {month} {value.day:02d}"))
        else:
            lines.append(_line(tag, value))

    if "date" not in fields and "year" in fields and ref.get("year"):
        lines.append(_line("DP", ref["year"]))

    return lines


def _line(tag: str, value: object) -> str:
    return f"{tag:<4}- {value}"
