"""RIS format driver.

RIS specification: Two-letter tags, "TY  - " starts record, "ER  - " ends it.
Reference: https://refdb.sourceforge.net/manual-0.9.6/sect1-ris-format.html
"""

import re
from collections.abc import Iterator
from datetime import date
from typing import TextIO

from reflib.models import Progress, Reference
from reflib.settings import OutputSettings

from .base import Driver, ReferenceWriter
from .tag_mappings import LIST_FIELDS, build_tagged_reference, code_from_type, get_tags

TAG_PATTERN = re.compile(r"^([A-Z0-9]{2})  - ?(.*)$")

RawTags = list[tuple[str, list[str]]]


class RisDriver(Driver):
    """Reads and writes RIS tagged files."""

    format_id = "ris"

    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield one reference per ``TY``...``ER`` block.

        A record left open at end of file, or interrupted by a new ``TY``,
        is still emitted. Lines outside records are ignored.
        """
        count = 0
        current_tags: RawTags = []
        in_record = False
        current_tag: str | None = None
        current_value_lines: list[str] = []

        for raw_line in stream:
            line = raw_line.rstrip("\n")
            match = TAG_PATTERN.match(line)

            if match:
                if current_tag is not None:
                    current_tags.append((current_tag, current_value_lines))
                    current_tag = None
                    current_value_lines = []

                tag, value = match.groups()

                if tag == "TY":
                    if in_record and current_tags:
                        count += 1
                        yield build_reference(current_tags)
                        yield Progress(count)
                    in_record = True
                    current_tags = []
                    current_tag = tag
                    current_value_lines = [value]

                elif tag == "ER":
                    if in_record:
                        count += 1
                        yield build_reference(current_tags)
                        yield Progress(count)
                    in_record = False
                    current_tags = []

                elif in_record:
                    current_tag = tag
                    current_value_lines = [value]

            elif in_record and current_tag is not None and line.strip():
                current_value_lines.append(line)

        if in_record:
            if current_tag is not None:
                current_tags.append((current_tag, current_value_lines))
            if current_tags:
                count += 1
                yield build_reference(current_tags)
                yield Progress(count)

    def output(self, settings: OutputSettings) -> "RisWriter":
        """Return a RIS writer for ``settings``."""
        return RisWriter(settings, self.format_id)


def build_reference(tags: RawTags) -> Reference:
    """Build a reference from the raw tags of one RIS record.

    ``SP`` and ``EP`` are combined into a single ``pages`` range.
    """
    joined = [(tag, " ".join(v.strip() for v in lines).strip()) for tag, lines in tags]
    ref = build_tagged_reference("ris", joined)

    end_page = next((value for tag, value in joined if tag == "EP" and value), None)
    if end_page:
        start_page = ref.get("pages")
        if not start_page:
            ref["pages"] = end_page
        elif "-" not in start_page:
            ref["pages"] = f"{start_page}-{end_page}"

    return ref


class RisWriter(ReferenceWriter):
    """Writes references as RIS records separated by a blank line."""

    def _write_record(self, ref: Reference, index: int) -> None:
        line_ending = self.settings.options.get("line_ending", "\r\n")
        if index > 0:
            self.stream.write(line_ending)
        self.stream.write(line_ending.join(format_ris_record(ref, self.selected_fields(ref))))
        self.stream.write(line_ending)


def format_ris_record(ref: Reference, fields: list[str]) -> list[str]:
    """Format selected fields of a reference as RIS lines.

    Parameters
    ----------
    ref : Reference
        Reference to format.
    fields : list[str]
        Fields to include, in order.

    Returns
    -------
    list[str]
        RIS lines, from ``TY`` to ``ER``.
    """
    lines = [f"TY  - {code_from_type('ris', ref.get('type'), 'JOUR')}"]

    for field in fields:
        tags = get_tags("ris", field)
        value = ref[field]
        if not tags or field == "type" or value in (None, "", []):
            continue
        tag = tags[0]

        if field in LIST_FIELDS:
            values = value if isinstance(value, list) else [value]
            lines.extend(f"{tag}  - {v}" for v in values)
        elif field == "pages":
            start, _, end = str(value).partition("-")
            lines.append(f"SP  - {start}")
            if end:
                lines.append(f"EP  - {end}")
        elif isinstance(value, date):
            lines.append(f"{tag}  - {value:%Y/%m/%d}")
        else:
            lines.append(f"{tag}  - {value}")

    lines.append("ER  - ")
    return lines
