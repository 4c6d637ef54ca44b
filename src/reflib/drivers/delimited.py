"""Delimited text drivers (CSV and TSV).

The first row names the columns. Multi-valued fields are joined with
``"; "`` on output; on input such a column is read back as a one-element
list, which the authors fix later splits.
"""

import csv
from collections.abc import Iterator
from datetime import date
from typing import TextIO

from reflib.models import Progress, Reference
from reflib.settings import OutputSettings

from .base import Driver, ReferenceWriter, first_year
from .tag_mappings import LIST_FIELDS

MULTI_VALUE_SEPARATOR = "; "

# Columns written when the caller does not choose any
DEFAULT_FIELDS: tuple[str, ...] = (
    "type",
    "title",
    "authors",
    "journal",
    "year",
    "date",
    "volume",
    "number",
    "pages",
    "doi",
    "isbn",
    "abstract",
    "keywords",
    "urls",
    "notes",
)


class DelimitedDriver(Driver):
    """Reads and writes one reference per row of a delimited file.

    Parameters
    ----------
    format_id : str
        Registry id (``csv`` or ``tsv``).
    delimiter : str
        Column delimiter.
    """

    def __init__(self, format_id: str, delimiter: str) -> None:
        self.format_id = format_id
        self.delimiter = delimiter

    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield one reference per data row; empty cells are skipped."""
        reader = csv.DictReader(stream, delimiter=self.delimiter)
        count = 0
        for row in reader:
            ref = row_to_reference(row)
            if not ref:
                continue
            count += 1
            yield ref
            yield Progress(count)

    def output(self, settings: OutputSettings) -> "DelimitedWriter":
        """Return a delimited writer for ``settings``."""
        return DelimitedWriter(settings, self.format_id, delimiter=self.delimiter)


def row_to_reference(row: dict[str | None, str | list[str] | None]) -> Reference:
    """Convert one ``csv.DictReader`` row into a reference."""
    ref: Reference = {}
    for column, value in row.items():
        # Cells beyond the header land under the None key
        if column is None or not isinstance(value, str):
            continue
        name = column.strip()
        value = value.strip()
        if not name or not value:
            continue

        if name in LIST_FIELDS:
            ref[name] = [value]
        elif name == "year":
            year = first_year(value)
            ref[name] = year if year is not None else value
        else:
            ref[name] = value
    return ref


class DelimitedWriter(ReferenceWriter):
    """Writes a header row followed by one row per reference."""

    def __init__(self, settings: OutputSettings, format_id: str, delimiter: str) -> None:
        super().__init__(settings, format_id)
        self.columns = list(settings.fields) if settings.fields is not None else list(DEFAULT_FIELDS)
        self._writer = csv.DictWriter(
            self.stream,
            fieldnames=self.columns,
            delimiter=delimiter,
            extrasaction="ignore",
        )

    def _write_header(self) -> None:
        self._writer.writeheader()

    def _write_record(self, ref: Reference, index: int) -> None:
        self._writer.writerow({name: format_cell(ref.get(name)) for name in self.columns})


def format_cell(value: object) -> str:
    """Render one field value as a cell."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return MULTI_VALUE_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
