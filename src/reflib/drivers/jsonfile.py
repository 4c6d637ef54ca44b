"""JSON format driver: a top-level array of reference objects."""

import json
from collections.abc import Iterator
from datetime import date
from typing import Any, TextIO

from reflib.models import Progress, Reference
from reflib.settings import OutputSettings

from .base import Driver, ReferenceWriter


class JsonDriver(Driver):
    """Reads and writes JSON arrays of references."""

    format_id = "json"

    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield each object of the top-level array.

        Raises
        ------
        json.JSONDecodeError
            If the content is not valid JSON.
        ValueError
            If the document is not an array of objects.
        """
        data = json.loads(stream.read())
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of references, got {type(data).__name__}")

        total = len(data)
        for index, item in enumerate(data, start=1):
            if not isinstance(item, dict):
                raise ValueError(f"Reference #{index} is not a JSON object")
            yield item
            yield Progress(index, total)

    def output(self, settings: OutputSettings) -> "JsonWriter":
        """Return a JSON writer for ``settings``."""
        return JsonWriter(settings, self.format_id)


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonWriter(ReferenceWriter):
    """Streams references as one JSON array, one object per line."""

    def _write_header(self) -> None:
        self.stream.write("[")

    def _write_record(self, ref: Reference, index: int) -> None:
        record = {name: ref[name] for name in self.selected_fields(ref)}
        indent = self.settings.options.get("indent")
        text = json.dumps(record, ensure_ascii=False, indent=indent, default=_json_default)
        self.stream.write((",\n" if index > 0 else "\n") + text)

    def _write_footer(self) -> None:
        self.stream.write("\n]\n" if self.count else "]\n")
