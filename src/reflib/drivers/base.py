"""Driver contract and shared utilities for format drivers.

A driver turns a text stream into references and references back into
text. Parsing is a plain iterator: yielding a ``Reference`` is a ``ref``
event, yielding a ``Progress`` is a ``progress`` event, raising is the
``error`` event and exhaustion is ``end``. Output goes through a
``ReferenceWriter``.
"""

import io
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, BinaryIO, TextIO

from reflib.errors import DriverError, InvalidArguments
from reflib.events import EventChannel
from reflib.models import Progress, Reference
from reflib.settings import OutputSettings

__all__ = [
    "Driver",
    "ReferenceWriter",
    "Source",
    "detect_encoding",
    "normalize_line_endings",
    "check_source",
    "open_source",
    "first_year",
]

Source = str | bytes | TextIO | BinaryIO


def detect_encoding(file_bytes: bytes) -> str:
    """Detect encoding of file bytes using deterministic strategy.

    Parameters
    ----------
    file_bytes : bytes
        Complete file content as bytes.

    Returns
    -------
    str
        ``utf-8-sig`` when a BOM is present, ``utf-8`` when the bytes decode
        as UTF-8, ``latin-1`` otherwise.
    """
    if file_bytes.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"

    try:
        file_bytes.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    return "latin-1"


def normalize_line_endings(content: str) -> str:
    """Normalize CRLF and CR line endings to LF."""
    content = content.replace("\r\n", "\n")
    return content.replace("\r", "\n")


def check_source(source: Source) -> None:
    """Reject empty input and unsupported source types.

    Raises
    ------
    InvalidArguments
        If ``source`` is None, empty, or neither text, bytes nor readable.
    """
    if source is None or (isinstance(source, (str, bytes)) and not source):
        raise InvalidArguments("parse input must not be empty")

    if not isinstance(source, (str, bytes)) and not hasattr(source, "read"):
        raise InvalidArguments(
            f"parse input must be str, bytes or a file object, got {type(source).__name__}"
        )


def open_source(source: Source) -> TextIO:
    """Wrap any accepted input source as a text stream with LF line endings.

    Parameters
    ----------
    source : Source
        File content as ``str`` or ``bytes``, or an open binary or text
        file object.

    Returns
    -------
    TextIO
        Text stream positioned at the start of the content.

    Raises
    ------
    InvalidArguments
        If ``source`` is empty or of an unsupported type.
    """
    check_source(source)

    if isinstance(source, str):
        return io.StringIO(normalize_line_endings(source))

    if isinstance(source, bytes):
        return io.StringIO(normalize_line_endings(source.decode(detect_encoding(source))))

    if isinstance(source, io.TextIOBase):
        return source

    data = source.read()
    if isinstance(data, bytes):
        data = data.decode(detect_encoding(data))
    return io.StringIO(normalize_line_endings(data))


def first_year(value: str) -> int | None:
    """Return the leading four-digit year of ``value``, if any."""
    head = value.strip()[:4]
    return int(head) if len(head) == 4 and head.isdigit() else None


class Driver(ABC):
    """Streaming parser and writer for one file format.

    Attributes
    ----------
    format_id : str
        Registry id of the format this driver implements.
    """

    format_id: str = ""

    @abstractmethod
    def parse(self, stream: TextIO) -> Iterator[Reference | Progress]:
        """Yield references (and progress reports) read from ``stream``."""

    @abstractmethod
    def output(self, settings: OutputSettings) -> "ReferenceWriter":
        """Return a writer serializing references to ``settings.stream``."""


class ReferenceWriter(EventChannel, ABC):
    """Writable consumer of references with ``error`` and ``finish`` signals.

    Output order is: header, ``settings.content``, every ``write`` call,
    footer. Exactly one terminal signal is emitted: ``finish(count)`` after
    a successful ``end()``, or ``error(DriverError)`` on the first failure.
    With nobody listening for ``error`` the ``DriverError`` is raised.

    Subclasses implement ``_write_record`` and optionally
    ``_write_header`` / ``_write_footer``.
    """

    EVENTS = ("error", "finish")

    def __init__(self, settings: OutputSettings, format_id: str, owns_stream: bool = False) -> None:
        """Initialize writer.

        Parameters
        ----------
        settings : OutputSettings
            Output settings; ``settings.stream`` must be writable.
        format_id : str
            Format id, used in error messages.
        owns_stream : bool, optional
            Close the stream once the writer is done, by default False.
        """
        super().__init__()
        if settings.stream is None:
            raise InvalidArguments("output settings must specify a stream")
        self.settings = settings
        self.stream: TextIO = settings.stream
        self.format_id = format_id
        self.owns_stream = owns_stream
        self.count = 0
        self.closed = False
        self._started = False

    def write(self, ref: Reference) -> None:
        """Serialize one reference."""
        self._guarded(self._write_one, ref)

    def end(self) -> None:
        """Flush remaining output, close the sink if owned and signal finish."""
        if self.closed:
            return
        if not self._guarded(self._finish):
            return
        self.closed = True
        self.emit("finish", self.count)

    def _write_one(self, ref: Reference) -> None:
        if self.closed:
            raise InvalidArguments("writer is closed")
        self._start()
        self._write_record(ref, self.count)
        self.count += 1

    def _start(self) -> None:
        if self._started:
            return
        self._started = True
        self._write_header()
        for ref in self.settings.content or []:
            self._write_record(ref, self.count)
            self.count += 1

    def _finish(self) -> None:
        self._start()
        self._write_footer()
        self.stream.flush()
        if self.owns_stream:
            self.stream.close()

    def _guarded(self, step: Any, *args: Any) -> bool:
        try:
            step(*args)
        except InvalidArguments:
            raise
        except Exception as e:
            self._fail(e)
            return False
        return True

    def _fail(self, cause: Exception) -> None:
        self.closed = True
        if self.owns_stream and not self.stream.closed:
            self.stream.close()
        error = DriverError(f"{self.format_id} writer failed: {cause}", format_id=self.format_id)
        error.__cause__ = cause
        if not self.has_subscribers("error"):
            raise error
        self.emit("error", error)

    def selected_fields(self, ref: Reference) -> list[str]:
        """Fields of ``ref`` to write, honoring ``settings.fields``."""
        if self.settings.fields is None:
            return list(ref)
        return [name for name in self.settings.fields if name in ref]

    def _write_header(self) -> None:
        """Write anything that precedes the first record."""

    @abstractmethod
    def _write_record(self, ref: Reference, index: int) -> None:
        """Write one reference; ``index`` is its 0-based position."""

    def _write_footer(self) -> None:
        """Write anything that follows the last record."""
