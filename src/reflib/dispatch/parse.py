"""Parse dispatch: resolve a driver, run it and deliver normalized references.

A parse is delivered in one of two conventions, chosen once from the
arguments: without a callback the caller gets an unstarted ``ParseStream``;
with one, the stream is run to completion and the callback receives
``(error, references)``.
"""

import os
import time
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any

from reflib.audit import AuditLogger
from reflib.drivers.base import Source, check_source, open_source
from reflib.errors import DriverError, InvalidArguments
from reflib.events import EventChannel
from reflib.fix import apply_fixes
from reflib.formats import DEFAULT_REGISTRY, FormatDescriptor, FormatRegistry
from reflib.models import Progress, Reference
from reflib.settings import ParseSettings, coerce_parse_settings

__all__ = [
    "DeliveryMode",
    "ParseCallback",
    "ParseStream",
    "delivery_mode",
    "parse",
    "parse_file",
]

ParseCallback = Callable[[DriverError | None, list[Reference] | None], Any]


class DeliveryMode(Enum):
    """How the result of an operation reaches the caller."""

    STREAM = "stream"
    CALLBACK = "callback"
    AWAITABLE = "awaitable"


def delivery_mode(callback: Callable[..., Any] | None) -> DeliveryMode:
    """Decide the delivery convention from the presence of a callback.

    Raises
    ------
    InvalidArguments
        If ``callback`` is given but is not callable.
    """
    if callback is None:
        return DeliveryMode.STREAM
    if not callable(callback):
        raise InvalidArguments(f"callback must be callable, got {type(callback).__name__}")
    return DeliveryMode.CALLBACK


class ParseStream(EventChannel):
    """One parse operation over one input.

    Events
    ------
    ref(reference)
        A normalized reference, in driver order.
    progress(current, total)
        Driver progress report; ``total`` is None when unknown.
    error(DriverError)
        The driver failed; no ``ref`` or ``end`` follows.
    end()
        Input exhausted.

    The stream is consumed either by ``run()``, which emits the events
    above, or by iterating it, which yields references, emits ``progress``
    and raises ``DriverError``. Either way it runs at most once.
    """

    EVENTS = ("ref", "progress", "error", "end")

    def __init__(
        self,
        descriptor: FormatDescriptor,
        source: Source,
        settings: ParseSettings,
        *,
        mode: DeliveryMode = DeliveryMode.STREAM,
        owns_source: bool = False,
        source_name: str | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        super().__init__()
        self.descriptor = descriptor
        self.settings = settings
        self.mode = mode
        self.count = 0
        self._source = source
        self._owns_source = owns_source
        self._source_name = source_name
        self._audit = audit
        self._started = False

    @property
    def format_id(self) -> str:
        """Id of the format being parsed."""
        return self.descriptor.id

    @property
    def started(self) -> bool:
        """True once consumption has begun."""
        return self._started

    def __iter__(self) -> Iterator[Reference]:
        return self._consume()

    def run(self) -> None:
        """Consume the whole input, emitting events to subscribers.

        Raises
        ------
        DriverError
            If the driver fails and nothing listens for ``error``.
        """
        records = self._consume()
        try:
            for ref in records:
                self.emit("ref", ref)
        except DriverError as e:
            if not self.has_subscribers("error"):
                raise
            self.emit("error", e)
            return
        finally:
            records.close()
        self.emit("end")

    def close(self) -> None:
        """Release the input if this stream owns it."""
        if self._owns_source and hasattr(self._source, "close"):
            self._source.close()

    def _consume(self) -> Iterator[Reference]:
        if self._started:
            raise InvalidArguments("parse stream has already been consumed")
        self._started = True

        if self._audit is not None:
            self._audit.parse_started(self.format_id, source=self._source_name)
        started_at = time.monotonic()

        try:
            items = self._driver_items()
            for item in items:
                if isinstance(item, Progress):
                    self.emit("progress", *item)
                    continue
                ref = apply_fixes(item, self.settings)
                self.count += 1
                yield ref
        finally:
            self.close()

        if self._audit is not None:
            self._audit.parse_finished(
                self.format_id,
                records=self.count,
                duration_seconds=time.monotonic() - started_at,
            )

    def _driver_items(self) -> Iterator[Reference | Progress]:
        try:
            stream = open_source(self._source)
            for item in self.descriptor.driver.parse(stream):
                if not isinstance(item, (dict, Progress)):
                    raise TypeError(f"driver yielded {type(item).__name__}")
                yield item
        except Exception as e:
            error = DriverError(f"{self.format_id} driver failed: {e}", format_id=self.format_id)
            error.__cause__ = e
            if self._audit is not None:
                self._audit.driver_error("parse", self.format_id, error)
            raise error from e


def _deliver_to_callback(stream: ParseStream, callback: ParseCallback) -> None:
    refs: list[Reference] = []
    try:
        for ref in stream:
            refs.append(ref)
    except DriverError as e:
        callback(e, None)
        return
    callback(None, refs)


def _dispatch(
    descriptor: FormatDescriptor,
    source: Source,
    settings: ParseSettings,
    callback: ParseCallback | None,
    *,
    owns_source: bool = False,
    source_name: str | None = None,
    audit: AuditLogger | None = None,
) -> ParseStream:
    stream = ParseStream(
        descriptor,
        source,
        settings,
        mode=delivery_mode(callback),
        owns_source=owns_source,
        source_name=source_name,
        audit=audit,
    )
    if callback is not None:
        _deliver_to_callback(stream, callback)
    return stream


def parse(
    format_id: str,
    source: Source,
    settings: ParseSettings | Mapping[str, Any] | None = None,
    callback: ParseCallback | None = None,
    *,
    registry: FormatRegistry | None = None,
    audit: AuditLogger | None = None,
) -> ParseStream:
    """Parse ``source`` as ``format_id``.

    Parameters
    ----------
    format_id : str
        Registry id of the input format.
    source : Source
        Content as ``str`` or ``bytes``, or an open text or binary file.
    settings : ParseSettings | Mapping[str, Any] | None, optional
        Fix switches and date rules; defaults when None.
    callback : ParseCallback | None, optional
        When given, the input is parsed immediately and
        ``callback(error, references)`` is invoked exactly once.
    registry : FormatRegistry | None, optional
        Registry to resolve ``format_id`` in, by default the built-in one.
    audit : AuditLogger | None, optional
        Receives ``parse_started``, ``parse_finished`` and ``driver_error``.

    Returns
    -------
    ParseStream
        Unstarted stream, or the already consumed one in callback mode.

    Raises
    ------
    UnsupportedFormat
        If ``format_id`` is unknown.
    InvalidArguments
        If ``source`` is empty or ``settings``/``callback`` are malformed.
    """
    descriptor = (registry or DEFAULT_REGISTRY).get(format_id)
    parse_settings = coerce_parse_settings(settings)
    delivery_mode(callback)
    check_source(source)
    return _dispatch(descriptor, source, parse_settings, callback, audit=audit)


def parse_file(
    path: str | os.PathLike[str],
    settings: ParseSettings | Mapping[str, Any] | None = None,
    callback: ParseCallback | None = None,
    *,
    registry: FormatRegistry | None = None,
    audit: AuditLogger | None = None,
) -> ParseStream:
    """Parse a file, choosing the format from its extension.

    The file is opened in binary mode, its encoding detected, and it is
    closed by the stream once parsing finishes or fails.

    Raises
    ------
    UnsupportedFormat
        If no format claims the file extension; raised before opening.
    FileNotFoundError
        If the file does not exist.
    InvalidArguments
        If ``settings`` or ``callback`` are malformed.
    """
    descriptor = (registry or DEFAULT_REGISTRY).for_path(path)
    parse_settings = coerce_parse_settings(settings)
    delivery_mode(callback)

    handle = open(path, "rb")
    return _dispatch(
        descriptor,
        handle,
        parse_settings,
        callback,
        owns_source=True,
        source_name=os.fspath(path),
        audit=audit,
    )
