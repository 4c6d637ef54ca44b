"""Output dispatch: resolve a writer for a format, optionally backed by a file."""

import dataclasses
import os
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from reflib.audit import AuditLogger
from reflib.drivers.base import ReferenceWriter
from reflib.errors import DriverError, InvalidArguments
from reflib.formats import DEFAULT_REGISTRY, FormatRegistry
from reflib.models import Reference
from reflib.settings import OutputSettings, coerce_output_settings

from .parse import delivery_mode

__all__ = ["OutputCallback", "output", "output_file"]

OutputCallback = Callable[[DriverError | None, int | None], Any]


def output(
    settings: OutputSettings | Mapping[str, Any],
    *,
    registry: FormatRegistry | None = None,
) -> ReferenceWriter:
    """Create a writer for ``settings.format``.

    Parameters
    ----------
    settings : OutputSettings | Mapping[str, Any]
        Output settings; ``format`` and ``stream`` are required.
    registry : FormatRegistry | None, optional
        Registry to resolve the format in, by default the built-in one.

    Returns
    -------
    ReferenceWriter
        Writer accepting ``write(ref)`` and ``end()``.

    Raises
    ------
    InvalidArguments
        If ``settings`` is not a valid settings object or mapping.
    UnsupportedFormat
        If the format is unknown.
    """
    out = coerce_output_settings(settings)
    descriptor = (registry or DEFAULT_REGISTRY).get(out.format)
    return descriptor.driver.output(out)


def _merge_settings(
    settings: OutputSettings | Mapping[str, Any] | None,
    format_id: str,
) -> OutputSettings:
    if settings is None:
        return OutputSettings(format=format_id)
    if isinstance(settings, OutputSettings):
        return dataclasses.replace(settings, format=format_id)
    if not isinstance(settings, Mapping):
        raise InvalidArguments(
            f"output settings must be OutputSettings or a mapping, got {type(settings).__name__}"
        )
    return coerce_output_settings({**settings, "format": format_id})


def output_file(
    path: str | os.PathLike[str],
    references: Iterable[Reference],
    settings: OutputSettings | Mapping[str, Any] | None = None,
    callback: OutputCallback | None = None,
    *,
    registry: FormatRegistry | None = None,
    audit: AuditLogger | None = None,
) -> ReferenceWriter:
    """Write ``references`` to ``path`` in the format its extension names.

    The file is written with UTF-8 encoding and closed when the writer
    finishes or fails. With a callback, exactly one of
    ``callback(None, count)`` or ``callback(error, None)`` follows.
    Without one, a writer failure raises ``DriverError``.

    Parameters
    ----------
    path : str | os.PathLike[str]
        Destination file; its extension selects the format.
    references : Iterable[Reference]
        References to write, in order.
    settings : OutputSettings | Mapping[str, Any] | None, optional
        Extra output settings (``fields``, ``options``); the format always
        comes from ``path``.
    callback : OutputCallback | None, optional
        Completion callback.
    registry : FormatRegistry | None, optional
        Registry to resolve the extension in.
    audit : AuditLogger | None, optional
        Receives ``output_started``, ``output_finished`` and ``driver_error``.

    Returns
    -------
    ReferenceWriter
        The writer, already ended.

    Raises
    ------
    UnsupportedFormat
        If no format claims the extension; raised before the file is opened.
    InvalidArguments
        If ``references``, ``settings`` or ``callback`` are malformed.
    DriverError
        If writing fails and no callback was given.
    """
    registry = registry or DEFAULT_REGISTRY
    descriptor = registry.for_path(path)
    delivery_mode(callback)
    if references is None or isinstance(references, (str, bytes, Mapping)):
        raise InvalidArguments("references must be an iterable of reference mappings")

    base = _merge_settings(settings, descriptor.id)
    content = list(base.content or []) + list(references)

    handle = open(path, "w", encoding="utf-8", newline="")
    try:
        writer = output(dataclasses.replace(base, stream=handle, content=content), registry=registry)
    except BaseException:
        handle.close()
        raise
    writer.owns_stream = True

    def on_finish(count: int) -> None:
        if audit is not None:
            audit.output_finished(descriptor.id, records=count)
        if callback is not None:
            callback(None, count)

    def on_error(error: DriverError) -> None:
        if audit is not None:
            audit.driver_error("output", descriptor.id, error)
        callback(error, None)

    writer.once("finish", on_finish)
    if callback is not None:
        writer.once("error", on_error)

    if audit is not None:
        audit.output_started(descriptor.id, destination=os.fspath(path))

    try:
        writer.end()
    except DriverError as e:
        if audit is not None:
            audit.driver_error("output", descriptor.id, e)
        raise

    return writer
