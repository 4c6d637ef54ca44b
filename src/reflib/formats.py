"""Format registry: the closed set of supported formats and their drivers.

The registry is built once at import time and never mutated. Extension
lookup is exact and case-insensitive; when two formats claim the same
extension, the one declared first wins.
"""

import os
from collections.abc import Iterator
from dataclasses import dataclass

from reflib.drivers import (
    DelimitedDriver,
    Driver,
    EndNoteXmlDriver,
    JsonDriver,
    MedlineDriver,
    RisDriver,
)
from reflib.errors import UnsupportedFormat
from reflib.models import REF_TYPES, RefType

__all__ = [
    "FormatDescriptor",
    "FormatRegistry",
    "SUPPORTED_FORMATS",
    "DEFAULT_REGISTRY",
    "REF_TYPES",
    "RefType",
    "identify",
]


@dataclass(frozen=True)
class FormatDescriptor:
    """Static description of one supported format.

    Attributes
    ----------
    id : str
        Short identifier used throughout the API (e.g. ``ris``).
    name : str
        Human-readable name.
    extensions : frozenset[str]
        Lower-case file extensions, each with a leading dot.
    filename : str
        Canonical default filename for exports.
    driver : Driver
        Parser and writer for the format.
    """

    id: str
    name: str
    extensions: frozenset[str]
    filename: str
    driver: Driver

    def __post_init__(self) -> None:
        """Validate extensions."""
        for ext in self.extensions:
            if not ext.startswith(".") or ext != ext.lower():
                raise ValueError(f"Extension must be lower-case with a leading dot: {ext!r}")


class FormatRegistry:
    """Ordered, read-only collection of format descriptors."""

    def __init__(self, descriptors: tuple[FormatDescriptor, ...]) -> None:
        ids = [d.id for d in descriptors]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate format ids: {duplicates}")
        self._descriptors = tuple(descriptors)
        self._by_id = {d.id: d for d in self._descriptors}

    def __iter__(self) -> Iterator[FormatDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, format_id: object) -> bool:
        return format_id in self._by_id

    @property
    def ids(self) -> list[str]:
        """Format ids in declaration order."""
        return [d.id for d in self._descriptors]

    def get(self, format_id: str) -> FormatDescriptor:
        """Look up a descriptor by id.

        Raises
        ------
        UnsupportedFormat
            If no format has this id.
        """
        descriptor = self._by_id.get(format_id)
        if descriptor is None:
            raise UnsupportedFormat(
                f"Unsupported format {format_id!r}. Supported formats: {self.ids}",
                format_id=format_id,
            )
        return descriptor

    def identify(self, filename: str | os.PathLike[str]) -> str | None:
        """Return the id of the format owning ``filename``'s extension, or None."""
        ext = os.path.splitext(os.fspath(filename))[1].lower()
        if not ext:
            return None
        for descriptor in self._descriptors:
            if ext in descriptor.extensions:
                return descriptor.id
        return None

    def for_path(self, path: str | os.PathLike[str]) -> FormatDescriptor:
        """Resolve the descriptor for a file path by its extension.

        Raises
        ------
        UnsupportedFormat
            If no format claims the extension.
        """
        format_id = self.identify(path)
        if format_id is None:
            raise UnsupportedFormat(
                f"Cannot determine format of {os.fspath(path)!r} from its extension",
                path=os.fspath(path),
            )
        return self._by_id[format_id]


SUPPORTED_FORMATS: tuple[FormatDescriptor, ...] = (
    FormatDescriptor(
        id="csv",
        name="Comma Separated Values",
        extensions=frozenset({".csv"}),
        filename="references.csv",
        driver=DelimitedDriver("csv", delimiter=","),
    ),
    FormatDescriptor(
        id="endnotexml",
        name="EndNote XML file",
        extensions=frozenset({".xml"}),
        filename="endnote.xml",
        driver=EndNoteXmlDriver(),
    ),
    FormatDescriptor(
        id="json",
        name="JSON file",
        extensions=frozenset({".json"}),
        filename="library.json",
        driver=JsonDriver(),
    ),
    FormatDescriptor(
        id="medline",
        name="MEDLINE / PubMed file",
        extensions=frozenset({".nbib"}),
        filename="medline.nbib",
        driver=MedlineDriver(),
    ),
    FormatDescriptor(
        id="ris",
        name="RIS file",
        extensions=frozenset({".ris"}),
        filename="ris.ris",
        driver=RisDriver(),
    ),
    FormatDescriptor(
        id="tsv",
        name="Tab Separated Values",
        extensions=frozenset({".tsv"}),
        filename="references.tsv",
        driver=DelimitedDriver("tsv", delimiter="\t"),
    ),
)

DEFAULT_REGISTRY = FormatRegistry(SUPPORTED_FORMATS)


def identify(filename: str | os.PathLike[str]) -> str | None:
    """Identify a file's format from its extension.

    Parameters
    ----------
    filename : str | os.PathLike[str]
        File name or path; only the extension is inspected.

    Returns
    -------
    str | None
        Format id, or None when no supported format uses the extension.

    Examples
    --------
    >>> identify("REPORT.CSV")
    'csv'
    >>> identify("report.unknown") is None
    True
    """
    return DEFAULT_REGISTRY.identify(filename)
