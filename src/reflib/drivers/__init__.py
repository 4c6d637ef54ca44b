"""Format drivers: one streaming parser and writer per supported format."""

from .base import Driver, ReferenceWriter, Source, detect_encoding, open_source
from .delimited import DelimitedDriver
from .endnotexml import EndNoteXmlDriver
from .jsonfile import JsonDriver
from .medline import MedlineDriver
from .ris import RisDriver

__all__ = [
    "Driver",
    "ReferenceWriter",
    "Source",
    "detect_encoding",
    "open_source",
    "DelimitedDriver",
    "EndNoteXmlDriver",
    "JsonDriver",
    "MedlineDriver",
    "RisDriver",
]
