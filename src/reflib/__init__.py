"""Read, normalize and write bibliographic reference files.

This package provides:
- Format registry (reflib.formats): supported formats and identification
- Drivers (reflib.drivers): RIS, MEDLINE, JSON, CSV/TSV, EndNote XML
- Dispatch (reflib.dispatch): parse and output operations
- Fixes (reflib.fix): author, date and page normalization
- Facade (reflib.facade): awaitable forms of the operations
- Audit (reflib.audit): JSONL event logging
"""

__version__ = "0.3.0"
__license__ = "MIT"

from reflib import fix
from reflib.dispatch import DeliveryMode, ParseStream, output, output_file, parse, parse_file
from reflib.errors import (
    DriverError,
    InternalInvariantViolation,
    InvalidArguments,
    ReflibError,
    UnsupportedFormat,
)
from reflib.facade import promises
from reflib.formats import REF_TYPES, SUPPORTED_FORMATS, identify
from reflib.settings import DateFormatRule, FixSettings, OutputSettings, ParseSettings

__all__ = [
    "__version__",
    "__license__",
    "DateFormatRule",
    "DeliveryMode",
    "DriverError",
    "FixSettings",
    "InternalInvariantViolation",
    "InvalidArguments",
    "OutputSettings",
    "ParseSettings",
    "ParseStream",
    "REF_TYPES",
    "ReflibError",
    "SUPPORTED_FORMATS",
    "UnsupportedFormat",
    "fix",
    "identify",
    "output",
    "output_file",
    "parse",
    "parse_file",
    "promises",
]
