"""Parse and output dispatch."""

from .output import OutputCallback, output, output_file
from .parse import DeliveryMode, ParseCallback, ParseStream, delivery_mode, parse, parse_file

__all__ = [
    "DeliveryMode",
    "OutputCallback",
    "ParseCallback",
    "ParseStream",
    "delivery_mode",
    "output",
    "output_file",
    "parse",
    "parse_file",
]
