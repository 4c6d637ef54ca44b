"""Data model for audit log events."""

from dataclasses import dataclass, field
from typing import Any

__all__ = ["LogEvent", "LEVELS"]

LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


@dataclass
class LogEvent:
    """One line of the JSONL audit log.

    Attributes
    ----------
    ts : str
        ISO8601 UTC timestamp.
    run_id : str
        Identifier shared by every event of one logger.
    level : str
        One of ``LEVELS``.
    event : str
        Event type (e.g. ``parse_started``).
    data : dict[str, Any]
        Event-specific payload.
    operation : str | None
        Operation that produced the event (``parse``, ``output``).
    format : str | None
        Format id involved, when known.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any] = field(default_factory=dict)
    operation: str | None = None
    format: str | None = None

    def __post_init__(self) -> None:
        """Validate level."""
        if self.level not in LEVELS:
            raise ValueError(f"level must be one of {LEVELS}, got {self.level!r}")
