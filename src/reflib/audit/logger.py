"""Structured audit logger for parse and output operations.

Events are appended to a JSONL file, one JSON object per line, and flushed
after each write.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from reflib.audit.helpers import generate_run_id, get_iso_timestamp
from reflib.audit.models import LogEvent

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Attributes
    ----------
    run_id : str
        Identifier written on every event.
    log_path : Path
        Path to JSONL log file.
    """

    def __init__(self, log_path: Path | str, run_id: str | None = None) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        log_path : Path | str
            Path to JSONL log file; parent directories are created.
        run_id : str | None, optional
            Run identifier, generated when omitted.
        """
        self.run_id = run_id or generate_run_id()
        self.log_path = Path(log_path)

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        operation: str | None = None,
        format_id: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "parse_started").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        operation : str | None, optional
            Operation name (``parse`` or ``output``).
        format_id : str | None, optional
            Format involved in the operation.
        """
        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            operation=operation,
            format=format_id,
        )
        json.dump(asdict(log_event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def parse_started(self, format_id: str, source: str | None = None) -> None:
        """Log parse_started event."""
        data = {"source": source} if source is not None else {}
        self.event("parse_started", data=data, operation="parse", format_id=format_id)

    def parse_finished(self, format_id: str, records: int, duration_seconds: float) -> None:
        """Log parse_finished event.

        Parameters
        ----------
        format_id : str
            Parsed format.
        records : int
            Number of references delivered.
        duration_seconds : float
            Time from start of consumption to end of input.
        """
        self.event(
            "parse_finished",
            data={"records": records, "duration_seconds": duration_seconds},
            operation="parse",
            format_id=format_id,
        )

    def output_started(self, format_id: str, destination: str | None = None) -> None:
        """Log output_started event."""
        data = {"destination": destination} if destination is not None else {}
        self.event("output_started", data=data, operation="output", format_id=format_id)

    def output_finished(self, format_id: str, records: int) -> None:
        """Log output_finished event."""
        self.event(
            "output_finished",
            data={"records": records},
            operation="output",
            format_id=format_id,
        )

    def driver_error(self, operation: str, format_id: str | None, exception: BaseException) -> None:
        """Log driver_error event.

        Parameters
        ----------
        operation : str
            Operation that failed.
        format_id : str | None
            Format whose driver failed.
        exception : BaseException
            The delivered error; its cause, if any, is recorded too.
        """
        data: dict[str, Any] = {
            "exception_class": type(exception).__name__,
            "message": str(exception),
        }
        cause = exception.__cause__
        if cause is not None:
            data["cause_class"] = type(cause).__name__
            data["cause_message"] = str(cause)

        self.event(
            "driver_error",
            data=data,
            level="ERROR",
            operation=operation,
            format_id=format_id,
        )
