"""Tests for audit logger module."""

import json
from pathlib import Path

import pytest

from reflib import parse, output_file
from reflib.audit import AuditLogger, LogEvent
from reflib.errors import DriverError


def _read_events(path: Path) -> list[dict]:
    """Read all JSONL events from file."""
    with path.open() as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.mark.unit
def test_logger_init_creates_file(tmp_path: Path) -> None:
    """Test logger creates the log file and its parent directories."""
    with AuditLogger(tmp_path / "logs" / "events.jsonl") as logger:
        assert logger.log_path.exists()
        assert "__" in logger.run_id


@pytest.mark.unit
def test_logger_event_writes_valid_jsonl(audit: AuditLogger) -> None:
    """Test event() writes a valid JSONL line with correct envelope."""
    audit.event("custom", data={"key": "value"}, operation="parse", format_id="ris")

    events = _read_events(audit.log_path)

    assert len(events) == 1
    evt = events[0]
    assert evt["run_id"] == "test_run"
    assert evt["event"] == "custom"
    assert evt["level"] == "INFO"
    assert evt["data"] == {"key": "value"}
    assert evt["operation"] == "parse"
    assert evt["format"] == "ris"
    assert evt["ts"].endswith("Z")


@pytest.mark.unit
def test_log_event_rejects_unknown_level() -> None:
    """Test levels are restricted to the known set."""
    with pytest.raises(ValueError):
        LogEvent(ts="t", run_id="r", level="LOUD", event="e")


@pytest.mark.unit
def test_parse_logs_start_and_finish(audit: AuditLogger) -> None:
    """Test a successful parse records started and finished events."""
    list(parse("ris", "TY  - JOUR\nER  - \nTY  - BOOK\nER  - \n", audit=audit))

    events = _read_events(audit.log_path)

    assert [e["event"] for e in events] == ["parse_started", "parse_finished"]
    assert events[1]["data"]["records"] == 2
    assert events[1]["format"] == "ris"


@pytest.mark.unit
def test_parse_logs_driver_error(audit: AuditLogger) -> None:
    """Test a driver fault is logged at ERROR level with its cause."""
    with pytest.raises(DriverError):
        parse("json", "[{", audit=audit).run()

    events = _read_events(audit.log_path)

    assert [e["event"] for e in events] == ["parse_started", "driver_error"]
    assert events[1]["level"] == "ERROR"
    assert events[1]["data"]["exception_class"] == "DriverError"
    assert events[1]["data"]["cause_class"] == "JSONDecodeError"


@pytest.mark.unit
def test_output_file_logs_events(audit: AuditLogger, tmp_path: Path) -> None:
    """Test output_file records started and finished events."""
    output_file(tmp_path / "out.csv", [{"title": "a"}], audit=audit)

    events = _read_events(audit.log_path)

    assert [e["event"] for e in events] == ["output_started", "output_finished"]
    assert events[0]["data"]["destination"].endswith("out.csv")
    assert events[1]["data"]["records"] == 1


@pytest.mark.unit
def test_output_file_logs_writer_error(audit: AuditLogger, tmp_path: Path) -> None:
    """Test a writer fault is logged once when delivered to a callback."""
    output_file(tmp_path / "out.json", [{"title": {1}}], callback=lambda e, r: None, audit=audit)

    events = _read_events(audit.log_path)

    assert [e["event"] for e in events] == ["output_started", "driver_error"]
