"""Pytest configuration and fixtures for test suite."""

import sys
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from reflib.audit import AuditLogger  # noqa: E402
from reflib.drivers.base import Driver, ReferenceWriter  # noqa: E402
from reflib.formats import FormatDescriptor, FormatRegistry  # noqa: E402
from reflib.models import Progress  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample reference files."""
    return FIXTURES_DIR


@pytest.fixture
def audit(tmp_path: Path) -> Iterator[AuditLogger]:
    """Audit logger writing to a temporary file, closed after the test."""
    logger = AuditLogger(tmp_path / "events.jsonl", run_id="test_run")
    yield logger
    logger.close()


class ScriptedDriver(Driver):
    """Driver that replays a fixed list of items, then optionally fails.

    Lets dispatch tests control exactly what a driver emits. With a
    ``gate``, parsing blocks until the event is set.
    """

    format_id = "scripted"

    def __init__(
        self,
        items: list,
        fail_with: Exception | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.items = items
        self.fail_with = fail_with
        self.gate = gate
        self.streams_seen: list = []

    def parse(self, stream):
        self.streams_seen.append(stream)
        if self.gate is not None and not self.gate.wait(timeout=5):
            raise TimeoutError("gate was never opened")
        for item in self.items:
            yield item
        if self.fail_with is not None:
            raise self.fail_with

    def output(self, settings):
        return ListWriter(settings, self.format_id)


class ListWriter(ReferenceWriter):
    """Writer that renders each reference as its title on one line."""

    def _write_record(self, ref, index):
        if ref.get("explode"):
            raise RuntimeError("cannot serialize")
        self.stream.write(f"{index}:{ref.get('title', '')}\n")


def make_registry(driver: Driver, extension: str = ".scr") -> FormatRegistry:
    """Build a registry holding only ``driver``."""
    return FormatRegistry(
        (
            FormatDescriptor(
                id=driver.format_id,
                name="Scripted",
                extensions=frozenset({extension}),
                filename=f"scripted{extension}",
                driver=driver,
            ),
        )
    )


@pytest.fixture
def scripted_items() -> list:
    """Three references interleaved with progress reports."""
    return [
        {"title": "one", "pages": "123-4"},
        Progress(1, 3),
        {"title": "two", "authors": ["A; B"]},
        Progress(2, 3),
        {"title": "three", "date": "2020"},
        Progress(3, 3),
    ]


@pytest.fixture
def make_scripted() -> Callable[..., tuple[ScriptedDriver, FormatRegistry]]:
    """Factory for a scripted driver and a registry containing only it."""

    def _factory(
        items: list | None = None,
        fail_with: Exception | None = None,
        gate: threading.Event | None = None,
    ) -> tuple[ScriptedDriver, FormatRegistry]:
        driver = ScriptedDriver(list(items or []), fail_with=fail_with, gate=gate)
        return driver, make_registry(driver)

    return _factory
