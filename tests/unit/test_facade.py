"""Tests for the awaitable facade."""

import asyncio
import json
import threading

import pytest

from reflib import promises
from reflib.dispatch import DeliveryMode
from reflib.errors import DriverError, InvalidArguments, UnsupportedFormat
from reflib.facade import CALLBACK_OPERATIONS, awaitable



@pytest.mark.unit
def test_promises_built_from_operation_list() -> None:
    """Test every listed callback operation has an awaitable form."""
    assert [op.__name__ for op in CALLBACK_OPERATIONS] == ["parse", "parse_file", "output_file"]
    for name in ("parse", "parse_file", "output_file"):
        assert getattr(promises, name).delivery_mode is DeliveryMode.AWAITABLE


@pytest.mark.unit
@pytest.mark.asyncio
async def test_parse_resolves_with_references() -> None:
    """Test awaiting parse yields the normalized references."""
    refs = await promises.parse(
        "ris", "TY  - JOUR\nSP  - 123-4\nER  - \n", {"fixes": {"pages": True}}
    )

    assert refs == [{"type": "journalArticle", "pages": "123-124"}]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_parse_rejects_on_driver_error() -> None:
    """Test a driver fault rejects the awaitable."""
    with pytest.raises(DriverError):
        await promises.parse("json", "[{")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_format_rejects() -> None:
    """Test usage errors reject the awaitable instead of escaping early."""
    pending = promises.parse("bibtex", "data")

    with pytest.raises(UnsupportedFormat):
        await pending


@pytest.mark.unit
@pytest.mark.asyncio
async def test_parse_file_and_output_file(tmp_path) -> None:
    """Test file operations resolve with references and written count."""
    source = tmp_path / "in.json"
    source.write_text(json.dumps([{"title": "a"}, {"title": "b"}]), encoding="utf-8")

    refs = await promises.parse_file(source)
    count = await promises.output_file(tmp_path / "out.ris", refs)

    assert [r["title"] for r in refs] == ["a", "b"]
    assert count == 2
    assert (tmp_path / "out.ris").read_text(encoding="utf-8").count("ER  - ") == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_awaitable_rejects_explicit_callback() -> None:
    """Test passing a callback to an awaitable form is a usage error."""
    with pytest.raises(InvalidArguments):
        await promises.parse("ris", "TY  - JOUR\n", callback=print)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_awaitable_keeps_first_outcome() -> None:
    """Test only the first reported outcome settles the awaitable."""

    def reports_twice(value, callback):
        callback(None, value)
        callback(RuntimeError("late"), None)

    assert await awaitable(reports_twice)(5) == 5


@pytest.mark.unit
@pytest.mark.asyncio
async def test_parse_runs_off_the_event_loop(make_scripted) -> None:
    """Test other tasks run while an awaitable parse is in progress."""
    gate = threading.Event()
    _, registry = make_scripted([{"title": "one"}], gate=gate)

    async def open_gate() -> None:
        await asyncio.sleep(0)
        gate.set()

    opener = asyncio.create_task(open_gate())
    refs = await promises.parse("scripted", "input", registry=registry)
    await opener

    assert refs == [{"title": "one"}]

