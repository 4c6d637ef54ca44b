"""Tests for output dispatch."""

import io
import json

import pytest

from reflib import output, output_file
from reflib.drivers.ris import RisWriter
from reflib.errors import DriverError, InvalidArguments, UnsupportedFormat
from reflib.settings import OutputSettings


class Recorder:
    """Callback that records every invocation."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, error, result) -> None:
        self.calls.append((error, result))


@pytest.mark.unit
def test_output_returns_driver_writer() -> None:
    """Test output resolves the driver's writer from a mapping."""
    writer = output({"format": "ris", "stream": io.StringIO()})

    assert isinstance(writer, RisWriter)


@pytest.mark.unit
def test_output_splits_string_fields() -> None:
    """Test a comma-delimited fields string is split before the driver sees it."""
    writer = output({"format": "csv", "fields": "title ,year", "stream": io.StringIO()})

    assert writer.settings.fields == ["title", "year"]


@pytest.mark.unit
def test_output_accepts_tuple_content_and_fields() -> None:
    """Test tuple-valued content and fields in a settings mapping."""
    sink = io.StringIO()
    writer = output(
        {
            "format": "json",
            "stream": sink,
            "fields": ("title",),
            "content": ({"title": "a", "year": 2020},),
        }
    )

    writer.end()

    assert json.loads(sink.getvalue()) == [{"title": "a"}]


@pytest.mark.unit
@pytest.mark.parametrize("settings", [None, "ris", 42, {"stream": io.StringIO()}])
def test_output_invalid_settings_raise(settings: object) -> None:
    """Test non-mapping settings or a missing format raise InvalidArguments."""
    with pytest.raises(InvalidArguments):
        output(settings)


@pytest.mark.unit
def test_output_unknown_format_raises() -> None:
    """Test an unknown format raises UnsupportedFormat."""
    with pytest.raises(UnsupportedFormat):
        output(OutputSettings(format="bibtex", stream=io.StringIO()))


@pytest.mark.unit
def test_output_custom_registry(make_scripted) -> None:
    """Test writers come from the given registry."""
    _, registry = make_scripted()
    sink = io.StringIO()

    writer = output({"format": "scripted", "stream": sink}, registry=registry)
    writer.write({"title": "a"})
    writer.end()

    assert sink.getvalue() == "0:a\n"


@pytest.mark.unit
def test_output_file_writes_and_reports_count(tmp_path) -> None:
    """Test output_file writes the file and calls back with the count."""
    path = tmp_path / "out.json"
    callback = Recorder()

    writer = output_file(path, [{"title": "a"}, {"title": "b"}], callback=callback)

    assert callback.calls == [(None, 2)]
    assert writer.stream.closed
    assert json.loads(path.read_text(encoding="utf-8")) == [{"title": "a"}, {"title": "b"}]


@pytest.mark.unit
def test_output_file_without_callback(tmp_path) -> None:
    """Test output_file works without a callback and honors fields."""
    path = tmp_path / "out.ris"

    output_file(path, [{"title": "a", "year": 2020}], {"fields": "title"})

    assert path.read_bytes() == b"TY  - JOUR\r\nTI  - a\r\nER  - \r\n"


@pytest.mark.unit
def test_output_file_unknown_extension_raises_before_opening(tmp_path) -> None:
    """Test the file is not created for an unsupported extension."""
    path = tmp_path / "out.bib"
    callback = Recorder()

    with pytest.raises(UnsupportedFormat):
        output_file(path, [], callback=callback)

    assert not path.exists()
    assert callback.calls == []


@pytest.mark.unit
def test_output_file_error_goes_to_callback_once(tmp_path) -> None:
    """Test a writer fault is delivered once, without a finish."""
    callback = Recorder()

    output_file(tmp_path / "out.json", [{"title": {1}}, {"title": "b"}], callback=callback)

    assert len(callback.calls) == 1
    error, result = callback.calls[0]
    assert isinstance(error, DriverError)
    assert result is None


@pytest.mark.unit
def test_output_file_error_raises_without_callback(tmp_path) -> None:
    """Test a writer fault raises DriverError without a callback."""
    with pytest.raises(DriverError):
        output_file(tmp_path / "out.json", [{"title": {1}}])


@pytest.mark.unit
@pytest.mark.parametrize("references", [None, "refs", {"title": "a"}])
def test_output_file_rejects_non_list_references(tmp_path, references: object) -> None:
    """Test references must be an iterable of mappings."""
    with pytest.raises(InvalidArguments):
        output_file(tmp_path / "out.json", references)
