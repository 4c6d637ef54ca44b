"""Parse and output settings.

Settings are plain dataclasses validated on construction. Callers may pass
mappings instead; those are checked against a JSON Schema first so that a
malformed configuration fails with ``InvalidArguments`` before any I/O.
"""

import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, TextIO

import jsonschema

from reflib.errors import InvalidArguments
from reflib.models import Reference

__all__ = [
    "DateFormatRule",
    "FixSettings",
    "ParseSettings",
    "OutputSettings",
    "DEFAULT_DATE_FORMATS",
    "DEFAULT_PARSE_SETTINGS",
    "coerce_parse_settings",
    "coerce_output_settings",
    "split_fields",
]

FIELDS_SEPARATOR_RE = re.compile(r"\s*,\s*")

_DATE_RULE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "pattern": {"type": "string", "minLength": 1},
        "has_year": {"type": "boolean"},
        "has_month": {"type": "boolean"},
        "has_day": {"type": "boolean"},
    },
    "required": ["pattern"],
    "additionalProperties": False,
}

PARSE_SETTINGS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "fixes": {
            "type": "object",
            "properties": {
                "authors": {"type": "boolean"},
                "dates": {"type": "boolean"},
                "pages": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "date_formats": {"type": "array", "items": _DATE_RULE_SCHEMA},
    },
    "additionalProperties": False,
}

OUTPUT_SETTINGS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "format": {"type": "string", "minLength": 1},
        "fields": {
            "anyOf": [
                {"type": "string"},
                {"type": "array", "items": {"type": "string"}},
                {"type": "null"},
            ]
        },
        "stream": {},
        "content": {"type": ["array", "null"], "items": {"type": "object"}},
        "options": {"type": "object"},
    },
    "required": ["format"],
    "additionalProperties": False,
}


def _is_array(checker: Any, instance: Any) -> bool:
    return isinstance(instance, (list, tuple))


# Settings are Python values, so tuples count as JSON arrays.
SettingsValidator = jsonschema.validators.extend(
    jsonschema.Draft202012Validator,
    type_checker=jsonschema.Draft202012Validator.TYPE_CHECKER.redefine("array", _is_array),
)


def _validate(data: Any, schema: dict[str, Any], what: str) -> None:
    if not isinstance(data, Mapping):
        raise InvalidArguments(f"{what} must be a mapping, got {type(data).__name__}")
    error = jsonschema.exceptions.best_match(SettingsValidator(schema).iter_errors(dict(data)))
    if error is not None:
        location = ".".join(str(p) for p in error.absolute_path) or "<root>"
        raise InvalidArguments(f"Invalid {what} at {location}: {error.message}") from error


def split_fields(fields: str | list[str] | tuple[str, ...] | None) -> list[str] | None:
    """Turn a comma-delimited field list into a list of field names.

    Parameters
    ----------
    fields : str | list[str] | tuple[str, ...] | None
        Field names, either already split or as ``"a, b,c"``.

    Returns
    -------
    list[str] | None
        Field names in the given order, or None when no fields were given.
    """
    if fields is None:
        return None
    if isinstance(fields, str):
        return FIELDS_SEPARATOR_RE.split(fields.strip())
    return list(fields)


@dataclass(frozen=True)
class DateFormatRule:
    """A date pattern and the components it supplies.

    Attributes
    ----------
    pattern : str
        Pattern made of ``YYYY``, ``YY``, ``MMMM``, ``MMM``, ``MM``, ``M``,
        ``DD``, ``D`` and ``Do`` tokens; other characters are literal.
    has_year : bool
        Pattern supplies a year.
    has_month : bool
        Pattern supplies a month.
    has_day : bool
        Pattern supplies a day of month.
    """

    pattern: str
    has_year: bool = False
    has_month: bool = False
    has_day: bool = False

    def __post_init__(self) -> None:
        """Validate pattern."""
        if not isinstance(self.pattern, str) or not self.pattern:
            raise InvalidArguments(f"Date pattern must be a non-empty string, got {self.pattern!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DateFormatRule":
        """Build a rule from a mapping with the dataclass field names."""
        _validate(data, _DATE_RULE_SCHEMA, "date format rule")
        return cls(**data)


DEFAULT_DATE_FORMATS: tuple[DateFormatRule, ...] = (
    DateFormatRule("MM-DD-YYYY", has_year=True, has_month=True, has_day=True),
    DateFormatRule("DD/MM/YYYY", has_year=True, has_month=True, has_day=True),
    DateFormatRule("DD-MM-YYYY", has_year=True, has_month=True, has_day=True),
    DateFormatRule("YYYY-MM-DD", has_year=True, has_month=True, has_day=True),
    DateFormatRule("Do MMMM YY", has_year=True, has_month=True, has_day=True),
    DateFormatRule("Do MMMM YYYY", has_year=True, has_month=True, has_day=True),
    DateFormatRule("MMM YYYY", has_year=True, has_month=True),
    DateFormatRule("MMM", has_month=True),
    DateFormatRule("MMMM", has_month=True),
    DateFormatRule("YYYY", has_year=True),
)


@dataclass(frozen=True)
class FixSettings:
    """Which normalization fixes run on each parsed reference."""

    authors: bool = False
    dates: bool = False
    pages: bool = False

    def any_enabled(self) -> bool:
        """Return True if at least one fix is switched on."""
        return self.authors or self.dates or self.pages


@dataclass(frozen=True)
class ParseSettings:
    """Configuration for a parse operation.

    Attributes
    ----------
    fixes : FixSettings
        Enabled fixes; all disabled by default.
    date_formats : tuple[DateFormatRule, ...]
        Date patterns in priority order for the dates fix.
    """

    fixes: FixSettings = field(default_factory=FixSettings)
    date_formats: tuple[DateFormatRule, ...] = DEFAULT_DATE_FORMATS

    def __post_init__(self) -> None:
        """Validate and freeze nested values."""
        if not isinstance(self.fixes, FixSettings):
            raise InvalidArguments(f"fixes must be FixSettings, got {type(self.fixes).__name__}")

        rules = tuple(self.date_formats)
        if not all(isinstance(rule, DateFormatRule) for rule in rules):
            raise InvalidArguments("date_formats must contain only DateFormatRule values")
        object.__setattr__(self, "date_formats", rules)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParseSettings":
        """Build settings from a mapping, filling defaults for missing keys.

        Parameters
        ----------
        data : Mapping[str, Any]
            Mapping shaped like ``{"fixes": {"pages": True}, "date_formats": [...]}``.

        Returns
        -------
        ParseSettings
            Validated settings.

        Raises
        ------
        InvalidArguments
            If the mapping does not match the settings schema.
        """
        _validate(data, PARSE_SETTINGS_SCHEMA, "parse settings")

        fixes = FixSettings(**data.get("fixes", {}))
        if "date_formats" in data:
            rules = tuple(DateFormatRule(**rule) for rule in data["date_formats"])
            return cls(fixes=fixes, date_formats=rules)
        return cls(fixes=fixes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["date_formats"] = [asdict(rule) for rule in self.date_formats]
        return data


DEFAULT_PARSE_SETTINGS = ParseSettings()


@dataclass
class OutputSettings:
    """Configuration for an output operation.

    Attributes
    ----------
    format : str
        Id of the target format.
    fields : list[str] | None
        Fields to write, in order. A comma-delimited string is split.
    stream : TextIO | None
        Writable text sink.
    content : list[Reference] | None
        References written before any explicit ``write`` call.
    options : dict[str, Any]
        Driver-specific options, passed through untouched.
    """

    format: str
    fields: list[str] | None = None
    stream: TextIO | None = None
    content: list[Reference] | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate format and normalize fields."""
        if not isinstance(self.format, str) or not self.format:
            raise InvalidArguments("output settings must specify a format")
        self.fields = split_fields(self.fields)
        if self.content is not None:
            self.content = list(self.content)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutputSettings":
        """Build output settings from a mapping.

        Raises
        ------
        InvalidArguments
            If the mapping does not match the output settings schema.
        """
        _validate(data, OUTPUT_SETTINGS_SCHEMA, "output settings")
        return cls(**data)


def coerce_parse_settings(settings: ParseSettings | Mapping[str, Any] | None) -> ParseSettings:
    """Accept the settings forms the public API allows.

    Parameters
    ----------
    settings : ParseSettings | Mapping[str, Any] | None
        Caller-supplied settings.

    Returns
    -------
    ParseSettings
        Settings instance (defaults when None).

    Raises
    ------
    InvalidArguments
        If ``settings`` is neither None, a ParseSettings, nor a valid mapping.
    """
    if settings is None:
        return DEFAULT_PARSE_SETTINGS
    if isinstance(settings, ParseSettings):
        return settings
    return ParseSettings.from_dict(settings)


def coerce_output_settings(settings: OutputSettings | Mapping[str, Any]) -> OutputSettings:
    """Accept an OutputSettings or a mapping, raising InvalidArguments otherwise."""
    if isinstance(settings, OutputSettings):
        return settings
    return OutputSettings.from_dict(settings)
