"""
Date and timestamp parsers.

Both use strict ``strptime`` matching against the ``parse_format`` option.
Blank values decant to None; values that are already dates pass through.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, ClassVar

from decanter_kernel.domain.specs import ValueType
from decanter_kernel.exceptions import ParseError
from decanter_kernel.parsers.base import ValueParser

DEFAULT_DATETIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"
DEFAULT_DATE_FORMAT = "%m/%d/%Y"


def _strptime(name: str | None, value: Any, parse_format: str) -> datetime:
    if not isinstance(value, str):
        raise ParseError(name, value, f"expected text, got {type(value).__name__}")
    try:
        return datetime.strptime(value.strip(), parse_format)
    except ValueError as exc:
        raise ParseError(
            name, value, f"does not match format {parse_format!r}"
        ) from exc


class DateTimeParser(ValueParser):
    """Parses text into a ``datetime``."""

    accepts: ClassVar[frozenset[str]] = frozenset({ValueType.DATETIME.value})

    def parse(self, name: str | None, value: Any, options: Mapping[str, Any]) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value
        parse_format = options.get("parse_format", DEFAULT_DATETIME_FORMAT)
        return _strptime(name, value, parse_format)


class DateParser(ValueParser):
    """Parses text into a ``date``."""

    accepts: ClassVar[frozenset[str]] = frozenset({ValueType.DATE.value})

    def parse(self, name: str | None, value: Any, options: Mapping[str, Any]) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        parse_format = options.get("parse_format", DEFAULT_DATE_FORMAT)
        return _strptime(name, value, parse_format).date()
