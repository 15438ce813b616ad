"""
Parser contract.

A parser coerces one raw value for one declared input. It names the type
tags it accepts and raises ParseError on malformed input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any, ClassVar

ParseFn = Callable[[str | None, Any, Mapping[str, Any]], Any]


def normalize_tag(tag: Enum | str) -> str:
    """Reduce a type tag to its string form (``ValueType.DATE`` -> ``"date"``)."""
    if isinstance(tag, Enum):
        return str(tag.value)
    return str(tag)


class ValueParser(ABC):
    """Base class for coercion rules."""

    accepts: ClassVar[frozenset[str]] = frozenset()

    def accepted_tags(self) -> frozenset[str]:
        return frozenset(normalize_tag(t) for t in self.accepts)

    @abstractmethod
    def parse(self, name: str | None, value: Any, options: Mapping[str, Any]) -> Any:
        """
        Coerce ``value`` for the input called ``name``.

        Raises:
            ParseError: If the value cannot be coerced.
        """

    def __repr__(self) -> str:
        tags = ", ".join(sorted(self.accepted_tags()))
        return f"{type(self).__name__}({tags})"


class FunctionParser(ValueParser):
    """Adapts a plain ``parse_fn(name, value, options)`` into a parser."""

    def __init__(self, tags: Iterable[Enum | str], parse_fn: ParseFn):
        self._tags = frozenset(normalize_tag(t) for t in tags)
        if not self._tags:
            raise ValueError("FunctionParser needs at least one type tag")
        self._parse_fn = parse_fn

    def accepted_tags(self) -> frozenset[str]:
        return self._tags

    def parse(self, name: str | None, value: Any, options: Mapping[str, Any]) -> Any:
        return self._parse_fn(name, value, options)
