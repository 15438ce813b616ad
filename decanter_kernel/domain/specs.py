"""
Declaration data structures.

Immutable records for the inputs and associations a schema declares.
This is part of the functional core - no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from decanter_kernel.parsers.base import ValueParser

DEFAULT_CONTEXT = "default"

# Suffix appended to an association name to build its raw input key
ATTRIBUTES_SUFFIX = "_attributes"


class ValueType(str, Enum):
    """Built-in type tags understood by the parser registry."""

    DATE = "date"  # Calendar date, default format %m/%d/%Y
    DATETIME = "datetime"  # Timestamp, default format %m/%d/%Y %I:%M:%S %p


class AssociationKind(str, Enum):
    """Cardinality of a nested association."""

    HAS_ONE = "has_one"
    HAS_MANY = "has_many"


def resolve_context(context: str | None) -> str:
    """Map None to the default bucket. Any string, even "", is its own bucket."""
    return DEFAULT_CONTEXT if context is None else context


def _freeze_options(options: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(options or {}))


@dataclass(frozen=True)
class InputSpec:
    """
    A scalar field declaration.

    ``type`` is a type tag (``ValueType`` member or consumer string) or None
    for an untyped input whose value passes through unchanged. ``parser`` is
    filled in when the owning schema is built.
    """

    name: str
    type: ValueType | str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    context: str = DEFAULT_CONTEXT
    parser: ValueParser | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("InputSpec name is required")
        object.__setattr__(self, "options", _freeze_options(self.options))

    @property
    def required(self) -> bool:
        return bool(self.options.get("required", False))


@dataclass(frozen=True)
class AssociationSpec:
    """
    A nested association declaration.

    ``key`` is the field name expected in the raw input and is what the
    engine matches against. ``schema`` names the nested schema to recurse
    into.
    """

    name: str
    kind: AssociationKind
    key: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)
    context: str = DEFAULT_CONTEXT
    schema: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("AssociationSpec name is required")
        if not self.key:
            object.__setattr__(self, "key", f"{self.name}{ATTRIBUTES_SUFFIX}")
        if not self.schema:
            object.__setattr__(self, "schema", self.name)
        object.__setattr__(self, "options", _freeze_options(self.options))
