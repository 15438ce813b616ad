"""
Decanter Kernel

Coerces raw, user-submitted key/value mappings into typed mappings:
- Declarative inputs and nested associations, partitioned by context
- Pluggable parsers keyed by type tag
- Recursive decanting of has_one / has_many substructures
"""

from decanter_kernel.domain.schema import ContextScope, DecanterSchema, SchemaBuilder
from decanter_kernel.domain.schema_registry import SchemaRegistry
from decanter_kernel.domain.specs import (
    DEFAULT_CONTEXT,
    AssociationKind,
    AssociationSpec,
    InputSpec,
    ValueType,
)
from decanter_kernel.engine import Decanter
from decanter_kernel.parsers import ParserRegistry, ValueParser

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONTEXT",
    "AssociationKind",
    "AssociationSpec",
    "ContextScope",
    "Decanter",
    "DecanterSchema",
    "InputSpec",
    "ParserRegistry",
    "SchemaBuilder",
    "SchemaRegistry",
    "ValueParser",
    "ValueType",
]
