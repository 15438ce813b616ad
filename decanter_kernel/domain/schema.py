"""
Decanter schemas.

``SchemaBuilder`` collects input and association declarations, partitioned
by context, at definition time. ``build()`` resolves every typed input's
parser and freezes the declarations into a ``DecanterSchema`` that the
engine reads at request time.

Usage:
    builder = SchemaBuilder("trip")
    builder.input("start_date", ValueType.DATE, parse_format="%Y-%m-%d")
    builder.has_many("destination")

    with builder.with_context("admin") as admin:
        admin.input("approved_at", ValueType.DATETIME)

    schema = builder.build()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, TypeVar

from decanter_kernel.domain.specs import (
    AssociationKind,
    AssociationSpec,
    InputSpec,
    ValueType,
    resolve_context,
)
from decanter_kernel.exceptions import ConfigurationError
from decanter_kernel.logging_config import get_logger
from decanter_kernel.parsers.registry import ParserRegistry

logger = get_logger("domain.schema")

T = TypeVar("T")


@dataclass(frozen=True)
class DecanterSchema:
    """
    Immutable declarations for one decanter.

    Inputs are keyed by context then name; associations are keyed by context
    and kept in declaration order.
    """

    name: str
    inputs: Mapping[str, Mapping[str, InputSpec]] = field(default_factory=dict)
    associations: Mapping[str, tuple[AssociationSpec, ...]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("DecanterSchema name is required")
        object.__setattr__(
            self,
            "inputs",
            MappingProxyType(
                {ctx: MappingProxyType(dict(specs)) for ctx, specs in self.inputs.items()}
            ),
        )
        object.__setattr__(
            self,
            "associations",
            MappingProxyType(
                {ctx: tuple(specs) for ctx, specs in self.associations.items()}
            ),
        )

    def input_for(self, name: str, context: str | None = None) -> InputSpec | None:
        """Exact lookup of an input in the context's bucket only."""
        return self.inputs_in(context).get(name)

    def association_for(
        self,
        key: str,
        kind: AssociationKind,
        context: str | None = None,
    ) -> AssociationSpec | None:
        """First association of ``kind`` whose raw key equals ``key``."""
        for spec in self.associations_in(context):
            if spec.kind == kind and spec.key == key:
                return spec
        return None

    def has_one_for(self, key: str, context: str | None = None) -> AssociationSpec | None:
        return self.association_for(key, AssociationKind.HAS_ONE, context)

    def has_many_for(self, key: str, context: str | None = None) -> AssociationSpec | None:
        return self.association_for(key, AssociationKind.HAS_MANY, context)

    def inputs_in(self, context: str | None = None) -> Mapping[str, InputSpec]:
        return self.inputs.get(resolve_context(context), MappingProxyType({}))

    def associations_in(self, context: str | None = None) -> tuple[AssociationSpec, ...]:
        return self.associations.get(resolve_context(context), ())

    def required_inputs(self, context: str | None = None) -> list[InputSpec]:
        return [spec for spec in self.inputs_in(context).values() if spec.required]

    def contexts(self) -> list[str]:
        """All contexts with at least one declaration, sorted."""
        return sorted(set(self.inputs) | set(self.associations))


class ContextScope:
    """
    Declaration view bound to one context.

    Forwards declarations to the builder with ``context`` passed explicitly,
    so nothing about the builder changes while the scope is open.
    """

    def __init__(self, builder: SchemaBuilder, context: str):
        self._builder = builder
        self.context = context

    def _resolve(self, context: str | None) -> str:
        return self.context if context is None else context

    def input(
        self,
        name: str,
        type: ValueType | str | None = None,
        *,
        context: str | None = None,
        **options: Any,
    ) -> InputSpec:
        return self._builder.input(name, type, context=self._resolve(context), **options)

    def has_one(
        self,
        name: str,
        *,
        key: str | None = None,
        schema: str | None = None,
        context: str | None = None,
        **options: Any,
    ) -> AssociationSpec:
        return self._builder.has_one(
            name, key=key, schema=schema, context=self._resolve(context), **options
        )

    def has_many(
        self,
        name: str,
        *,
        key: str | None = None,
        schema: str | None = None,
        context: str | None = None,
        **options: Any,
    ) -> AssociationSpec:
        return self._builder.has_many(
            name, key=key, schema=schema, context=self._resolve(context), **options
        )

    def __enter__(self) -> ContextScope:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class SchemaBuilder:
    """Collects declarations for one schema name."""

    def __init__(self, name: str):
        if not name:
            raise ConfigurationError("Schema name is required")
        self.name = name
        self._inputs: dict[str, dict[str, InputSpec]] = {}
        self._associations: dict[str, dict[str, AssociationSpec]] = {}

    def input(
        self,
        name: str,
        type: ValueType | str | None = None,
        *,
        context: str | None = None,
        **options: Any,
    ) -> InputSpec:
        """
        Declare a scalar input.

        A second declaration with the same (context, name) replaces the first.
        """
        ctx = resolve_context(context)
        spec = InputSpec(name=name, type=type, options=options, context=ctx)
        self._inputs.setdefault(ctx, {})[name] = spec
        return spec

    def has_one(
        self,
        name: str,
        *,
        key: str | None = None,
        schema: str | None = None,
        context: str | None = None,
        **options: Any,
    ) -> AssociationSpec:
        """Declare a singular nested association (raw key ``<name>_attributes``)."""
        return self._associate(AssociationKind.HAS_ONE, name, key, schema, context, options)

    def has_many(
        self,
        name: str,
        *,
        key: str | None = None,
        schema: str | None = None,
        context: str | None = None,
        **options: Any,
    ) -> AssociationSpec:
        """Declare a plural nested association (raw key ``<name>_attributes``)."""
        return self._associate(AssociationKind.HAS_MANY, name, key, schema, context, options)

    def _associate(
        self,
        kind: AssociationKind,
        name: str,
        key: str | None,
        schema: str | None,
        context: str | None,
        options: dict[str, Any],
    ) -> AssociationSpec:
        ctx = resolve_context(context)
        spec = AssociationSpec(
            name=name,
            kind=kind,
            key=key or "",
            options=options,
            context=ctx,
            schema=schema or "",
        )
        self._associations.setdefault(ctx, {})[name] = spec
        return spec

    def with_context(
        self,
        context: str | None,
        body: Callable[[ContextScope], T] | None = None,
    ) -> ContextScope | T:
        """
        Route declarations to ``context``.

        Without ``body`` the scope is returned for use in a ``with`` block.
        With ``body`` it is called immediately with the scope and its result
        is returned.

        Raises:
            ConfigurationError: If ``context`` is missing.
        """
        if not context:
            raise ConfigurationError("no context argument provided to with_context")
        scope = ContextScope(self, context)
        if body is None:
            return scope
        return body(scope)

    def build(self, parsers: type[ParserRegistry] = ParserRegistry) -> DecanterSchema:
        """
        Resolve parsers and freeze the declarations.

        Raises:
            UnregisteredTypeError: If an input's type tag has no parser.
        """
        inputs: dict[str, dict[str, InputSpec]] = {}
        for ctx, specs in self._inputs.items():
            resolved: dict[str, InputSpec] = {}
            for input_name, spec in specs.items():
                parser = parsers.value_parser_for(spec.type) if spec.type is not None else None
                resolved[input_name] = replace(spec, parser=parser)
            inputs[ctx] = resolved

        associations = {
            ctx: tuple(specs.values()) for ctx, specs in self._associations.items()
        }

        schema = DecanterSchema(name=self.name, inputs=inputs, associations=associations)
        logger.debug(
            "schema_built",
            extra={
                "schema_name": self.name,
                "contexts": schema.contexts(),
                "input_count": sum(len(s) for s in inputs.values()),
                "association_count": sum(len(s) for s in associations.values()),
            },
        )
        return schema
