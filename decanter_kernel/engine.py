"""
Decant engine: pure transformation from a raw input mapping to a typed mapping.

Each raw key is resolved against the schema for the active context, in this
order:

    1. declared input       -> coerce with the input's parser
    2. has_one association  -> recurse into the nested schema
    3. has_many association -> recurse into each element
    4. no match             -> pass through (no context) or drop (context)

Output preserves the order of the raw mapping. Nothing is caught locally:
the first failure aborts the whole call. ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from decanter_kernel.domain.schema import DecanterSchema
from decanter_kernel.domain.schema_registry import SchemaRegistry
from decanter_kernel.domain.specs import AssociationSpec, InputSpec
from decanter_kernel.exceptions import (
    ConfigurationError,
    DecantDepthExceededError,
    DecanterError,
    InvalidAssociationValueError,
    MissingRequiredInputError,
    UnhandledKeysError,
)
from decanter_kernel.logging_config import LogContext, get_logger
from decanter_kernel.parsers.registry import ParserRegistry

logger = get_logger("engine")

DEFAULT_MAX_DEPTH = 32


@dataclass
class _Tally:
    """Per-call counters and strict-mode leftovers."""

    coerced: int = 0
    nested: int = 0
    passed: int = 0
    dropped: int = 0
    unhandled: list[str] = field(default_factory=list)


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


class Decanter:
    """
    Decants raw mappings for one schema.

    Args:
        schema: The built schema for the top-level mapping.
        schemas: Registry used to resolve association schemas by name.
        strict: Raise UnhandledKeysError instead of dropping unmatched keys
            when a context is given.
        max_depth: Deepest association nesting accepted.
        parsers: Parser registry; frozen on construction.
    """

    def __init__(
        self,
        schema: DecanterSchema,
        schemas: SchemaRegistry | None = None,
        *,
        strict: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        parsers: type[ParserRegistry] = ParserRegistry,
    ):
        if max_depth < 1:
            raise ConfigurationError(f"max_depth must be >= 1, got {max_depth}")
        self.schema = schema
        self.schemas = schemas if schemas is not None else SchemaRegistry()
        self.strict = strict
        self.max_depth = max_depth
        self._parsers = parsers
        parsers.freeze()

    def decanter_for(self, name: str) -> Decanter:
        """A decanter for the named schema sharing this engine's settings."""
        return Decanter(
            self.schemas.get(name),
            self.schemas,
            strict=self.strict,
            max_depth=self.max_depth,
            parsers=self._parsers,
        )

    def decant(self, raw: Mapping[str, Any], context: str | None = None) -> dict[str, Any]:
        """
        Transform ``raw`` into its typed, shaped form.

        Args:
            raw: Plain mapping of user-submitted values.
            context: Declaration bucket to match against. When given,
                unmatched keys are dropped (or rejected in strict mode);
                when omitted they pass through unchanged.

        Raises:
            ParseError: A parser rejected a value.
            MissingRequiredInputError: A required input is absent.
            UnhandledKeysError: Strict mode found unmatched keys.
            InvalidAssociationValueError: A value has the wrong shape.
            DecantDepthExceededError: Nesting exceeds ``max_depth``.
            SchemaNotFoundError: An association names an unknown schema.
        """
        tally = _Tally()
        with LogContext.bind(schema=self.schema.name, decant_context=context):
            try:
                result = self._decant(self.schema, raw, context, 0, "", tally)
                if tally.unhandled:
                    raise UnhandledKeysError(tally.unhandled, context)
            except DecanterError as exc:
                logger.warning(
                    "decant_failed",
                    extra={"error_code": exc.code, "error": str(exc)},
                )
                raise

            logger.debug(
                "decant_completed",
                extra={
                    "coerced": tally.coerced,
                    "nested": tally.nested,
                    "passed": tally.passed,
                    "dropped": tally.dropped,
                },
            )
        return result

    def _decant(
        self,
        schema: DecanterSchema,
        raw: Any,
        context: str | None,
        depth: int,
        path: str,
        tally: _Tally,
    ) -> dict[str, Any]:
        if depth > self.max_depth:
            raise DecantDepthExceededError(self.max_depth, path or None)
        if not isinstance(raw, Mapping):
            raise InvalidAssociationValueError(path or None, "a mapping", raw)

        missing = [
            _join(path, spec.name)
            for spec in schema.required_inputs(context)
            if spec.name not in raw
        ]
        if missing:
            raise MissingRequiredInputError(missing, context)

        result: dict[str, Any] = {}
        for key, value in raw.items():
            spec = schema.input_for(key, context)
            if spec is not None:
                result[key] = self._parse(spec, key, value)
                tally.coerced += 1
                continue

            assoc = schema.has_one_for(key, context)
            if assoc is not None:
                result[assoc.key] = self._decant(
                    self._schema_for(assoc), value, context, depth + 1, _join(path, key), tally
                )
                tally.nested += 1
                continue

            assoc = schema.has_many_for(key, context)
            if assoc is not None:
                result[assoc.key] = self._decant_many(
                    assoc, value, context, depth + 1, _join(path, key), tally
                )
                tally.nested += 1
                continue

            if context is None:
                result[key] = value
                tally.passed += 1
            elif self.strict:
                tally.unhandled.append(_join(path, key))
            else:
                tally.dropped += 1

        return result

    def _decant_many(
        self,
        assoc: AssociationSpec,
        value: Any,
        context: str | None,
        depth: int,
        path: str,
        tally: _Tally,
    ) -> list[dict[str, Any]]:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            raise InvalidAssociationValueError(path, "a list of mappings", value)
        nested = self._schema_for(assoc)
        return [
            self._decant(nested, item, context, depth, f"{path}[{i}]", tally)
            for i, item in enumerate(value)
        ]

    def _schema_for(self, assoc: AssociationSpec) -> DecanterSchema:
        return self.schemas.get(assoc.schema)

    def _parse(self, spec: InputSpec, key: str, value: Any) -> Any:
        if spec.parser is not None:
            return spec.parser.parse(key, value, spec.options)
        # Schemas assembled without build() carry no resolved parser
        return self._parsers.parse(spec.type, value, spec.options, name=key)
