"""ParserRegistry -- type tag to ValueParser dispatch registry."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar

from decanter_kernel.exceptions import ConfigurationError, UnregisteredTypeError
from decanter_kernel.logging_config import get_logger
from decanter_kernel.parsers.base import (
    FunctionParser,
    ParseFn,
    ValueParser,
    normalize_tag,
)

logger = get_logger("parsers.registry")


class ParserRegistry:
    """
    Process-wide registry of coercion rules.

    Parsers are consulted in registration order; the first one accepting a
    tag wins. Registration happens at load time. Once frozen (the engine
    freezes it on construction) the table is read-only.

    Usage:
        # Register a plain function for a custom tag
        ParserRegistry.register("money", lambda name, val, opts: Decimal(val))

        # Resolve and parse
        parser = ParserRegistry.value_parser_for("money")
        value = ParserRegistry.parse("money", "1.50", {})
    """

    # Class-level registry, ordered by registration
    _parsers: ClassVar[list[ValueParser]] = []
    _defaults: ClassVar[list[ValueParser]] = []
    _frozen: ClassVar[bool] = False

    @classmethod
    def register(cls, type_tag: Enum | str, parse_fn: ParseFn) -> ValueParser:
        """Register ``parse_fn(name, value, options)`` for ``type_tag``."""
        parser = FunctionParser([type_tag], parse_fn)
        cls.register_parser(parser)
        return parser

    @classmethod
    def register_parser(cls, parser: ValueParser, *, default: bool = False) -> None:
        """
        Register a parser instance.

        Args:
            parser: The parser to add.
            default: Mark as built-in so ``reset()`` restores it.

        Raises:
            ConfigurationError: If the registry has been frozen.
        """
        if cls._frozen:
            raise ConfigurationError(
                f"Parser registry is frozen; cannot register {parser!r}"
            )
        cls._parsers.append(parser)
        if default:
            cls._defaults.append(parser)
        logger.debug(
            "parser_registered",
            extra={
                "parser": type(parser).__name__,
                "types": sorted(parser.accepted_tags()),
            },
        )

    @classmethod
    def value_parser_for(cls, type_tag: Enum | str) -> ValueParser:
        """
        Get the first registered parser accepting ``type_tag``.

        Raises:
            UnregisteredTypeError: If no parser accepts the tag.
        """
        tag = normalize_tag(type_tag)
        for parser in cls._parsers:
            if tag in parser.accepted_tags():
                return parser
        logger.warning("parser_not_found", extra={"type_tag": tag})
        raise UnregisteredTypeError(type_tag)

    @classmethod
    def parse(
        cls,
        type_tag: Enum | str | None,
        value: Any,
        options: Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> Any:
        """Coerce ``value``; an absent type tag returns it unchanged."""
        if type_tag is None:
            return value
        return cls.value_parser_for(type_tag).parse(name, value, options or {})

    @classmethod
    def registered_types(cls) -> list[str]:
        """All accepted tags, sorted."""
        tags: set[str] = set()
        for parser in cls._parsers:
            tags |= parser.accepted_tags()
        return sorted(tags)

    @classmethod
    def freeze(cls) -> None:
        """Make the registry read-only."""
        if not cls._frozen:
            cls._frozen = True
            logger.debug(
                "parser_registry_frozen",
                extra={"parser_count": len(cls._parsers)},
            )

    @classmethod
    def is_frozen(cls) -> bool:
        return cls._frozen

    @classmethod
    def reset(cls) -> None:
        """
        Restore the built-in parsers and unfreeze.

        WARNING: This should only be used in tests.
        """
        cls._frozen = False
        cls._parsers = list(cls._defaults)
