"""
decanter_config -- YAML-driven decanter definitions.

Responsibility:
    Turns a YAML definition file into a ``DecanterConfig``: engine settings
    plus a ``SchemaRegistry`` of built schemas. Loading happens once at
    startup; every schema is immutable afterwards.

Architecture position:
    Configuration layer above ``decanter_kernel``. The kernel never imports
    from this package.

Failure modes:
    - ``FileNotFoundError`` -- the definition file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- structural problems (missing names,
      duplicate schemas, bad settings).
    - ``UnregisteredTypeError`` -- an input names an unknown type tag.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from decanter_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_schema,
    parse_settings,
)
from decanter_config.schema import DecanterConfig, DecanterSettings
from decanter_kernel.domain.schema_registry import SchemaRegistry
from decanter_kernel.exceptions import ConfigurationError
from decanter_kernel.logging_config import get_logger

_logger = get_logger("config")


def load_config(data: dict[str, Any], source: str | None = None) -> DecanterConfig:
    """Build a ``DecanterConfig`` from an already-parsed definition dict."""
    settings = parse_settings(data.get("settings"))
    registry = SchemaRegistry()
    schema_defs = data.get("schemas") or []
    if not isinstance(schema_defs, list):
        raise ConfigurationError("schemas: expected a list")
    for schema_def in schema_defs:
        registry.register(parse_schema(schema_def))

    config = DecanterConfig(
        settings=settings,
        schemas=registry,
        checksum=compute_checksum(data),
        source=source,
    )
    _logger.info(
        "DECANTER_CONFIG_LOADED",
        extra={
            "source": source,
            "checksum": config.checksum,
            "schemas": registry.names(),
            "strict": settings.strict,
            "max_depth": settings.max_depth,
        },
    )
    return config


def load_schemas(path: Path | str) -> DecanterConfig:
    """Load a YAML definition file into a ``DecanterConfig``."""
    path = Path(path)
    return load_config(load_yaml_file(path), source=str(path))


__all__ = [
    "DecanterConfig",
    "DecanterSettings",
    "compute_checksum",
    "load_config",
    "load_schemas",
    "load_yaml_file",
    "parse_schema",
    "parse_settings",
]
