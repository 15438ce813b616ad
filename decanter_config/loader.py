"""
Configuration Loader (``decanter_config.loader``).

Responsibility
--------------
Loads YAML decanter definitions and parses them into kernel schemas
(``DecanterSchema``) and ``DecanterSettings``.

Architecture position
---------------------
**Config layer**. Depends on ``decanter_kernel``; the kernel never imports
from ``decanter_config``.

Definition format
-----------------
::

    settings:
      strict: false
      max_depth: 32
    schemas:
      - name: trip
        inputs:
          - {name: start_date, type: date, parse_format: "%m/%d/%Y"}
          - {name: name}
        has_many:
          - {name: destination}
        contexts:
          admin:
            inputs:
              - {name: approved_at, type: datetime}

Keys of an input or association other than the reserved ones become its
options (``parse_format``, ``required``...). An explicit ``options`` mapping
is merged in as well.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid definition  -> ``ConfigurationError``.
* Unknown type tag  -> ``UnregisteredTypeError`` (at build time).
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from decanter_config.schema import DecanterSettings
from decanter_kernel.domain.schema import ContextScope, DecanterSchema, SchemaBuilder
from decanter_kernel.exceptions import ConfigurationError
from decanter_kernel.parsers.registry import ParserRegistry

_INPUT_KEYS = frozenset({"name", "type", "context", "options"})
_ASSOCIATION_KEYS = frozenset({"name", "key", "schema", "context", "options"})
_SECTIONS = ("inputs", "has_one", "has_many")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return data


def _require_mapping(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where}: expected a mapping, got {type(data).__name__}")
    return data


def _require_list(data: Any, where: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigurationError(f"{where}: expected a list, got {type(data).__name__}")
    return data


def _options(item: dict[str, Any], reserved: frozenset[str], where: str) -> dict[str, Any]:
    options = {k: v for k, v in item.items() if k not in reserved}
    options.update(_require_mapping(item.get("options") or {}, f"{where}.options"))
    return options


def _name(item: dict[str, Any], where: str) -> str:
    name = item.get("name")
    if not name or not isinstance(name, str):
        raise ConfigurationError(f"{where}: 'name' is required")
    return name


def parse_settings(data: dict[str, Any] | None) -> DecanterSettings:
    """Parse ``DecanterSettings`` from the ``settings`` section."""
    data = _require_mapping(data or {}, "settings")
    strict = data.get("strict", False)
    max_depth = data.get("max_depth", DecanterSettings.max_depth)
    if not isinstance(strict, bool):
        raise ConfigurationError(f"settings.strict: expected a boolean, got {strict!r}")
    # bool is an int subclass; `max_depth: true` must not read as 1
    if not isinstance(max_depth, int) or isinstance(max_depth, bool):
        raise ConfigurationError(f"settings.max_depth: expected an integer, got {max_depth!r}")
    try:
        return DecanterSettings(strict=strict, max_depth=max_depth)
    except ValueError as exc:
        raise ConfigurationError(f"settings: {exc}") from exc


def _declare(
    declarer: SchemaBuilder | ContextScope,
    section: dict[str, Any],
    where: str,
) -> None:
    for i, raw in enumerate(_require_list(section.get("inputs"), f"{where}.inputs")):
        item_where = f"{where}.inputs[{i}]"
        item = _require_mapping(raw, item_where)
        declarer.input(
            _name(item, item_where),
            item.get("type"),
            context=item.get("context"),
            **_options(item, _INPUT_KEYS, item_where),
        )

    for kind in ("has_one", "has_many"):
        declare = getattr(declarer, kind)
        for i, raw in enumerate(_require_list(section.get(kind), f"{where}.{kind}")):
            item_where = f"{where}.{kind}[{i}]"
            item = _require_mapping(raw, item_where)
            declare(
                _name(item, item_where),
                key=item.get("key"),
                schema=item.get("schema"),
                context=item.get("context"),
                **_options(item, _ASSOCIATION_KEYS, item_where),
            )


def parse_schema(
    data: dict[str, Any],
    parsers: type[ParserRegistry] = ParserRegistry,
) -> DecanterSchema:
    """
    Parse and build a ``DecanterSchema`` from one ``schemas`` entry.

    Raises:
        ConfigurationError: if the entry is structurally invalid.
        UnregisteredTypeError: if an input names an unknown type tag.
    """
    data = _require_mapping(data, "schema")
    name = _name(data, "schema")
    where = f"schemas.{name}"
    unknown = set(data) - {"name", "contexts", *_SECTIONS}
    if unknown:
        raise ConfigurationError(f"{where}: unknown keys {sorted(unknown)}")

    builder = SchemaBuilder(name)
    _declare(builder, data, where)

    contexts = _require_mapping(data.get("contexts") or {}, f"{where}.contexts")
    for context, section in contexts.items():
        ctx_where = f"{where}.contexts.{context}"
        with builder.with_context(str(context)) as scope:
            _declare(scope, _require_mapping(section or {}, ctx_where), ctx_where)

    return builder.build(parsers)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
