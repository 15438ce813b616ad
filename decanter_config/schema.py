"""
Decanter configuration schema.

``DecanterSettings`` is the engine tuning read from YAML; ``DecanterConfig``
is the loaded artifact: settings plus every built schema, ready to hand out
engines.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from decanter_kernel.domain.schema_registry import SchemaRegistry
from decanter_kernel.engine import DEFAULT_MAX_DEPTH, Decanter


@dataclass(frozen=True)
class DecanterSettings:
    """Engine behavior shared by every schema in a configuration."""

    strict: bool = False  # Reject unmatched keys under an explicit context
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")


@dataclass(frozen=True)
class DecanterConfig:
    """Loaded configuration: settings, schemas, and the source checksum."""

    settings: DecanterSettings
    schemas: SchemaRegistry
    checksum: str = ""
    source: str | None = field(default=None, compare=False)

    def decanter_for(self, name: str) -> Decanter:
        """
        Build an engine for the named top-level schema.

        Raises:
            SchemaNotFoundError: If no schema has that name.
        """
        return Decanter(
            self.schemas.get(name),
            self.schemas,
            strict=self.settings.strict,
            max_depth=self.settings.max_depth,
        )
