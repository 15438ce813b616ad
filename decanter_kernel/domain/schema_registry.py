"""
Decanter schema registry.

Maps schema names to built ``DecanterSchema`` values so associations can be
resolved by name. Instances are populated at startup and handed to the
engine explicitly; there is no global registry.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from decanter_kernel.domain.schema import DecanterSchema
from decanter_kernel.exceptions import SchemaAlreadyRegisteredError, SchemaNotFoundError
from decanter_kernel.logging_config import get_logger

logger = get_logger("domain.schema_registry")


class SchemaRegistry:
    """
    Name -> schema lookup for nested associations.

    Usage:
        schemas = SchemaRegistry([trip_schema, destination_schema])
        schemas.get("destination")
    """

    def __init__(self, schemas: Iterable[DecanterSchema] = ()):
        self._schemas: dict[str, DecanterSchema] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, schema: DecanterSchema) -> None:
        """
        Register a schema under its name.

        Raises:
            SchemaAlreadyRegisteredError: If the name is taken.
        """
        if schema.name in self._schemas:
            logger.warning(
                "schema_already_registered",
                extra={"schema_name": schema.name},
            )
            raise SchemaAlreadyRegisteredError(schema.name)

        self._schemas[schema.name] = schema
        logger.info(
            "schema_registered",
            extra={
                "schema_name": schema.name,
                "contexts": schema.contexts(),
            },
        )

    def get(self, name: str) -> DecanterSchema:
        """
        Get a schema by name.

        Raises:
            SchemaNotFoundError: If no schema has that name.
        """
        try:
            return self._schemas[name]
        except KeyError:
            logger.warning(
                "schema_not_found",
                extra={
                    "schema_name": name,
                    "available": sorted(self._schemas),
                },
            )
            raise SchemaNotFoundError(name) from None

    def has_schema(self, name: str) -> bool:
        return name in self._schemas

    def names(self) -> list[str]:
        """Registered schema names (sorted)."""
        return sorted(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[DecanterSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)
