"""
Pytest fixtures for the decanter test suite.

Provides:
- Isolation of the process-wide parser registry and logging state
- Builders for the schemas used across engine tests
"""

import logging
from io import StringIO

import pytest

from decanter_kernel.domain.schema import SchemaBuilder
from decanter_kernel.domain.schema_registry import SchemaRegistry
from decanter_kernel.domain.specs import ValueType
from decanter_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from decanter_kernel.parsers import ParserRegistry


@pytest.fixture(autouse=True)
def _isolate_registries():
    """Restore built-in parsers, unfreeze, and clear logging between tests."""
    ParserRegistry.reset()
    reset_logging()
    LogContext.clear()
    yield
    ParserRegistry.reset()
    reset_logging()
    LogContext.clear()


@pytest.fixture
def log_stream():
    """Configure JSON logging at DEBUG into a StringIO and return it."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(level=logging.DEBUG, handler=handler)
    return stream


@pytest.fixture
def trip_schemas() -> SchemaRegistry:
    """
    trip -> has_one address, has_many destination.

    The admin context sees a different rule set.
    """
    trip = SchemaBuilder("trip")
    trip.input("name")
    trip.input("start_date", ValueType.DATE)
    trip.has_one("address")
    trip.has_many("destination")
    with trip.with_context("admin") as admin:
        admin.input("approved_at", ValueType.DATETIME)
        admin.has_many("destination")

    destination = SchemaBuilder("destination")
    destination.input("arrives_on", ValueType.DATE, parse_format="%Y-%m-%d")
    with destination.with_context("admin") as admin:
        admin.input("city")

    return SchemaRegistry([
        trip.build(),
        SchemaBuilder("address").build(),
        destination.build(),
    ])
