"""Tests for ParserRegistry and the parser contract."""

from datetime import date

import pytest

from decanter_kernel.domain.specs import ValueType
from decanter_kernel.exceptions import ConfigurationError, ParseError, UnregisteredTypeError
from decanter_kernel.parsers import (
    DateParser,
    DateTimeParser,
    FunctionParser,
    ParserRegistry,
    ValueParser,
)


class _Percent(ValueParser):
    accepts = frozenset({"percent", "pct"})

    def parse(self, name, value, options):
        try:
            return float(value) / 100
        except ValueError as exc:
            raise ParseError(name, value, "not a number") from exc


class TestBuiltins:
    def test_builtins_registered(self):
        assert ParserRegistry.registered_types() == ["date", "datetime"]

    def test_resolve_by_enum_or_string(self):
        assert isinstance(ParserRegistry.value_parser_for(ValueType.DATETIME), DateTimeParser)
        assert isinstance(ParserRegistry.value_parser_for("date"), DateParser)


class TestParse:
    @pytest.mark.parametrize("value", [None, "", "raw", 5, {"a": 1}, [1]])
    def test_no_type_returns_value_unchanged(self, value):
        assert ParserRegistry.parse(None, value, {}) is value

    def test_delegates_to_parser(self):
        result = ParserRegistry.parse(ValueType.DATE, "2020-01-02", {"parse_format": "%Y-%m-%d"})
        assert result == date(2020, 1, 2)

    def test_unregistered_type(self):
        with pytest.raises(UnregisteredTypeError) as exc_info:
            ParserRegistry.parse("money", "1.00", {})
        assert exc_info.value.code == "UNREGISTERED_TYPE"


class TestRegistration:
    def test_register_function(self):
        parser = ParserRegistry.register("money", lambda name, val, opts: f"${val}")
        assert isinstance(parser, FunctionParser)
        assert ParserRegistry.value_parser_for("money") is parser
        assert ParserRegistry.parse("money", "5", {}, name="price") == "$5"

    def test_register_parser_with_many_tags(self):
        parser = _Percent()
        ParserRegistry.register_parser(parser)
        assert ParserRegistry.value_parser_for("pct") is parser
        assert ParserRegistry.parse("percent", "50", {}) == 0.5

    def test_parser_error_propagates(self):
        ParserRegistry.register_parser(_Percent())
        with pytest.raises(ParseError) as exc_info:
            ParserRegistry.parse("pct", "half", {}, name="ratio")
        assert exc_info.value.field == "ratio"

    def test_first_registered_wins(self):
        ParserRegistry.register(ValueType.DATE, lambda name, val, opts: "shadow")
        assert isinstance(ParserRegistry.value_parser_for(ValueType.DATE), DateParser)

    def test_function_parser_needs_tag(self):
        with pytest.raises(ValueError):
            FunctionParser([], lambda name, val, opts: val)


class TestFreeze:
    def test_frozen_registry_rejects_registration(self):
        ParserRegistry.freeze()
        assert ParserRegistry.is_frozen()
        with pytest.raises(ConfigurationError):
            ParserRegistry.register("money", lambda name, val, opts: val)

    def test_frozen_registry_still_resolves(self):
        ParserRegistry.freeze()
        assert ParserRegistry.parse("date", "01/02/2020", {}) == date(2020, 1, 2)

    def test_reset_restores_builtins_only(self):
        ParserRegistry.register("money", lambda name, val, opts: val)
        ParserRegistry.freeze()
        ParserRegistry.reset()
        assert not ParserRegistry.is_frozen()
        assert ParserRegistry.registered_types() == ["date", "datetime"]
