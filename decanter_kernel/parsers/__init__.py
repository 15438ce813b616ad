"""
Parser registry and built-in parsers.

Importing this package registers the built-in date/time parsers.
"""

from decanter_kernel.parsers.base import FunctionParser, ValueParser, normalize_tag
from decanter_kernel.parsers.datetime_parser import DateParser, DateTimeParser
from decanter_kernel.parsers.registry import ParserRegistry

# Built-ins self-register on import
ParserRegistry.register_parser(DateTimeParser(), default=True)
ParserRegistry.register_parser(DateParser(), default=True)

__all__ = [
    "DateParser",
    "DateTimeParser",
    "FunctionParser",
    "ParserRegistry",
    "ValueParser",
    "normalize_tag",
]
