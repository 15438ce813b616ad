"""
Typed Exception Hierarchy for the Decanter Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of ``decant`` turn failures into user-facing responses (form errors,
HTTP 400 bodies). Matching on message text is fragile, so every failure is:
  1. a TYPED exception class (catch by type, not message)
  2. tagged with a CODE class attribute (machine-readable, API-safe)
  3. carrying structured DATA (field names, offending values)

Example:
    try:
        params = decanter.decant(raw, context="admin")
    except ParseError as e:
        return {"error": e.code, "field": e.field, "reason": e.reason}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DecanterError (base)
    |
    +-- ConfigurationError
    |   +-- UnregisteredTypeError
    |   +-- SchemaNotFoundError
    |   +-- SchemaAlreadyRegisteredError
    |
    +-- DecantError
        +-- ParseError
        +-- MissingRequiredInputError
        +-- UnhandledKeysError
        +-- InvalidAssociationValueError
        +-- DecantDepthExceededError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Bad declaration, scope without context,
                |                             | registration after freeze
                | UNREGISTERED_TYPE           | Type tag has no registered parser
                | SCHEMA_NOT_FOUND            | Association names an unknown schema
                | SCHEMA_ALREADY_REGISTERED   | Two schemas share a name
----------------|-----------------------------|-----------------------------------------
Decant          | PARSE_ERROR                 | A parser rejected a raw value
                | MISSING_REQUIRED_INPUT      | Required input absent from raw mapping
                | UNHANDLED_KEYS              | Strict mode, raw keys matched nothing
                | INVALID_ASSOCIATION_VALUE   | Nested value is not a mapping / list
                | DECANT_DEPTH_EXCEEDED       | Input nested deeper than max_depth

Nothing in the kernel catches these locally. A single failing field aborts
the whole ``decant`` call.
"""


class DecanterError(Exception):
    """
    Base exception for all decanter errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "DECANTER_ERROR"


# Configuration-time exceptions


class ConfigurationError(DecanterError):
    """Schema or registry configuration is invalid."""

    code: str = "CONFIGURATION_ERROR"


class UnregisteredTypeError(ConfigurationError):
    """No parser accepts the given type tag."""

    code: str = "UNREGISTERED_TYPE"

    def __init__(self, type_tag: object):
        self.type_tag = type_tag
        super().__init__(f"No parser registered for type: {type_tag!r}")


class SchemaNotFoundError(ConfigurationError):
    """No schema registered under the given name."""

    code: str = "SCHEMA_NOT_FOUND"

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        super().__init__(f"No schema registered with name: {schema_name}")


class SchemaAlreadyRegisteredError(ConfigurationError):
    """A schema with the same name is already registered."""

    code: str = "SCHEMA_ALREADY_REGISTERED"

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        super().__init__(f"Schema already registered: {schema_name}")


# Request-time exceptions


class DecantError(DecanterError):
    """Base exception for failures while decanting a raw mapping."""

    code: str = "DECANT_ERROR"


class ParseError(DecantError):
    """A parser rejected a raw value."""

    code: str = "PARSE_ERROR"

    def __init__(self, field: str | None, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        label = field if field is not None else "<value>"
        super().__init__(f"Cannot parse {label}={value!r}: {reason}")


class MissingRequiredInputError(DecantError):
    """One or more required inputs are absent from the raw mapping."""

    code: str = "MISSING_REQUIRED_INPUT"

    def __init__(self, names: list[str], context: str | None = None):
        self.names = names
        self.context = context
        super().__init__(f"Missing required inputs: {', '.join(names)}")


class UnhandledKeysError(DecantError):
    """Strict mode found raw keys that match no declaration."""

    code: str = "UNHANDLED_KEYS"

    def __init__(self, keys: list[str], context: str | None = None):
        self.keys = keys
        self.context = context
        super().__init__(
            f"Unhandled keys for context {context!r}: {', '.join(map(str, keys))}"
        )


class InvalidAssociationValueError(DecantError):
    """A nested value does not have the shape its association requires."""

    code: str = "INVALID_ASSOCIATION_VALUE"

    def __init__(self, key: str | None, expected: str, actual: object):
        self.key = key
        self.expected = expected
        self.actual_type = type(actual).__name__
        label = key if key is not None else "<root>"
        super().__init__(
            f"{label}: expected {expected}, got {self.actual_type}"
        )


class DecantDepthExceededError(DecantError):
    """Input is nested deeper than the engine allows."""

    code: str = "DECANT_DEPTH_EXCEEDED"

    def __init__(self, max_depth: int, key: str | None = None):
        self.max_depth = max_depth
        self.key = key
        super().__init__(
            f"Nesting exceeds max depth {max_depth}"
            + (f" at {key}" if key is not None else "")
        )
