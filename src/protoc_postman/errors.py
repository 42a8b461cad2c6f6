from __future__ import annotations


class ConversionError(Exception):
    """Base class for errors that abort a descriptor-to-endpoint conversion."""


class NotFoundError(ConversionError):
    """Raised when something referenced by the schema cannot be found."""


class ResolutionError(NotFoundError):
    """Raised when a message or enum type name is not declared in any schema file."""


class SelectorError(NotFoundError):
    """Raised when an HTTP rule body selector does not name a message field of the input type."""


class UnsupportedFieldTypeError(ConversionError):
    """Raised when a field's wire type has no JSON placeholder."""


class SchemaLoadError(Exception):
    """Raised when a descriptor set cannot be produced from the given inputs."""
