"""Errors raised while deriving schemas from JSON documents."""

from dataclasses import dataclass
from typing import Optional


class DeriveSchemaError(Exception):
    """
    Base class for schema derivation failures.

    Attributes:
        message: Human-readable error description
        path: Optional dotted path of the field where the error occurred
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} at {self.path}"
        return self.message


class InvalidNameError(DeriveSchemaError):
    """A field or record name is empty."""


class RangeError(DeriveSchemaError):
    """An integer literal does not fit into a 64-bit long (strict mode)."""


class TypeConflictError(DeriveSchemaError):
    """Two types cannot be unified and no union can represent both."""


class InvalidStructureError(DeriveSchemaError):
    """Record shapes share a field name whose types cannot be unified."""

    def __init__(self, message: str, field_name: str, path: Optional[str] = None) -> None:
        self.field_name = field_name
        super().__init__(message, path)


class NestingDepthError(DeriveSchemaError):
    """The document nests deeper than the derivation depth limit."""


class NoSchemaDerivedError(DeriveSchemaError):
    """No document of a batch produced a schema."""


@dataclass(frozen=True)
class Conflict:
    """
    Failed outcome of a derivation step.

    Engine functions return a Conflict instead of raising so that callers can
    decide whether a failure skips a document or aborts the call.
    """
    error: DeriveSchemaError

    def at(self, path: str) -> 'Conflict':
        """Records where the failure happened unless a deeper step already did."""
        if not self.error.path:
            self.error.path = path
        return self

    def raise_error(self):
        raise self.error
