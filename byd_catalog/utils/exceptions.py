"""Exception hierarchy for the catalog store and its collaborators."""

from __future__ import annotations

from enum import Enum


class ConstraintKind(str, Enum):
    NOT_NULL = "NotNull"
    PRIMARY_KEY_EXISTS = "PrimaryKeyExists"
    UNIQUE_VIOLATION = "UniqueViolation"
    FOREIGN_KEY_MISSING = "ForeignKeyMissing"
    CHECK_FAILED = "CheckFailed"
    BUSINESS_RULE_VIOLATION = "BusinessRuleViolation"


class CatalogError(Exception):
    """Base exception for all catalog errors."""


class ConstraintError(CatalogError):
    """An integrity rule rejected a mutation. The store is left unchanged."""

    kind: ConstraintKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotNullError(ConstraintError):
    kind = ConstraintKind.NOT_NULL


class PrimaryKeyExistsError(ConstraintError):
    kind = ConstraintKind.PRIMARY_KEY_EXISTS


class UniqueViolationError(ConstraintError):
    kind = ConstraintKind.UNIQUE_VIOLATION


class ForeignKeyMissingError(ConstraintError):
    kind = ConstraintKind.FOREIGN_KEY_MISSING


class CheckFailedError(ConstraintError):
    kind = ConstraintKind.CHECK_FAILED


class BusinessRuleViolationError(ConstraintError):
    """Domain rule failed, e.g. a model created without any technology."""

    kind = ConstraintKind.BUSINESS_RULE_VIOLATION


class NotFoundError(CatalogError):
    """A lookup by id found nothing."""


class DataFileError(CatalogError):
    """The catalog data file could not be parsed."""
