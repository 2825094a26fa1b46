"""Registry error taxonomy.

Every failure a registry operation can produce is a ``RegistryError``
subclass tagged with an ``ErrorKind``. All of them are recoverable: an
operation that raises has committed nothing.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable error kinds."""

    access_violation = "access_violation"
    not_found = "not_found"
    duplicate_conflict = "duplicate_conflict"
    invalid_encoding = "invalid_encoding"
    boundary_breach = "boundary_breach"
    not_owner = "not_owner"
    identity_verification_failure = "identity_verification_failure"
    unauthorized = "unauthorized"
    structure_violation = "structure_violation"


class RegistryError(Exception):
    """Base class for all registry failures."""

    kind: ErrorKind = ErrorKind.unauthorized

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail or self.kind.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"


class AccessViolation(RegistryError):
    """Caller is not the administrator on a calibration call."""

    kind = ErrorKind.access_violation


class NotFound(RegistryError):
    kind = ErrorKind.not_found


class GrantNotFound(NotFound):
    """No access-grant row exists for the (unit, accessor) pair."""


class DuplicateConflict(RegistryError):
    kind = ErrorKind.duplicate_conflict


class InvalidEncoding(RegistryError):
    """A text field violates its length bound."""

    kind = ErrorKind.invalid_encoding


class BoundaryBreach(RegistryError):
    """A numeric field violates its range bound."""

    kind = ErrorKind.boundary_breach


class NotOwner(RegistryError):
    kind = ErrorKind.not_owner


class IdentityVerificationFailure(RegistryError):
    kind = ErrorKind.identity_verification_failure


class Unauthorized(RegistryError):
    kind = ErrorKind.unauthorized


class StructureViolation(RegistryError):
    """A label collection fails its shape check."""

    kind = ErrorKind.structure_violation
