"""Two-factor authentication exceptions.

Mirrors the toolkit layering: domain errors describe a rejected operation,
infrastructure errors describe a failing backend.
"""

from __future__ import annotations

# ═══════════════════════════════════════════════════════════════
# BASE ERRORS
# ═══════════════════════════════════════════════════════════════


class TwoFactorError(Exception):
    """Root exception for the two-factor authentication package."""


class TwoFactorDomainError(TwoFactorError):
    """Base class for rule violations raised by the two-factor service."""


class TwoFactorInfrastructureError(TwoFactorError):
    """Base class for infrastructure failures underneath the two-factor service."""


# ═══════════════════════════════════════════════════════════════
# DOMAIN ERRORS
# ═══════════════════════════════════════════════════════════════


class InvalidSubjectError(TwoFactorDomainError):
    """Raised when an operation targets the anonymous or an empty login.

    The anonymous pseudo-user can never hold a secret or recovery codes.
    """


class PreconditionFailedError(TwoFactorDomainError):
    """Raised when an operation is attempted out of order."""


class RecoveryCodesRequiredError(PreconditionFailedError):
    """Raised when a secret is saved before any recovery codes exist.

    Attributes:
        login: The login that has no recovery codes on record.
    """

    def __init__(self, login: str, message: str | None = None) -> None:
        super().__init__(
            message
            or (
                f"Cannot enable two-factor authentication for {login!r}: "
                "no recovery codes have been created"
            )
        )
        self.login = login


# ═══════════════════════════════════════════════════════════════
# INFRASTRUCTURE ERRORS
# ═══════════════════════════════════════════════════════════════


class StorageFailureError(TwoFactorInfrastructureError):
    """Raised when the secret or recovery code storage is unavailable.

    The original backend exception is kept as ``__cause__``.
    """


__all__: list[str] = [
    "TwoFactorError",
    "TwoFactorDomainError",
    "TwoFactorInfrastructureError",
    "InvalidSubjectError",
    "PreconditionFailedError",
    "RecoveryCodesRequiredError",
    "StorageFailureError",
]
