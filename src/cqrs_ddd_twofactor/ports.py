"""Two-factor ports (protocols).

Defines interfaces for secret storage, recovery code storage, policy
settings and TOTP verification.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .login import Login


@dataclass(frozen=True)
class TwoFactorSetup:
    """Data returned when a login starts two-factor enrolment.

    Attributes:
        login: The login being enrolled.
        secret: Base32-encoded candidate TOTP secret (not yet saved).
        qr_uri: otpauth:// URI for QR code generation.
        manual_key: Human-readable key for manual entry.
        recovery_codes: Freshly created recovery codes (shown once).
    """

    login: str
    secret: str
    qr_uri: str
    manual_key: str
    recovery_codes: tuple[str, ...]


@runtime_checkable
class IRecoveryCodeGenerator(Protocol):
    """Produces single recovery codes in their stored (formatted) form."""

    def generate(self) -> str:
        """Return one new recovery code."""
        ...


@runtime_checkable
class IRecoveryCodeStore(Protocol):
    """Protocol for recovery code storage.

    Recovery codes let a login authenticate when the TOTP device is
    unavailable. Each code works exactly once.
    """

    async def create_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        """Replace the login's recovery codes with a fresh batch.

        Args:
            login: Login identity.

        Returns:
            The new codes, in storage order.

        Raises:
            InvalidSubjectError: If the login is empty or anonymous.
        """
        ...

    async def insert_recovery_code(self, login: Login | str, code: str) -> None:
        """Add a single recovery code to the login's set.

        Raises:
            InvalidSubjectError: If the login is empty or anonymous.
        """
        ...

    async def get_all_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        """Get the currently valid codes, or an empty list."""
        ...

    async def consume_recovery_code(self, login: Login | str, code: str) -> bool:
        """Atomically check and delete a recovery code.

        Args:
            login: Login identity.
            code: Submitted recovery code.

        Returns:
            True if the code belonged to the login and has been removed.
            At most one concurrent caller gets True for a given code.
        """
        ...

    async def delete_all_recovery_codes_for_login(self, login: Login | str) -> None:
        """Remove every recovery code of the login. Idempotent."""
        ...

    async def get_remaining_count(self, login: Login | str) -> int:
        """Get the number of unused recovery codes."""
        ...


@runtime_checkable
class ITwoFactorSecretStore(Protocol):
    """Protocol for TOTP secret storage (one secret per login)."""

    async def store_secret(self, login: Login, secret: str) -> None:
        """Store or replace the login's secret."""
        ...

    async def get_secret(self, login: Login) -> str | None:
        """Get the login's secret, or None if not set."""
        ...

    async def delete_secret(self, login: Login) -> None:
        """Delete the login's secret. Idempotent."""
        ...


@runtime_checkable
class IPolicySettings(Protocol):
    """Protocol for the "two-factor required for all users" policy."""

    async def is_two_factor_auth_required(self) -> bool:
        """Return the current value of the policy flag."""
        ...


@runtime_checkable
class ITotpVerifier(Protocol):
    """Protocol for the TOTP algorithm (RFC 6238)."""

    def generate_secret(self) -> str:
        """Generate a new random base32 secret."""
        ...

    def current_code(self, secret: str) -> str:
        """Get the code for the current time step."""
        ...

    def verify(self, secret: str, code: str) -> bool:
        """Check a code against a secret at the current time.

        Note:
            Must return False instead of raising for malformed input.
        """
        ...

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        """Build the otpauth:// URI for authenticator apps."""
        ...


__all__: list[str] = [
    "TwoFactorSetup",
    "IRecoveryCodeGenerator",
    "IRecoveryCodeStore",
    "ITwoFactorSecretStore",
    "IPolicySettings",
    "ITotpVerifier",
]
