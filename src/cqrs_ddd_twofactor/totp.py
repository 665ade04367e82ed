"""TOTP (Time-based One-Time Password) verification.

Works with any RFC 6238 authenticator app (Google Authenticator,
Microsoft Authenticator, Authy, 1Password, FreeOTP).

Uses pyotp library internally.
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

import pyotp

from .ports import ITotpVerifier, ITwoFactorSecretStore

if TYPE_CHECKING:
    from .config import TwoFactorConfig
    from .login import Login


class PyotpTotpVerifier(ITotpVerifier):
    """TOTP verifier backed by pyotp.

    Example:
        ```python
        verifier = PyotpTotpVerifier(issuer="MyApp")
        secret = verifier.generate_secret()

        uri = verifier.provisioning_uri(secret, "john.doe")
        if verifier.verify(secret, "123456"):
            print("Valid!")
        ```
    """

    def __init__(
        self,
        *,
        issuer: str = "cqrs-ddd",
        digits: int = 6,
        interval: int = 30,
        valid_window: int = 1,
    ) -> None:
        """Initialize the verifier.

        Args:
            issuer: Application name shown in authenticator app.
            digits: Number of digits in code (default 6).
            interval: Time interval in seconds (default 30).
            valid_window: Accept codes ±N intervals for clock drift (default 1).
        """
        self.issuer = issuer
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window

    @classmethod
    def from_config(cls, config: TwoFactorConfig) -> PyotpTotpVerifier:
        return cls(
            issuer=config.issuer,
            digits=config.digits,
            interval=config.interval,
            valid_window=config.valid_window,
        )

    def _totp(self, secret: str) -> pyotp.TOTP:
        totp = pyotp.TOTP(secret, digits=self.digits, interval=self.interval)
        try:
            totp.byte_secret()
        except ValueError:
            # not base32: the raw UTF-8 bytes are the key
            encoded = base64.b32encode(secret.encode("utf-8")).decode("ascii")
            totp = pyotp.TOTP(encoded, digits=self.digits, interval=self.interval)
        return totp

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def current_code(self, secret: str) -> str:
        return self._totp(secret).now()

    def verify(self, secret: str, code: str) -> bool:
        """Verify a code against a secret.

        Accepts codes within ±valid_window intervals. Returns False for an
        empty code or an empty secret. A secret that is not base32 is used
        as raw key bytes.
        """
        if not secret or not code:
            return False
        return bool(self._totp(secret).verify(code, valid_window=self.valid_window))

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        return self._totp(secret).provisioning_uri(
            name=account_name,
            issuer_name=self.issuer,
        )

    @staticmethod
    def format_secret(secret: str) -> str:
        """Format secret for manual entry as groups of 4 characters."""
        secret = secret.rstrip("=")
        return " ".join(secret[i : i + 4] for i in range(0, len(secret), 4))


class InMemoryTwoFactorSecretStore(ITwoFactorSecretStore):
    """In-memory secret store for TESTING ONLY.

    Secrets are kept in plain text in memory and lost on restart.
    """

    def __init__(self) -> None:
        self._secrets: dict[str, str] = {}

    async def store_secret(self, login: Login, secret: str) -> None:
        self._secrets[login.value] = secret

    async def get_secret(self, login: Login) -> str | None:
        return self._secrets.get(login.value)

    async def delete_secret(self, login: Login) -> None:
        self._secrets.pop(login.value, None)


__all__: list[str] = [
    "PyotpTotpVerifier",
    "InMemoryTwoFactorSecretStore",
]
