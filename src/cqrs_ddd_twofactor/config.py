"""Two-factor authentication configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TwoFactorConfig:
    """Two-factor configuration.

    Attributes:
        issuer: Application name shown in authenticator apps.
        digits: Number of digits in a TOTP code.
        interval: TOTP time step in seconds.
        valid_window: Accept codes ±N time steps for clock drift.
        recovery_code_count: Number of recovery codes in a fresh batch.
        recovery_code_length: Characters per recovery code, dashes excluded.
        two_factor_auth_required: Initial value of the policy flag.
    """

    issuer: str = "cqrs-ddd"
    digits: int = 6
    interval: int = 30
    valid_window: int = 1
    recovery_code_count: int = 10
    recovery_code_length: int = 8
    two_factor_auth_required: bool = False

    def __post_init__(self) -> None:
        if self.digits <= 0:
            raise ValueError("digits must be positive")
        if self.interval <= 0:
            raise ValueError("interval must be positive")
        if self.valid_window < 0:
            raise ValueError("valid_window must not be negative")
        if self.recovery_code_count <= 0:
            raise ValueError("recovery_code_count must be positive")
        if self.recovery_code_length <= 0:
            raise ValueError("recovery_code_length must be positive")


__all__: list[str] = ["TwoFactorConfig"]
