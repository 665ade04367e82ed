"""SQLAlchemy models for two-factor secrets and recovery codes."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class TwoFactorBase(DeclarativeBase):
    """Declarative base for the two-factor tables."""


class TwoFactorSecretModel(TwoFactorBase):
    """One TOTP secret per login. A row means 2FA is enabled."""

    __tablename__ = "twofactor_secrets"

    login: Mapped[str] = mapped_column(String(255), primary_key=True)
    secret: Mapped[str] = mapped_column(String(255))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class RecoveryCodeModel(TwoFactorBase):
    """Single-use recovery code. Rows are deleted when consumed."""

    __tablename__ = "twofactor_recovery_codes"

    id: Mapped[int] = mapped_column(
        Integer().with_variant(BigInteger, "postgresql"),
        primary_key=True,
        autoincrement=True,
    )
    login: Mapped[str] = mapped_column(String(255), index=True)
    code: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("login", "code", name="uq_twofactor_recovery_login_code"),
    )


__all__: list[str] = [
    "TwoFactorBase",
    "TwoFactorSecretModel",
    "RecoveryCodeModel",
]
