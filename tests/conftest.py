"""Test configuration and fixtures."""

from __future__ import annotations

import pyotp
import pytest

from cqrs_ddd_twofactor import (
    InMemoryRecoveryCodeStore,
    InMemoryTwoFactorSecretStore,
    PolicySettings,
    PyotpTotpVerifier,
    TwoFactorAuthenticationService,
)


class StaticRecoveryCodeGenerator:
    """Deterministic generator producing CODE-0001, CODE-0002, ..."""

    def __init__(self) -> None:
        self.counter = 0

    def generate(self) -> str:
        self.counter += 1
        return f"CODE{self.counter:04d}"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that talk to a real database engine",
    )


@pytest.fixture
def settings() -> PolicySettings:
    return PolicySettings()


@pytest.fixture
def recovery_codes() -> InMemoryRecoveryCodeStore:
    return InMemoryRecoveryCodeStore()


@pytest.fixture
def secret_store() -> InMemoryTwoFactorSecretStore:
    return InMemoryTwoFactorSecretStore()


@pytest.fixture
def verifier() -> PyotpTotpVerifier:
    return PyotpTotpVerifier()


@pytest.fixture
def two_fa(
    settings: PolicySettings,
    recovery_codes: InMemoryRecoveryCodeStore,
    secret_store: InMemoryTwoFactorSecretStore,
    verifier: PyotpTotpVerifier,
) -> TwoFactorAuthenticationService:
    return TwoFactorAuthenticationService(
        settings=settings,
        recovery_codes=recovery_codes,
        secrets=secret_store,
        verifier=verifier,
    )


@pytest.fixture
def secret1() -> str:
    return pyotp.random_base32()


@pytest.fixture
def secret2() -> str:
    return pyotp.random_base32()


@pytest.fixture
def static_generator() -> StaticRecoveryCodeGenerator:
    return StaticRecoveryCodeGenerator()
