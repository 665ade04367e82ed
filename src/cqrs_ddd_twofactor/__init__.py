"""cqrs-ddd-twofactor: two-factor authentication for cqrs-ddd applications.

Supports:
- TOTP secrets (Google Authenticator, Microsoft Authenticator, Authy, etc.)
- Single-use recovery codes as the fallback factor
- A "two-factor required for all users" policy flag

SQLAlchemy storage lives in :mod:`cqrs_ddd_twofactor.persistence`.
"""

from .config import TwoFactorConfig
from .exceptions import (
    InvalidSubjectError,
    PreconditionFailedError,
    RecoveryCodesRequiredError,
    StorageFailureError,
    TwoFactorDomainError,
    TwoFactorError,
    TwoFactorInfrastructureError,
)
from .login import ANONYMOUS_LOGIN, Login, require_real_login
from .ports import (
    IPolicySettings,
    IRecoveryCodeGenerator,
    IRecoveryCodeStore,
    ITotpVerifier,
    ITwoFactorSecretStore,
    TwoFactorSetup,
)
from .recovery_codes import (
    InMemoryRecoveryCodeStore,
    RandomRecoveryCodeGenerator,
    normalize_recovery_code,
)
from .service import TwoFactorAuthenticationService
from .settings import PolicySettings
from .totp import InMemoryTwoFactorSecretStore, PyotpTotpVerifier

__all__: list[str] = [
    # Config
    "TwoFactorConfig",
    # Login
    "ANONYMOUS_LOGIN",
    "Login",
    "require_real_login",
    # Ports
    "IPolicySettings",
    "IRecoveryCodeGenerator",
    "IRecoveryCodeStore",
    "ITotpVerifier",
    "ITwoFactorSecretStore",
    "TwoFactorSetup",
    # Implementations
    "InMemoryRecoveryCodeStore",
    "InMemoryTwoFactorSecretStore",
    "PolicySettings",
    "PyotpTotpVerifier",
    "RandomRecoveryCodeGenerator",
    "normalize_recovery_code",
    # Service
    "TwoFactorAuthenticationService",
    # Exceptions
    "TwoFactorError",
    "TwoFactorDomainError",
    "TwoFactorInfrastructureError",
    "InvalidSubjectError",
    "PreconditionFailedError",
    "RecoveryCodesRequiredError",
    "StorageFailureError",
]
