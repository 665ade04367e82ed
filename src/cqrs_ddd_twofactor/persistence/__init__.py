"""SQLAlchemy persistence for cqrs-ddd-twofactor.

Requires the ``sqlalchemy`` extra: ``pip install cqrs-ddd-twofactor[sqlalchemy]``.
"""

from .models import RecoveryCodeModel, TwoFactorBase, TwoFactorSecretModel
from .stores import (
    SQLAlchemyRecoveryCodeStore,
    SQLAlchemyTwoFactorSecretStore,
    create_tables,
)

__all__: list[str] = [
    "TwoFactorBase",
    "TwoFactorSecretModel",
    "RecoveryCodeModel",
    "SQLAlchemyRecoveryCodeStore",
    "SQLAlchemyTwoFactorSecretStore",
    "create_tables",
]
