"""SQLAlchemy implementations of the two-factor storage ports."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..exceptions import StorageFailureError
from ..login import require_real_login, resolve_real_login
from ..ports import IRecoveryCodeGenerator, IRecoveryCodeStore, ITwoFactorSecretStore
from ..recovery_codes import (
    DEFAULT_RECOVERY_CODE_COUNT,
    RandomRecoveryCodeGenerator,
    generate_recovery_code_batch,
    normalize_recovery_code,
)
from .models import RecoveryCodeModel, TwoFactorBase, TwoFactorSecretModel

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

    from ..config import TwoFactorConfig
    from ..login import Login

    AsyncSessionFactory = Callable[[], Any]

logger = logging.getLogger("cqrs_ddd.twofactor.persistence")


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy errors as StorageFailureError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Two-factor storage failed to %s: %s", operation, e)
        raise StorageFailureError(f"Failed to {operation}: {e}") from e


async def create_tables(engine: AsyncEngine) -> None:
    """Create the two-factor tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(TwoFactorBase.metadata.create_all)


class SQLAlchemyTwoFactorSecretStore(ITwoFactorSecretStore):
    """
    SQLAlchemy implementation of ITwoFactorSecretStore.

    Each call opens its own session from ``session_factory`` and commits
    before returning.
    """

    def __init__(self, session_factory: AsyncSessionFactory) -> None:
        self._session_factory = session_factory

    async def store_secret(self, login: Login, secret: str) -> None:
        with _storage_errors("store two-factor secret"):
            async with self._session_factory() as session, session.begin():
                await session.merge(
                    TwoFactorSecretModel(login=login.value, secret=secret)
                )

    async def get_secret(self, login: Login) -> str | None:
        with _storage_errors("load two-factor secret"):
            async with self._session_factory() as session:
                model = await session.get(TwoFactorSecretModel, login.value)
                return model.secret if model is not None else None

    async def delete_secret(self, login: Login) -> None:
        with _storage_errors("delete two-factor secret"):
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(TwoFactorSecretModel)
                    .where(TwoFactorSecretModel.login == login.value)
                    .execution_options(synchronize_session=False)
                )


class SQLAlchemyRecoveryCodeStore(IRecoveryCodeStore):
    """
    SQLAlchemy implementation of IRecoveryCodeStore.

    Codes are stored normalized, one row per code. Consumption is a single
    conditional ``DELETE`` and the caller wins only if exactly one row was
    removed, so concurrent attempts with the same code have one winner.
    """

    def __init__(
        self,
        session_factory: AsyncSessionFactory,
        *,
        generator: IRecoveryCodeGenerator | None = None,
        count: int = DEFAULT_RECOVERY_CODE_COUNT,
    ) -> None:
        self._session_factory = session_factory
        self.generator = generator or RandomRecoveryCodeGenerator()
        self.count = count

    @classmethod
    def from_config(
        cls,
        session_factory: AsyncSessionFactory,
        config: TwoFactorConfig,
        *,
        generator: IRecoveryCodeGenerator | None = None,
    ) -> SQLAlchemyRecoveryCodeStore:
        return cls(
            session_factory,
            generator=generator
            or RandomRecoveryCodeGenerator(config.recovery_code_length),
            count=config.recovery_code_count,
        )

    async def create_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        resolved = require_real_login(login)
        codes = generate_recovery_code_batch(self.generator, self.count)
        with _storage_errors("create recovery codes"):
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(RecoveryCodeModel)
                    .where(RecoveryCodeModel.login == resolved.value)
                    .execution_options(synchronize_session=False)
                )
                session.add_all(
                    [RecoveryCodeModel(login=resolved.value, code=c) for c in codes]
                )
        logger.info("Created %d recovery codes for %s", len(codes), resolved)
        return codes

    async def insert_recovery_code(self, login: Login | str, code: str) -> None:
        resolved = require_real_login(login)
        normalized = normalize_recovery_code(code)
        if not normalized:
            raise ValueError("Recovery code must not be empty")
        try:
            async with self._session_factory() as session, session.begin():
                session.add(RecoveryCodeModel(login=resolved.value, code=normalized))
        except IntegrityError:
            # already in the set
            logger.debug("Recovery code already present for %s", resolved)
        except SQLAlchemyError as e:
            logger.error("Two-factor storage failed to insert recovery code: %s", e)
            raise StorageFailureError(f"Failed to insert recovery code: {e}") from e

    async def get_all_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        resolved = resolve_real_login(login)
        if resolved is None:
            return []
        with _storage_errors("load recovery codes"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(RecoveryCodeModel.code)
                    .where(RecoveryCodeModel.login == resolved.value)
                    .order_by(RecoveryCodeModel.id)
                )
                return list(result.scalars().all())

    async def consume_recovery_code(self, login: Login | str, code: str) -> bool:
        resolved = resolve_real_login(login)
        if resolved is None or not isinstance(code, str):
            return False
        normalized = normalize_recovery_code(code)
        if not normalized:
            return False
        with _storage_errors("consume recovery code"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    delete(RecoveryCodeModel)
                    .where(
                        RecoveryCodeModel.login == resolved.value,
                        RecoveryCodeModel.code == normalized,
                    )
                    .execution_options(synchronize_session=False)
                )
        return bool(result.rowcount == 1)  # type: ignore[attr-defined]

    async def delete_all_recovery_codes_for_login(self, login: Login | str) -> None:
        resolved = resolve_real_login(login)
        if resolved is None:
            return
        with _storage_errors("delete recovery codes"):
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(RecoveryCodeModel)
                    .where(RecoveryCodeModel.login == resolved.value)
                    .execution_options(synchronize_session=False)
                )

    async def get_remaining_count(self, login: Login | str) -> int:
        resolved = resolve_real_login(login)
        if resolved is None:
            return 0
        with _storage_errors("count recovery codes"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(func.count())
                    .select_from(RecoveryCodeModel)
                    .where(RecoveryCodeModel.login == resolved.value)
                )
                return int(result.scalar_one())


__all__: list[str] = [
    "SQLAlchemyRecoveryCodeStore",
    "SQLAlchemyTwoFactorSecretStore",
    "create_tables",
]
