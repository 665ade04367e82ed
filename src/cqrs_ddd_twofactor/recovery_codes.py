"""Recovery codes for two-factor authentication.

Generates single-use recovery codes that a login can use when it loses
access to its authenticator device, and keeps them in memory for tests
and single-process deployments.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
from typing import TYPE_CHECKING

from .login import require_real_login, resolve_real_login
from .ports import IRecoveryCodeGenerator, IRecoveryCodeStore

if TYPE_CHECKING:
    from .config import TwoFactorConfig
    from .login import Login

logger = logging.getLogger("cqrs_ddd.twofactor")

DEFAULT_RECOVERY_CODE_COUNT = 10

_SEPARATORS = re.compile(r"[\s\-]+")


def format_recovery_code(raw: str) -> str:
    """Format code with dashes for readability (e.g. "ABCD-EFGH")."""
    return "-".join(raw[i : i + 4] for i in range(0, len(raw), 4))


def normalize_recovery_code(code: str) -> str:
    """Normalize recovery code input.

    Comparison ignores case, whitespace and dashes, so " abcd efgh ",
    "ABCDEFGH" and "abcd-efgh" all normalize to "ABCD-EFGH".
    """
    return format_recovery_code(_SEPARATORS.sub("", code).upper())


class RandomRecoveryCodeGenerator(IRecoveryCodeGenerator):
    """Cryptographically random recovery code generator."""

    # Characters used in recovery codes (exclude ambiguous: 0, O, 1, I)
    ALPHABET = string.ascii_uppercase.replace("O", "").replace(
        "I", ""
    ) + string.digits.replace("0", "").replace("1", "")

    def __init__(self, code_length: int = 8) -> None:
        if code_length <= 0:
            raise ValueError("code_length must be positive")
        self.code_length = code_length

    def generate(self) -> str:
        raw = "".join(secrets.choice(self.ALPHABET) for _ in range(self.code_length))
        return format_recovery_code(raw)


def generate_recovery_code_batch(
    generator: IRecoveryCodeGenerator,
    count: int,
) -> list[str]:
    """Draw ``count`` distinct normalized codes from a generator.

    Raises:
        ValueError: If the generator keeps repeating itself.
    """
    codes: list[str] = []
    seen: set[str] = set()
    attempts = 0
    while len(codes) < count:
        attempts += 1
        if attempts > count * 10:
            raise ValueError(
                f"Recovery code generator produced only {len(codes)} "
                f"distinct codes out of {count} requested"
            )
        code = normalize_recovery_code(generator.generate())
        if not code or code in seen:
            continue
        seen.add(code)
        codes.append(code)
    return codes


class InMemoryRecoveryCodeStore(IRecoveryCodeStore):
    """In-memory recovery code store for testing and single-process use.

    Stores codes in plaintext per login, in insertion order. Consumption
    has no await between the membership check and the removal, so it is
    atomic on the event loop.
    """

    def __init__(
        self,
        *,
        generator: IRecoveryCodeGenerator | None = None,
        count: int = DEFAULT_RECOVERY_CODE_COUNT,
    ) -> None:
        self.generator = generator or RandomRecoveryCodeGenerator()
        self.count = count
        self._codes: dict[str, list[str]] = {}

    @classmethod
    def from_config(
        cls,
        config: TwoFactorConfig,
        *,
        generator: IRecoveryCodeGenerator | None = None,
    ) -> InMemoryRecoveryCodeStore:
        return cls(
            generator=generator
            or RandomRecoveryCodeGenerator(config.recovery_code_length),
            count=config.recovery_code_count,
        )

    async def create_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        resolved = require_real_login(login)
        codes = generate_recovery_code_batch(self.generator, self.count)
        self._codes[resolved.value] = list(codes)
        logger.info("Created %d recovery codes for %s", len(codes), resolved)
        return codes

    async def insert_recovery_code(self, login: Login | str, code: str) -> None:
        resolved = require_real_login(login)
        normalized = normalize_recovery_code(code)
        if not normalized:
            raise ValueError("Recovery code must not be empty")
        codes = self._codes.setdefault(resolved.value, [])
        if normalized not in codes:
            codes.append(normalized)

    async def get_all_recovery_codes_for_login(self, login: Login | str) -> list[str]:
        resolved = resolve_real_login(login)
        if resolved is None:
            return []
        return list(self._codes.get(resolved.value, []))

    async def consume_recovery_code(self, login: Login | str, code: str) -> bool:
        resolved = resolve_real_login(login)
        if resolved is None or not isinstance(code, str):
            return False
        normalized = normalize_recovery_code(code)
        codes = self._codes.get(resolved.value)
        if not normalized or not codes or normalized not in codes:
            return False
        codes.remove(normalized)
        return True

    async def delete_all_recovery_codes_for_login(self, login: Login | str) -> None:
        resolved = resolve_real_login(login)
        if resolved is not None:
            self._codes.pop(resolved.value, None)

    async def get_remaining_count(self, login: Login | str) -> int:
        return len(await self.get_all_recovery_codes_for_login(login))


__all__: list[str] = [
    "DEFAULT_RECOVERY_CODE_COUNT",
    "RandomRecoveryCodeGenerator",
    "InMemoryRecoveryCodeStore",
    "format_recovery_code",
    "generate_recovery_code_batch",
    "normalize_recovery_code",
]
