"""Two-factor authentication service.

Decides whether a login must use a second factor, manages the
enable/disable lifecycle of a login's TOTP secret and validates submitted
codes against either the secret or the login's recovery codes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import TwoFactorConfig
from .exceptions import RecoveryCodesRequiredError
from .login import require_real_login, resolve_real_login
from .ports import TwoFactorSetup
from .totp import PyotpTotpVerifier

if TYPE_CHECKING:
    from .login import Login
    from .ports import (
        IPolicySettings,
        IRecoveryCodeStore,
        ITotpVerifier,
        ITwoFactorSecretStore,
    )

logger = logging.getLogger("cqrs_ddd.twofactor")

SubmittedCode = str | int | bool | None


def _clean_code(code: SubmittedCode, digits: int) -> str | None:
    """Turn a submitted code into a string, or None if it is missing.

    None, booleans, 0, "0" and blank strings all count as missing. Integers
    are zero-padded to ``digits`` since numeric input drops leading zeros.
    """
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, int):
        return None if code == 0 else str(code).zfill(digits)
    if not isinstance(code, str):
        return None
    code = code.strip()
    if not code or code == "0":
        return None
    return code


class TwoFactorAuthenticationService:
    """Orchestrates TOTP secrets, recovery codes and the 2FA policy.

    Per login the service moves through NOT_ENABLED → (recovery codes
    created) SETUP_PENDING → (secret saved) ENABLED → (disabled)
    NOT_ENABLED.

    Example:
        ```python
        service = TwoFactorAuthenticationService(
            settings=PolicySettings(),
            recovery_codes=InMemoryRecoveryCodeStore(),
            secrets=InMemoryTwoFactorSecretStore(),
        )

        setup = await service.start_setup("john.doe")
        # show setup.qr_uri and setup.recovery_codes to the user
        if await service.complete_setup("john.doe", setup.secret, code_from_app):
            print("2FA enabled")

        # at login time
        if await service.validate_auth_code("john.doe", submitted):
            print("Second factor accepted")
        ```
    """

    def __init__(
        self,
        *,
        settings: IPolicySettings,
        recovery_codes: IRecoveryCodeStore,
        secrets: ITwoFactorSecretStore,
        verifier: ITotpVerifier | None = None,
        config: TwoFactorConfig | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Source of the "2FA required" policy flag.
            recovery_codes: Recovery code storage.
            secrets: TOTP secret storage.
            verifier: TOTP algorithm (defaults to pyotp, configured from config).
            config: Two-factor configuration.
        """
        self.config = config or TwoFactorConfig()
        self.settings = settings
        self.recovery_codes = recovery_codes
        self.secrets = secrets
        self.verifier = verifier or PyotpTotpVerifier.from_config(self.config)

    # -- policy ---------------------------------------------------------------

    async def is_user_required_to_have_two_factor_enabled(self) -> bool:
        return await self.settings.is_two_factor_auth_required()

    # -- state ----------------------------------------------------------------

    async def is_user_using_two_factor_authentication(
        self, login: Login | str
    ) -> bool:
        """Check whether the login has a secret on record.

        Always False for the anonymous login and for empty input.
        """
        resolved = resolve_real_login(login)
        if resolved is None:
            return False
        return bool(await self.secrets.get_secret(resolved))

    async def get_remaining_recovery_code_count(self, login: Login | str) -> int:
        if resolve_real_login(login) is None:
            return 0
        return await self.recovery_codes.get_remaining_count(login)

    # -- lifecycle ------------------------------------------------------------

    async def save_secret(self, login: Login | str, secret: str) -> None:
        """Persist the login's TOTP secret, enabling two-factor authentication.

        Raises:
            InvalidSubjectError: If the login is anonymous or empty.
            RecoveryCodesRequiredError: If no recovery codes exist yet.
            ValueError: If the secret is empty.
        """
        resolved = require_real_login(login)
        if not secret:
            raise ValueError("Two-factor secret must not be empty")

        if not await self.recovery_codes.get_all_recovery_codes_for_login(resolved):
            logger.warning(
                "Refusing to save secret for %s: no recovery codes", resolved
            )
            raise RecoveryCodesRequiredError(resolved.value)

        await self.secrets.store_secret(resolved, secret)
        logger.info("Two-factor authentication enabled for %s", resolved)

    async def disable_2fa_for_user(self, login: Login | str) -> None:
        """Remove the login's secret and all of its recovery codes.

        The secret goes first so that a failure in between leaves the login
        without 2FA rather than with 2FA and no fallback. Idempotent.
        """
        resolved = resolve_real_login(login)
        if resolved is None:
            return
        await self.secrets.delete_secret(resolved)
        await self.recovery_codes.delete_all_recovery_codes_for_login(resolved)
        logger.info("Two-factor authentication disabled for %s", resolved)

    def generate_secret(self) -> str:
        return self.verifier.generate_secret()

    async def start_setup(self, login: Login | str) -> TwoFactorSetup:
        """Begin enrolment: create recovery codes and a candidate secret.

        The secret is not saved until :meth:`complete_setup` succeeds.

        Raises:
            InvalidSubjectError: If the login is anonymous or empty.
        """
        resolved = require_real_login(login)
        codes = await self.recovery_codes.create_recovery_codes_for_login(resolved)
        secret = self.verifier.generate_secret()
        return TwoFactorSetup(
            login=resolved.value,
            secret=secret,
            qr_uri=self.verifier.provisioning_uri(secret, resolved.value),
            manual_key=PyotpTotpVerifier.format_secret(secret),
            recovery_codes=tuple(codes),
        )

    async def complete_setup(
        self, login: Login | str, secret: str, code: SubmittedCode
    ) -> bool:
        """Finish enrolment once the user proves the authenticator works.

        Returns:
            True if the code matched and the secret was saved.
        """
        if not self.validate_auth_code_during_setup(code, secret):
            logger.debug("Setup code rejected for %s", login)
            return False
        await self.save_secret(login, secret)
        return True

    # -- validation -----------------------------------------------------------

    def validate_auth_code_during_setup(
        self, code: SubmittedCode, secret: str
    ) -> bool:
        """Check a code against a candidate secret that is not yet saved."""
        cleaned = _clean_code(code, self.config.digits)
        if cleaned is None or not isinstance(secret, str) or not secret:
            return False
        return self.verifier.verify(secret, cleaned)

    async def validate_auth_code(
        self, login: Login | str, code: SubmittedCode
    ) -> bool:
        """Validate a TOTP code or, failing that, a recovery code.

        A matching recovery code is consumed before this returns True, so
        the same code never validates twice. Every kind of rejection
        returns False.
        """
        resolved = resolve_real_login(login)
        if resolved is None:
            return False

        secret = await self.secrets.get_secret(resolved)
        if not secret:
            return False

        cleaned = _clean_code(code, self.config.digits)
        if cleaned is None:
            return False

        if self.verifier.verify(secret, cleaned):
            logger.debug("TOTP code accepted for %s", resolved)
            return True

        if await self.recovery_codes.consume_recovery_code(resolved, cleaned):
            logger.debug("Recovery code consumed for %s", resolved)
            return True

        logger.debug("Two-factor code rejected for %s", resolved)
        return False


__all__: list[str] = ["TwoFactorAuthenticationService"]
