"""Policy settings for two-factor authentication."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .ports import IPolicySettings

if TYPE_CHECKING:
    from .config import TwoFactorConfig

logger = logging.getLogger("cqrs_ddd.twofactor")


class PolicySettings(IPolicySettings):
    """Holds the "two-factor required for all users" flag.

    The value is loaded when the settings object is built and changed only
    through :meth:`set_two_factor_auth_required`. Reads always see the
    latest value.
    """

    def __init__(self, *, two_factor_auth_required: bool = False) -> None:
        self._two_factor_auth_required = bool(two_factor_auth_required)

    @classmethod
    def from_config(cls, config: TwoFactorConfig) -> PolicySettings:
        return cls(two_factor_auth_required=config.two_factor_auth_required)

    async def is_two_factor_auth_required(self) -> bool:
        return self._two_factor_auth_required

    def set_two_factor_auth_required(self, value: bool) -> None:
        """Administrative update of the policy flag."""
        self._two_factor_auth_required = bool(value)
        logger.info("Two-factor authentication required for all users: %s", value)


__all__: list[str] = ["PolicySettings"]
