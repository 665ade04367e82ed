"""Login value object.

A login is the opaque identifier of a user account. The anonymous
pseudo-user is a distinguished variant of the same type so the
"anonymous never has two-factor state" rule is checked in one place.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidSubjectError

ANONYMOUS_LOGIN = "anonymous"


class Login(BaseModel):
    """Immutable login identity.

    Example:
        ```python
        login = Login.of("john.doe")
        assert not login.is_anonymous

        assert Login.anonymous().is_anonymous
        ```
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(min_length=1)

    @classmethod
    def anonymous(cls) -> Login:
        """Create the anonymous pseudo-login."""
        return cls(value=ANONYMOUS_LOGIN)

    @classmethod
    def of(cls, login: Login | str) -> Login:
        """Convert a raw login into a Login.

        Raises:
            InvalidSubjectError: If the login is empty or not a string.
        """
        if isinstance(login, Login):
            return login
        if not isinstance(login, str) or not login.strip():
            raise InvalidSubjectError("Login must be a non-empty string")
        return cls(value=login)

    @property
    def is_anonymous(self) -> bool:
        return self.value == ANONYMOUS_LOGIN

    def __str__(self) -> str:
        return self.value


def require_real_login(login: Login | str) -> Login:
    """Return the login, rejecting empty and anonymous identities.

    Raises:
        InvalidSubjectError: If the login is empty or anonymous.
    """
    resolved = Login.of(login)
    if resolved.is_anonymous:
        raise InvalidSubjectError("Anonymous cannot use two-factor authentication")
    return resolved


def resolve_real_login(login: object) -> Login | None:
    """Like :func:`require_real_login` but returns None instead of raising.

    Used on read and validation paths, which fail closed.
    """
    try:
        return require_real_login(login)  # type: ignore[arg-type]
    except InvalidSubjectError:
        return None


__all__: list[str] = [
    "ANONYMOUS_LOGIN",
    "Login",
    "require_real_login",
    "resolve_real_login",
]
