from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import Settings

_security = HTTPBasic(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


# PUBLIC_INTERFACE
def get_basic_auth_dependency(settings: Settings):
    """
    Return a dependency guarding the API with HTTP Basic Auth when
    ENABLE_BASIC_AUTH is set; otherwise a no-op.

    This is a single-user application, so one username/password pair from the
    environment protects every router.
    """
    if not settings.enable_basic_auth:
        async def _noop() -> None:  # noqa: D401 - trivial
            return None

        return _noop

    expected_user = settings.basic_auth_username
    expected_pass = settings.basic_auth_password

    async def _enforce(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> None:
        if creds is None:
            raise _unauthorized("Not authenticated")
        if expected_user is None or expected_pass is None:
            raise _unauthorized("Server authentication not configured")
        user_ok = secrets.compare_digest(creds.username.encode("utf-8"), expected_user.encode("utf-8"))
        pass_ok = secrets.compare_digest(creds.password.encode("utf-8"), expected_pass.encode("utf-8"))
        if not (user_ok and pass_ok):
            raise _unauthorized("Invalid authentication credentials")

    return _enforce
