# app/core/auth.py
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.core.config import Settings, get_settings

# HTTP Basic scheme:
# - auto_error=False => a missing Authorization header does NOT raise
#   immediately, so auth can be switched off with ENABLE_AUTH=false.
basic_scheme = HTTPBasic(auto_error=False)


def _matches(given: str, expected: str | None) -> bool:
    """Constant-time string comparison; an unset expected value never matches."""
    if expected is None:
        return False
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(basic_scheme),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """
    Enforce admin basic auth on the catalog routes.

    Flow:
      1. ENABLE_AUTH is false => everyone passes (returns None).
      2. Compare username/password against ADMIN_USERNAME/ADMIN_PASSWORD.

    Returns:
        The authenticated username, or None when auth is disabled.

    Raises:
        HTTPException(401): with a Basic challenge if credentials are
        missing or wrong.
    """
    if not settings.ENABLE_AUTH:
        return None

    if credentials is not None:
        user_ok = _matches(credentials.username, settings.ADMIN_USERNAME)
        password_ok = _matches(credentials.password, settings.ADMIN_PASSWORD)
        if user_ok and password_ok:
            return credentials.username

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": 'Basic realm="Admin"'},
    )
