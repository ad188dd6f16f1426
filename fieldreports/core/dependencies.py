# fieldreports/core/dependencies.py
from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from fieldreports.core.config import Settings
from fieldreports.core.errors import AuthenticationError
from fieldreports.core.permissions import ensure_role
from fieldreports.core.security import decode_token, issued_before
from fieldreports.db.session import get_db
from fieldreports.models.user import Role, User


# -----------------------------
# Settings
# -----------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# -----------------------------
# Token helpers
# -----------------------------
def extract_token(request: Request, settings: Settings) -> Optional[str]:
    """
    Token can come from:
      1) Authorization: Bearer <token>
      2) Cookie: settings.auth_cookie_name
    """
    auth = request.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token

    return request.cookies.get(settings.auth_cookie_name)


def decode_token_get_user_id(token: str, settings: Settings) -> tuple[int, dict]:
    try:
        payload = decode_token(token, settings)
    except ValueError:
        raise AuthenticationError("Invalid or expired token. Please log in again.")

    sub = payload.get("sub")
    try:
        return int(sub), payload
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid user id in token")


# -----------------------------
# API dependencies
# -----------------------------
def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Verifies the token and re-reads the user on every request, so deactivation
    and password changes take effect immediately.
    """
    token = extract_token(request, settings)
    if not token:
        raise AuthenticationError("You are not logged in! Please log in to get access.")

    user_id, payload = decode_token_get_user_id(token, settings)

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise AuthenticationError("User belonging to this token no longer exists.")

    if issued_before(payload, user.password_changed_at):
        raise AuthenticationError("User recently changed password! Please log in again.")

    request.state.user = user
    return user


def require_roles(*roles: Role | str) -> Callable[..., User]:
    """
    Dependency factory: allow only callers whose role is in `roles`.

        router.post("/", dependencies=[Depends(require_roles(*ADMIN_ROLES))])
    """
    allowed = frozenset(r.value if isinstance(r, Role) else str(r) for r in roles)

    def _dependency(user: User = Depends(get_current_user)) -> User:
        ensure_role(user, allowed)
        return user

    return _dependency
