"""Authentication helpers for API handlers."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from . import models, security
from .config import get_settings
from .dependencies import get_db

SESSION_COOKIE = "pos_console_session"


def _resolve_user(request: Request, db: Session) -> Optional[models.User]:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None

    settings = get_settings()
    user_id = security.verify_session(token, settings.secret_key, settings.session_max_age)
    if user_id is None:
        return None

    user = db.get(models.User, user_id)
    if not user or not user.is_active:
        return None
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    """Require an authenticated, active user from the session cookie."""

    user = _resolve_user(request, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    """Screens hidden from plain ``user`` accounts (products, staff, registry search)."""

    if user.type == "user":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return user
