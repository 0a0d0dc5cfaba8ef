"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Generator

from sqlmodel import Session

from .database import get_engine


def get_db() -> Generator[Session, None, None]:
    """Provide a database session for FastAPI routes."""

    with Session(get_engine(), expire_on_commit=False) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


