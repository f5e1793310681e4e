"""Database engine and session factory.

Only the ``sql`` gateway backend uses this module; with the ``supabase``
backend the engine is still created lazily by SQLAlchemy but never connects.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import sessionmaker

from tuvung.core.config import settings

logger = logging.getLogger(__name__)


def _connect_args_for(url: str) -> dict[str, Any]:
    try:
        parsed = make_url(url)
    except ArgumentError:
        return {}

    if parsed.drivername.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool.
        return {"check_same_thread": False}
    return {}


def build_engine(url: str | None = None) -> Engine:
    database_url = url or settings.DATABASE_URL
    engine = create_engine(
        database_url,
        connect_args=_connect_args_for(database_url),
        pool_pre_ping=True,
        future=True,
    )
    logger.info("Database engine configured for %s", make_url(database_url).drivername)
    return engine


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
