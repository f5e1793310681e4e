"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import random
from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GATEWAY_BACKEND", "sql")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from tuvung.db.base import Base
from tuvung.gateway.sql_gateway import SqlGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.store import SessionStore
from tuvung.schemas.user_schema import CurrentUser
from tests.utils import FakeHttp


@pytest.fixture()
def engine():
    # One shared connection so TestClient worker threads see the same database.
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateway(db_session) -> SqlGateway:
    return SqlGateway(db_session)


@pytest.fixture()
def owner() -> CurrentUser:
    return CurrentUser(id="11111111-1111-1111-1111-111111111111", email="owner@example.com")


@pytest.fixture()
def learner() -> CurrentUser:
    return CurrentUser(id="22222222-2222-2222-2222-222222222222", email="learner@example.com")


@pytest.fixture()
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture()
def storage(http) -> SupabaseStorage:
    return SupabaseStorage(base_url="https://project.supabase.co", api_key="anon-key", http=http)


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore(ttl=timedelta(minutes=30))


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)
