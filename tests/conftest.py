"""
Pytest configuration and shared fixtures for the Competency Catalog tests.

This file provides:
- An in-memory SQLite database shared across sessions (StaticPool)
- Unit of work and service fixtures
- A competency factory for seeding rows
- A FastAPI test client wired to the test database
"""

import os

# Must be set before settings are first loaded
os.environ.setdefault("CATALOG_ENVIRONMENT", "dev")
os.environ.setdefault("CATALOG_DATABASE_URL", "sqlite://")

import itertools
import uuid
import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from settings.database import Base
from models import Competency, CompetencyStatus, CompetencyDomain, AcademicLevel
from api.competency.infra.db.uow import UnitOfWork
from api.competency.domain.services.lifecycle_engine import CompetencyLifecycleEngine
from api.competency.domain.services.catalog_query import CatalogQueryService


OWNER_HEADERS = {"X-Actor-Id": "owner-1", "X-Actor-Role": "CATALOG_OWNER"}
VIEWER_HEADERS = {"X-Actor-Id": "viewer-1", "X-Actor-Role": "VIEWER"}


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory) -> Generator:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def uow(db_session):
    return UnitOfWork(db_session)


@pytest.fixture
def lifecycle_engine(uow):
    return CompetencyLifecycleEngine(uow)


@pytest.fixture
def query_service(uow):
    return CatalogQueryService(uow)


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def valid_payload():
    """Create payload that passes every validation rule."""
    return {
        "code": "CARD-001",
        "title": "Cardiac auscultation",
        "description": "Perform and interpret cardiac auscultation findings.",
        "subject": "Cardiology",
        "domain": "CLINICAL",
        "academic_level": "UG",
    }


@pytest.fixture
def make_competency(db_session):
    """Insert a competency row directly, bypassing the lifecycle engine."""
    counter = itertools.count(1)
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        code=None,
        title=None,
        description="A sufficiently long description of the competency.",
        subject="Anatomy",
        domain=CompetencyDomain.COGNITIVE,
        academic_level=AcademicLevel.UG,
        status=CompetencyStatus.DRAFT,
        reviewed_by=None,
    ):
        n = next(counter)
        created_at = base_time + timedelta(minutes=n)
        competency = Competency(
            id=uuid.uuid4(),
            code=code or f"COMP-{n:03d}",
            title=title or f"Competency number {n}",
            description=description,
            subject=subject,
            domain=domain,
            academic_level=academic_level,
            status=status,
            version=1,
            created_by="seed",
            reviewed_by=reviewed_by or ("seed-reviewer" if status != CompetencyStatus.DRAFT else None),
            activated_at=created_at if status != CompetencyStatus.DRAFT else None,
            deprecated_at=created_at if status == CompetencyStatus.DEPRECATED else None,
            created_at=created_at,
            updated_at=created_at,
        )
        db_session.add(competency)
        db_session.commit()
        return competency

    return _make


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest.fixture
def client(session_factory) -> Generator:
    """FastAPI test client whose requests use the test database."""
    from fastapi.testclient import TestClient
    from settings.server import catalog_app
    from settings.database import get_db

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    catalog_app.dependency_overrides[get_db] = override_get_db
    with TestClient(catalog_app) as test_client:
        yield test_client
    catalog_app.dependency_overrides.clear()
