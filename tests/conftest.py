# tests/conftest.py
import logging
import os
import sys
from datetime import date

import pytest
from fastapi.testclient import TestClient

from counseltrack.auth.utils import create_jwt_token
from counseltrack.core.config import Settings
from counseltrack.main import create_app
from counseltrack.records.mock_data import build_seeded_store
from counseltrack.records.models import (
    StudentFields, ContactFields, ContactType, ReasonFields,
    InteractionFields, InteractionType,
)
from counseltrack.records.store import CounselingStore

TODAY = date(2024, 3, 15)


# =========================
# Logging -> stdout
# =========================
@pytest.fixture(scope="session", autouse=True)
def _tests_log_to_stdout():
    root = logging.getLogger()
    if not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(os.getenv("TEST_LOG_LEVEL", "INFO").upper())


# =========================
# Store fixtures
# =========================
@pytest.fixture
def store():
    return CounselingStore()


@pytest.fixture
def emma(store):
    return store.add_student(StudentFields(first_name="Emma", last_name="Johnson", grade="9"))


@pytest.fixture
def robert(store):
    return store.add_contact(ContactFields(
        type=ContactType.PARENT, first_name="Robert", last_name="Johnson",
        relation="Father of Emma Johnson", email="robert.johnson@example.com",
    ))


@pytest.fixture
def academic(store):
    return store.add_reason(ReasonFields(category="Academic", subcategory="Grade Concerns"))


@pytest.fixture
def behavioral(store):
    return store.add_reason(ReasonFields(category="Behavioral", subcategory="Attendance"))


def interaction_fields(person, reason_ids, **overrides):
    """InteractionFields for a student or contact with sensible defaults"""
    person_type = InteractionType.CONTACT if hasattr(person, "type") else InteractionType.STUDENT
    values = dict(
        date=TODAY,
        start_time="08:00",
        end_time="08:30",
        type=person_type,
        person_id=person.id,
        person_name=person.full_name,
        reason_ids=list(reason_ids),
        notes="",
    )
    values.update(overrides)
    return InteractionFields(**values)


# =========================
# API fixtures
# =========================
@pytest.fixture
def api_settings():
    return Settings(SEED_MOCK_DATA=False, LOG_LEVEL="WARNING")


@pytest.fixture
def client(store, api_settings):
    return TestClient(create_app(store=store, settings=api_settings))


@pytest.fixture
def seeded_client(api_settings):
    return TestClient(create_app(store=build_seeded_store(seed=7), settings=api_settings))


@pytest.fixture(scope="session")
def counselor_headers():
    return {"Authorization": f"Bearer {create_jwt_token('1', 'counselor@example.com', 'counselor')}"}


@pytest.fixture(scope="session")
def admin_headers():
    return {"Authorization": f"Bearer {create_jwt_token('2', 'admin@example.com', 'admin')}"}
