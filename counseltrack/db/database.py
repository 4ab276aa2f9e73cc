"""
In-process record store wiring

The store and the settings the app was built with live on app.state for the
lifetime of the process and are handed to routes through get_store and
get_settings. Nothing is written to disk.
"""

import logging
from typing import Optional
from fastapi import FastAPI, Request

from counseltrack.auth.users import list_counselors
from counseltrack.core.config import Settings
from counseltrack.records.store import CounselingStore
from counseltrack.records.mock_data import build_seeded_store

logger = logging.getLogger(__name__)


def init_store(app: FastAPI, settings: Settings, store: Optional[CounselingStore] = None) -> CounselingStore:
    """Attach the settings and the given store, or a freshly seeded one, to the app"""
    if store is None:
        if settings.SEED_MOCK_DATA:
            store = build_seeded_store(
                seed=settings.MOCK_DATA_SEED,
                counselor_ids=[counselor.id for counselor in list_counselors()],
            )
        else:
            logger.info("Mock data disabled; starting with an empty store")
            store = CounselingStore()
    app.state.settings = settings
    app.state.store = store
    return store


def get_store(request: Request) -> CounselingStore:
    """FastAPI dependency for getting the record store."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
