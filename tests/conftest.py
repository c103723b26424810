# -*- coding: utf-8 -*-
"""Fixtures partagées : store temporaire, service, app ASGI."""

import uuid

import pytest
from starlette.testclient import TestClient

from live_mutex.config import Settings
from live_mutex.core.mutex import MutexService
from live_mutex.core.store import RecordStore
from live_mutex.server import create_app


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "mutex_logs"


@pytest.fixture
def settings(store_dir) -> Settings:
    return Settings(mutex_store_dir=str(store_dir), mutex_server_host="127.0.0.1")


@pytest.fixture
def store(store_dir) -> RecordStore:
    return RecordStore(store_dir)


@pytest.fixture
def service(store) -> MutexService:
    return MutexService(store)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def mutex_id() -> str:
    return str(uuid.uuid4()).upper()
