# conftest.py
import os

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time: set these BEFORE anything imports
# persona_chat.settings, so the lifespan won't open a DB pool.
os.environ['DISABLE_DB_POOL'] = 'true'
os.environ['USE_INMEMORY_REPO'] = 'true'
os.environ['AUTH_DOMAIN'] = ''


@pytest.fixture()
def repo():
    from persona_chat.adapters.repositories.memory import InMemoryRepository

    return InMemoryRepository()


@pytest.fixture()
def gateway():
    from tests.fakes import FakeGateway

    return FakeGateway(reply='Hello from the persona')


@pytest.fixture()
def training_store(tmp_path):
    from persona_chat.adapters.storage.local_training import LocalTrainingStore

    return LocalTrainingStore(tmp_path / 'training')


@pytest.fixture()
def image_store(tmp_path):
    from persona_chat.adapters.storage.local_images import LocalImageStore

    return LocalImageStore(tmp_path / 'images', '/uploads/personas')


@pytest.fixture()
def service(repo, gateway, training_store):
    """A fresh MessageService over an empty in-memory repo, per test."""
    from persona_chat.services.message_service import MessageService

    return MessageService(repo=repo, llm=gateway, training_store=training_store)


@pytest.fixture()
def client(repo, gateway, training_store, image_store):
    """
    TestClient whose storage, gateway, training and image stores are the
    per-test fixtures, injected via FastAPI dependency overrides.
    """
    from persona_chat.infra.db import get_repo
    from persona_chat.infra.llm import get_gateway
    from persona_chat.infra.storage import get_image_store, get_training_store
    from persona_chat.main import app

    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_training_store] = lambda: training_store
    app.dependency_overrides[get_image_store] = lambda: image_store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
