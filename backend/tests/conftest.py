from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from runhistory.api.routes.run import get_run_api
from runhistory.core import config as configmod
from runhistory.main import app
from tests.helpers import FakeRunApi


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    configmod.get_settings.cache_clear()
    yield
    configmod.get_settings.cache_clear()


@pytest.fixture()
def fake_api() -> FakeRunApi:
    return FakeRunApi()


@pytest.fixture()
def client(fake_api: FakeRunApi) -> TestClient:
    app.dependency_overrides[get_run_api] = lambda: fake_api
    yield TestClient(app)
    app.dependency_overrides.pop(get_run_api, None)
