import os
import sys
import pytest
from unittest.mock import MagicMock

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

# Настройки читаются при импорте helios.config, поэтому окружение задаём заранее
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SIMULATED_LATENCY_MS"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient
from helios.application.use_cases.session_store import SessionStore
from helios.config import Settings
from helios.infrastructure.network import NetworkError, SimulatedNetwork
from helios.infrastructure.storage import InMemoryStorage
from helios.interfaces.http.routers.session import get_limiter
from helios.interfaces.http.session import NavigationLog
from helios.main import create_app

TEST_USER_ID = "user_abc123xyz"


class FakeCookieJar:
    """Cookie браузера: хранит текущее значение, а не отложенные изменения"""

    def __init__(self):
        self.values = {}
        self.max_ages = {}

    def set(self, name, value, max_age):
        self.values[name] = value
        self.max_ages[name] = max_age

    def clear(self, name):
        self.values.pop(name, None)
        self.max_ages.pop(name, None)


class FailingNetwork:
    async def roundtrip(self):
        raise NetworkError("connection reset")


# Отключаем rate limiting в тестах
def override_get_limiter():
    mock_limiter = MagicMock()
    def noop_limit(*args, **kwargs):
        def decorator(func):
            return func
        return decorator
    mock_limiter.limit = noop_limit
    return mock_limiter


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def cookie_jar():
    return FakeCookieJar()


@pytest.fixture
def store(storage, cookie_jar):
    """Хранилище сессии с мгновенной сетью и предсказуемым id"""
    return SessionStore(
        storage=storage,
        cookies=cookie_jar,
        navigator=NavigationLog(),
        network=SimulatedNetwork(latency_ms=0),
        id_factory=lambda: TEST_USER_ID,
    )


@pytest.fixture
def app(storage):
    test_settings = Settings(STORAGE_BACKEND="memory", SIMULATED_LATENCY_MS=0, LOG_LEVEL="WARNING")
    app = create_app(test_settings, storage=storage, network=SimulatedNetwork(latency_ms=0))
    app.dependency_overrides[get_limiter] = override_get_limiter
    return app


@pytest.fixture
def client(app):
    """Фикстура для тестового клиента (lifespan запускает initialize())"""
    with TestClient(app) as test_client:
        yield test_client
