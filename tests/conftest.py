import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from taskflow.services.board import BoardStore
from taskflow.services.drag import DragGesture
from taskflow.services.enhancer import TaskEnhancer
from taskflow.services.gemini import EnhancementGateway, RateLimiter


class FakeClock:
    """Manually advanced time source for rate limiter tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# --- Canned provider output ---

GEMINI_DECORATED = '**Here\'s a version:** "Fix the login bug"'

GEMINI_WITH_OPTIONS = (
    "Option 1: skip.\n"
    "Refactor the login form to validate email format before submit."
)


@pytest.fixture
def store():
    """In-memory store with the default single empty list."""
    return BoardStore()


@pytest.fixture
def list_id(store):
    return store.board.lists[0].id


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(per_minute=9, per_day=50, clock=clock)


@pytest.fixture
def mock_genai_client(mocker):
    client = MagicMock()
    client.models.generate_content.return_value.text = GEMINI_DECORATED
    mocker.patch("taskflow.services.gemini._get_client", return_value=client)
    return client


@pytest.fixture
def gateway(limiter):
    return EnhancementGateway(limiter, primary_model="primary", fallback_model="fallback")


@pytest.fixture
def enhancer(store, gateway):
    return TaskEnhancer(store, gateway)


@pytest.fixture
def api_client(mocker, store, gateway):
    """FastAPI TestClient wired to a fresh in-memory store."""
    mocker.patch("taskflow.routers.board.get_store", return_value=store)
    mocker.patch("taskflow.routers.board.get_enhancer", return_value=TaskEnhancer(store, gateway))
    mocker.patch("taskflow.routers.drag.get_gesture", return_value=DragGesture(store))
    mocker.patch("taskflow.services.gemini.get_gateway", return_value=gateway)
    from taskflow.main import api
    return TestClient(api)
