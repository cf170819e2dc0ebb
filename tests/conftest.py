import asyncio
import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine, text


def _ensure_app_on_path():
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
    return repo_root


_ensure_app_on_path()

# ============================================================================
# IN-MEMORY DATABASE FOR TESTING
# ============================================================================

import httpx
from sqlalchemy.pool import StaticPool

from quiz_engine.models import StoreEntry  # noqa: F401  registers the table
from quiz_engine.services.attempt_service import AttemptEngine
from quiz_engine.services.catalog_service import QuizCatalog
from quiz_engine.store import KeyValueStore

# Use sqlite:///:memory: with poolclass=StaticPool to share the same in-memory DB across threads
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # CRITICAL: Ensures all connections share the same in-memory database
)


@pytest.fixture(scope="session")
def engine():
    """Provide test engine as a fixture."""
    return test_engine


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create all tables in the test database once per session."""
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(autouse=True)
def cleanup_db_between_tests():
    """Clean up stored collections after each test."""
    yield
    with Session(test_engine) as session:
        session.exec(text("DELETE FROM storeentry"))
        session.commit()


# ============================================================================
# STORE, CATALOG & ENGINE FIXTURES
# ============================================================================


class FakeClock:
    """Deterministic clock for attempt timing."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store():
    return KeyValueStore(test_engine)


@pytest.fixture
def broken_store():
    """A store whose database has no tables, so every read and write fails."""
    return KeyValueStore(create_engine("sqlite://"))


@pytest.fixture
def catalog(store):
    catalog = QuizCatalog(store)
    catalog.fetch_quizzes()
    return catalog


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def attempt_engine(catalog, clock):
    return AttemptEngine(catalog, clock=clock)


def sample_quiz_data(**overrides):
    """Quiz with one question of each type, 10 points in total."""
    data = {
        "title": "Sample Quiz",
        "description": "One question of each type",
        "courseId": "C100",
        "questions": [
            {
                "id": "q-mc",
                "type": "multiple-choice",
                "question": "2 + 2 = ?",
                "options": ["3", "4", "5"],
                "correctAnswer": 1,
                "points": 4,
                "explanation": "Basic addition.",
            },
            {
                "id": "q-tf",
                "type": "true-false",
                "question": "The sky is green.",
                "correctAnswer": False,
                "points": 1,
            },
            {
                "id": "q-ms",
                "type": "multiple-select",
                "question": "Pick the even numbers.",
                "options": ["2", "3", "4", "5"],
                "correctAnswers": [0, 2],
                "points": 3,
            },
            {
                "id": "q-sa",
                "type": "short-answer",
                "question": "Capital of France?",
                "correctAnswers": ["Paris"],
                "points": 2,
            },
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def sample_quiz(catalog):
    return catalog.create_quiz(sample_quiz_data())


@pytest.fixture
def single_mc_quiz(catalog):
    """One multiple-choice question worth 5 points, correct index 1."""
    return catalog.create_quiz(
        {
            "title": "Single MC",
            "questions": [
                {
                    "id": "only",
                    "type": "multiple-choice",
                    "question": "Pick B",
                    "options": ["A", "B", "C"],
                    "correctAnswer": 1,
                    "points": 5,
                }
            ],
        }
    )


# ============================================================================
# FASTAPI APP & TEST CLIENT
# ============================================================================


@pytest.fixture
def app():
    from quiz_engine.main import create_app

    return create_app(bind=test_engine)


@pytest.fixture
def client(app):
    """Create test client using httpx AsyncClient with sync wrapper."""
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

    transport = httpx.ASGITransport(app=app)
    async_client = httpx.AsyncClient(transport=transport, base_url="http://testserver")

    class SyncClientWrapper:
        def __init__(self, async_client, loop):
            self.async_client = async_client
            self.loop = loop

        def get(self, *args, **kwargs):
            return self.loop.run_until_complete(self.async_client.get(*args, **kwargs))

        def post(self, *args, **kwargs):
            return self.loop.run_until_complete(self.async_client.post(*args, **kwargs))

        def put(self, *args, **kwargs):
            return self.loop.run_until_complete(self.async_client.put(*args, **kwargs))

        def patch(self, *args, **kwargs):
            return self.loop.run_until_complete(self.async_client.patch(*args, **kwargs))

        def delete(self, *args, **kwargs):
            return self.loop.run_until_complete(self.async_client.delete(*args, **kwargs))

    yield SyncClientWrapper(async_client, loop)

    loop.run_until_complete(async_client.aclose())


@pytest.fixture
def fast_thread_switching():
    """Make the interpreter switch threads as often as possible."""
    previous = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    yield
    sys.setswitchinterval(previous)


def run_in_threads(target, thread_count):
    """Run `target(index)` on `thread_count` threads and re-raise the first error."""
    errors = []

    def _run(index):
        try:
            target(index)
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=_run, args=(i,)) for i in range(thread_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]
