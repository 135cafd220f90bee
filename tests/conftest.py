"""
Pytest fixtures for Manas tests
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from PyQt6.QtCore import QCoreApplication

from manas.core.app_state import AppState, AppStateStore
from manas.core.config import AppConfig
from manas.core.dispatcher import Dispatcher
from manas.core.errors import NotFoundError
from manas.Modules.Stats_module.stats_logic import UserStats
from manas.Modules.Sync_module.backends import GuestBackend, RemoteBackend
from manas.Modules.Sync_module.local_storage import LocalStateStorage
from manas.Modules.Sync_module.preferences import Preferences, parse_preferences
from manas.Modules.Sync_module.sync_manager import SyncManager
from manas.Modules.Thoughts_module.thoughts_models import Thought
from manas.Modules.Thoughts_module.thoughts_store import ThoughtStore


# =============================================================================
# TEST DOUBLES
# =============================================================================

class DeferredDispatcher(Dispatcher):
    """Zadania trafiają do kolejki i są wykonywane na żądanie testu"""

    def __init__(self):
        self.jobs = []

    def submit(self, job, on_success=None, on_error=None, name="job"):
        self.jobs.append((job, on_success, on_error, name))

    @property
    def pending(self) -> int:
        return len(self.jobs)

    @property
    def names(self):
        return [job[3] for job in self.jobs]

    def run_next(self):
        job, on_success, on_error, name = self.jobs.pop(0)
        self._execute(job, on_success, on_error, name)

    def run_all(self):
        while self.jobs:
            self.run_next()


class FakeAPIClient:
    """
    Serwer w pamięci z interfejsem ManasAPIClient.

    fail(method, error) - kolejne wywołanie metody zgłosi podany wyjątek.
    """

    def __init__(self):
        self.thoughts = {}
        self.sessions = []
        self.calls = []
        self.stats = UserStats(sessions_completed=0, total_focus_time=0, streak=0)
        self.preferences = Preferences()
        self._failures = {}
        self._next_id = 1
        self.closed = False

    def fail(self, method: str, error: Exception, times: int = 1):
        self._failures[method] = [error] * times

    def _call(self, method: str, *args):
        self.calls.append((method,) + args)
        errors = self._failures.get(method)
        if errors:
            raise errors.pop(0)

    def seed(self, text: str, **fields) -> Thought:
        """Dodaj myśl po stronie serwera"""
        thought = Thought(text=text, id=f"srv-{self._next_id}", **fields)
        self._next_id += 1
        self.thoughts[thought.id] = thought
        return thought.copy()

    def fetch_stats(self):
        self._call("fetch_stats")
        return self.stats

    def fetch_thoughts(self, page=1, limit=50):
        self._call("fetch_thoughts", page, limit)
        items = [thought.copy() for thought in self.thoughts.values()]
        return items[:limit], {"page": page, "limit": limit, "total": len(items), "pages": 1}

    def create_thought(self, text, session=None, tags=None):
        self._call("create_thought", text)
        return self.seed(text.strip(), session=session, tags=list(tags or []))

    def update_thought(self, thought_id, **changes):
        self._call("update_thought", thought_id, changes)
        thought = self.thoughts.get(thought_id)
        if thought is None:
            raise NotFoundError("Thought not found", status_code=404)
        if changes.get("is_completed") is not None:
            thought.is_completed = changes["is_completed"]
        if changes.get("text") is not None:
            thought.text = changes["text"]
        return thought.copy()

    def delete_thought(self, thought_id):
        self._call("delete_thought", thought_id)
        if self.thoughts.pop(thought_id, None) is None:
            raise NotFoundError("Thought not found", status_code=404)
        return "Thought deleted successfully"

    def create_session(self, record):
        self._call("create_session", record)
        record.validate()
        self.sessions.append(record)
        return record.to_dict()

    def get_preferences(self):
        self._call("get_preferences")
        return self.preferences

    def set_preferences(self, preferences):
        self._call("set_preferences", preferences)
        self.preferences = parse_preferences(preferences)
        return self.preferences

    def close(self):
        self.closed = True

    def method_calls(self, method: str):
        return [call for call in self.calls if call[0] == method]


class FakeClock:
    """Sterowany czas (UTC)"""

    def __init__(self, start: datetime = None):
        self.now = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Jedna instancja QCoreApplication na sesję testów"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def test_config(tmp_path):
    """Konfiguracja z katalogiem danych w tmp_path"""
    return AppConfig(
        DATA_DIR=tmp_path,
        LOGS_DIR=tmp_path / "logs",
        ENABLE_SOUND=False,
        ACCESS_TOKEN=None,
    )


@pytest.fixture
def dispatcher():
    return DeferredDispatcher()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def api():
    return FakeAPIClient()


@pytest.fixture
def storage(tmp_path):
    return LocalStateStorage(tmp_path, "manas_app_state_v1")


@pytest.fixture
def guest_backend(storage, test_config):
    return GuestBackend(storage, test_config)


@pytest.fixture
def remote_backend(api, test_config):
    return RemoteBackend(api, test_config)


@pytest.fixture
def state_store():
    return AppStateStore(AppState())


@pytest.fixture
def sync_manager(state_store, remote_backend, dispatcher):
    return SyncManager(state_store, remote_backend, dispatcher)


@pytest.fixture
def thought_store(state_store, remote_backend, dispatcher, sync_manager):
    """Thought Store zalogowanego użytkownika"""
    return ThoughtStore(state_store, remote_backend, dispatcher, sync_manager=sync_manager)


@pytest.fixture
def guest_thought_store(state_store, guest_backend, dispatcher):
    return ThoughtStore(state_store, guest_backend, dispatcher)


@pytest.fixture
def seeded(api, state_store):
    """Trzy myśli zsynchronizowane z serwerem (lokalnie w tej samej kolejności)"""
    thoughts = [api.seed(f"thought {i}") for i in range(3)]

    def apply(state):
        state.thoughts = [thought.copy() for thought in thoughts]

    state_store.update(apply)
    return thoughts
