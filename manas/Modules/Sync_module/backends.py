"""
Storage Backends - strategia przechowywania danych.

Wybierana raz przy starcie aplikacji:
- GuestBackend: brak tożsamości, wszystko lokalnie (LocalStateStorage)
- RemoteBackend: zalogowany użytkownik, wszystko przez ManasAPIClient

Dzięki temu Thought Store / Sync Manager nie sprawdzają w każdej
operacji, czy użytkownik jest zalogowany.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from loguru import logger

from .api_client import ManasAPIClient
from .local_storage import LocalStateStorage
from .preferences import Preferences, parse_preferences, parse_preferences_update
from ..Pomodoro_module.pomodoro_models import PomodoroSessionRecord
from ..Stats_module.stats_logic import FocusHistory, UserStats
from ..Thoughts_module.thoughts_models import SessionMeta, Thought
from ...core.app_state import AppState
from ...core.config import AppConfig, get_config
from ...core.errors import AuthError, ValidationError


@dataclass
class SyncSnapshot:
    """Wynik odczytu stanu z backendu (thoughts=None: lista bez zmian)"""
    stats: UserStats
    thoughts: Optional[List[Thought]] = None


class StorageBackend(ABC):
    """Interfejs backendu danych"""

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        ...

    @abstractmethod
    def load_initial_state(self) -> AppState:
        """Stan startowy aplikacji"""

    @abstractmethod
    def persist(self, state: AppState) -> None:
        """Zapis snapshotu po każdej zmianie stanu (best effort)"""

    @abstractmethod
    def fetch_snapshot(self) -> SyncSnapshot:
        ...

    @abstractmethod
    def create_thought(self, text: str, session: Optional[SessionMeta] = None,
                       tags: Optional[List[str]] = None) -> Thought:
        ...

    @abstractmethod
    def update_thought(self, thought_id: str, **changes) -> Thought:
        ...

    @abstractmethod
    def delete_thought(self, thought_id: str) -> Any:
        ...

    @abstractmethod
    def create_session(self, record: PomodoroSessionRecord) -> Any:
        ...

    @abstractmethod
    def get_preferences(self) -> Preferences:
        ...

    @abstractmethod
    def set_preferences(self, update) -> Preferences:
        ...

    def close(self) -> None:
        """Zwolnij zasoby backendu"""


class GuestBackend(StorageBackend):
    """Tryb gościa - dane tylko w lokalnym magazynie"""

    def __init__(self, storage: LocalStateStorage, app_config: Optional[AppConfig] = None):
        self.storage = storage
        self.config = app_config or get_config()
        self._history_lock = threading.Lock()

    @property
    def is_authenticated(self) -> bool:
        return False

    def load_initial_state(self) -> AppState:
        return self.storage.load()

    def persist(self, state: AppState) -> None:
        self.storage.save(state)

    # ==================== HISTORIA FOCUS ====================

    def _load_history(self) -> FocusHistory:
        return FocusHistory.from_dict(self.storage.get_item(self.config.FOCUS_HISTORY_STORAGE_KEY))

    def fetch_snapshot(self) -> SyncSnapshot:
        """Statystyki liczone lokalnie z FocusHistory, lista myśli bez zmian"""
        stats = self._load_history().to_stats()
        # Licznik sesji gościa jest prowadzony w samym AppState
        stats.sessions_completed = None
        return SyncSnapshot(stats=stats, thoughts=None)

    def create_session(self, record: PomodoroSessionRecord) -> Dict[str, Any]:
        record.validate()
        with self._history_lock:
            history = self._load_history()
            if history.add(record):
                self.storage.set_item(self.config.FOCUS_HISTORY_STORAGE_KEY, history.to_dict())
                logger.debug(f"[STORAGE] Focus history updated ({history.sessions_completed} sessions)")
        return record.to_dict()

    # ==================== MYŚLI (wymagają konta) ====================

    def create_thought(self, text, session=None, tags=None):
        raise AuthError("Authentication required", status_code=401)

    def update_thought(self, thought_id, **changes):
        raise AuthError("Authentication required", status_code=401)

    def delete_thought(self, thought_id):
        raise AuthError("Authentication required", status_code=401)

    # ==================== PREFERENCJE ====================

    def get_preferences(self) -> Preferences:
        data = self.storage.get_item(self.config.PREFERENCES_STORAGE_KEY)
        try:
            return parse_preferences(data)
        except ValidationError as e:
            logger.warning(f"[STORAGE] Stored preferences invalid, using defaults: {e.message}")
            return Preferences(theme=self.config.DEFAULT_THEME)

    def set_preferences(self, update) -> Preferences:
        update = parse_preferences_update(update)
        preferences = self.get_preferences().merged(update)
        self.storage.set_item(self.config.PREFERENCES_STORAGE_KEY, preferences.to_api())
        return preferences


class RemoteBackend(StorageBackend):
    """Zalogowany użytkownik - serwer jest źródłem prawdy"""

    def __init__(self, api_client: ManasAPIClient, app_config: Optional[AppConfig] = None):
        self.api_client = api_client
        self.config = app_config or get_config()

    @property
    def is_authenticated(self) -> bool:
        return True

    def load_initial_state(self) -> AppState:
        return AppState(theme=self.config.DEFAULT_THEME)

    def persist(self, state: AppState) -> None:
        # Serwer jest źródłem prawdy
        return None

    def fetch_snapshot(self) -> SyncSnapshot:
        stats = self.api_client.fetch_stats()
        thoughts, _pagination = self.api_client.fetch_thoughts(limit=self.config.THOUGHTS_FETCH_LIMIT)
        return SyncSnapshot(stats=stats, thoughts=thoughts)

    def create_thought(self, text, session=None, tags=None):
        return self.api_client.create_thought(text, session=session, tags=tags)

    def update_thought(self, thought_id, **changes):
        return self.api_client.update_thought(thought_id, **changes)

    def delete_thought(self, thought_id):
        return self.api_client.delete_thought(thought_id)

    def create_session(self, record):
        return self.api_client.create_session(record)

    def get_preferences(self):
        return self.api_client.get_preferences()

    def set_preferences(self, update):
        """Nałóż zmianę na aktualne preferencje z serwera i wyślij komplet"""
        update = parse_preferences_update(update)
        preferences = self.api_client.get_preferences().merged(update)
        return self.api_client.set_preferences(preferences)

    def close(self) -> None:
        self.api_client.close()


def create_backend(
    identity=None,
    app_config: Optional[AppConfig] = None,
    storage: Optional[LocalStateStorage] = None,
    api_client: Optional[ManasAPIClient] = None,
) -> StorageBackend:
    """
    Wybierz backend na podstawie tożsamości.

    Args:
        identity: UserIdentity lub None (gość)
        app_config: Konfiguracja
        storage: Magazyn lokalny (domyślnie w DATA_DIR)
        api_client: Klient API (domyślnie z API_BASE_URL i tokenem tożsamości)
    """
    app_config = app_config or get_config()

    if identity is None:
        storage = storage or LocalStateStorage(
            app_config.DATA_DIR, app_config.STORAGE_KEY, app_config.DEFAULT_THEME
        )
        logger.info("[APP] Guest mode (local storage)")
        return GuestBackend(storage, app_config)

    api_client = api_client or ManasAPIClient(
        app_config.API_BASE_URL,
        access_token=identity.access_token,
        timeout=app_config.API_TIMEOUT,
    )
    logger.info(f"[APP] Authenticated mode (user {identity.user_id})")
    return RemoteBackend(api_client, app_config)
