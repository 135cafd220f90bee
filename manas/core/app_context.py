"""
App Context - złożenie wszystkich komponentów aplikacji.

ManasApp wybiera backend (gość / zalogowany) raz przy starcie i łączy:
AppStateStore, SyncManager, ThoughtStore, PomodoroTimer, SessionRecorder
oraz SoundManager.
"""
from typing import Any, Optional
from loguru import logger
from PyQt6.QtCore import QObject, Qt, pyqtSignal

from .app_state import AppState, AppStateStore
from .config import AppConfig, get_config
from .dispatcher import Dispatcher, ThreadDispatcher
from .errors import ManasError
from .identity import UserIdentity
from ..Modules.Pomodoro_module.pomodoro_logic import PomodoroTimer
from ..Modules.Pomodoro_module.pomodoro_models import PomodoroMode, PomodoroSessionRecord
from ..Modules.Pomodoro_module.session_recorder import SessionRecorder
from ..Modules.Sync_module.backends import StorageBackend, create_backend
from ..Modules.Sync_module.preferences import Preferences, parse_preferences_update
from ..Modules.Sync_module.sync_manager import SyncManager
from ..Modules.Thoughts_module.thoughts_models import SessionMeta
from ..Modules.Thoughts_module.thoughts_store import ThoughtStore
from ..utils.sound_manager import NullSoundManager, QtSoundManager, SoundManager


class ManasApp(QObject):
    """
    Kontekst aplikacji.

    Signals:
        preferences_changed(Preferences): preferencje wczytane lub zapisane
    """

    preferences_changed = pyqtSignal(object)

    def __init__(
        self,
        app_config: Optional[AppConfig] = None,
        identity: Optional[UserIdentity] = None,
        backend: Optional[StorageBackend] = None,
        dispatcher: Optional[Dispatcher] = None,
        sound_manager: Optional[SoundManager] = None,
        clock=None,
        parent=None,
    ):
        """
        Args:
            app_config: Konfiguracja (domyślnie globalna)
            identity: Zalogowany użytkownik (None = gość)
            backend: Gotowy backend (testy), inaczej wybierany z identity
            dispatcher: Wykonawca wywołań sieciowych (domyślnie wątki)
            sound_manager: Serwis dźwięków
            clock: Źródło czasu dla timera (testy)
        """
        super().__init__(parent)
        self.config = app_config or get_config()
        self.identity = identity
        self.dispatcher = dispatcher or ThreadDispatcher()
        self.sound_manager = sound_manager or self._create_sound_manager()
        self.preferences = Preferences(
            focusDuration=self.config.FOCUS_DURATION,
            shortBreakDuration=self.config.SHORT_BREAK_DURATION,
            longBreakDuration=self.config.LONG_BREAK_DURATION,
            theme=self.config.DEFAULT_THEME,
        )

        self.state_store = AppStateStore()
        # Zapis wykonywany w wątku mutacji, pod zamkiem magazynu stanu
        self.state_store.state_changed.connect(
            self._on_state_changed, Qt.ConnectionType.DirectConnection
        )

        self.timer = PomodoroTimer(
            durations={
                PomodoroMode.FOCUS: self.config.FOCUS_DURATION,
                PomodoroMode.SHORT_BREAK: self.config.SHORT_BREAK_DURATION,
                PomodoroMode.LONG_BREAK: self.config.LONG_BREAK_DURATION,
            },
            sound_manager=self.sound_manager,
            long_break_interval=self.config.LONG_BREAK_INTERVAL,
            clock=clock,
        )
        self.timer.on_focus_complete = self.increment_sessions
        self.timer.on_session_complete = self._on_session_complete

        self.preferences_changed.connect(self._apply_preferences)

        self.backend: Optional[StorageBackend] = None
        self.sync_manager: Optional[SyncManager] = None
        self.thoughts: Optional[ThoughtStore] = None
        self.recorder: Optional[SessionRecorder] = None
        self._attach_backend(backend or create_backend(identity, self.config))

    def _create_sound_manager(self) -> SoundManager:
        if not self.config.ENABLE_SOUND:
            return NullSoundManager(enabled=False)
        return QtSoundManager(self.config.SOUNDS_DIR, self.config.SOUND_VOLUME)

    def _attach_backend(self, backend: StorageBackend, initial_state: Optional[AppState] = None) -> None:
        """Podłącz backend i zbuduj zależne od niego komponenty"""
        self.backend = backend
        self.state_store.reset(initial_state or backend.load_initial_state())

        self.sync_manager = SyncManager(
            self.state_store, backend, self.dispatcher, max_thoughts=self.config.MAX_THOUGHTS
        )
        self.thoughts = ThoughtStore(
            self.state_store,
            backend,
            self.dispatcher,
            sync_manager=self.sync_manager,
            max_thoughts=self.config.MAX_THOUGHTS,
        )
        self.recorder = SessionRecorder(
            backend, self.dispatcher, on_recorded=lambda _record: self.sync_manager.sync_with_server()
        )

    # ==================== CYKL ŻYCIA ====================

    @property
    def is_authenticated(self) -> bool:
        return self.backend.is_authenticated

    def start(self) -> None:
        """Inicjalizacja dźwięku, preferencje i pierwsza synchronizacja"""
        self.sound_manager.initialize()
        self.load_preferences()
        self.sync_manager.sync_with_server()
        logger.info(f"[APP] Started ({'authenticated' if self.is_authenticated else 'guest'})")

    def shutdown(self, timeout: float = 5.0) -> None:
        """Poczekaj na zadania w locie"""
        wait_idle = getattr(self.dispatcher, "wait_idle", None)
        if wait_idle is not None and not wait_idle(timeout):
            logger.warning("[APP] Some background jobs did not finish before shutdown")
        self.backend.close()
        logger.info("[APP] Shutdown complete")

    def sign_out(self) -> None:
        """Wyloguj - stan domyślny i przejście w tryb gościa"""
        self.identity = None
        self._attach_backend(
            create_backend(None, self.config), AppState(theme=self.config.DEFAULT_THEME)
        )
        logger.info("[APP] Signed out")

    # ==================== STAN ====================

    def snapshot(self) -> AppState:
        return self.state_store.snapshot()

    def capture_thought(self, text: str) -> Optional[str]:
        """Zapisz myśl z bieżącym trybem timera i numerem sesji"""
        session_number = self.state_store.read(lambda state: state.sessions_completed) + 1
        meta = SessionMeta(mode=self.timer.mode, session_number=session_number)
        return self.thoughts.add_thought(text, meta)

    def increment_sessions(self) -> None:
        def apply(state):
            state.sessions_completed += 1
        self.state_store.update(apply)

    def clear_all(self) -> None:
        self.state_store.reset(AppState(theme=self.config.DEFAULT_THEME))

    def set_theme(self, theme: str) -> None:
        def apply(state):
            state.theme = theme
        self.state_store.update(apply)

    def _on_state_changed(self, state: AppState) -> None:
        self.backend.persist(state)

    def _on_session_complete(self, record: PomodoroSessionRecord) -> None:
        self.recorder.record(record)

    # ==================== PREFERENCJE ====================

    def load_preferences(self) -> None:
        """Pobierz preferencje w tle (po wczytaniu stosowane do timera)"""
        self.dispatcher.submit(
            self.backend.get_preferences,
            on_success=self.preferences_changed.emit,
            on_error=lambda error: logger.warning(f"[APP] Failed to load preferences: {error}"),
            name="get_preferences",
        )

    def save_preferences(self, update: Any) -> bool:
        """
        Zapisz częściową zmianę preferencji.

        Returns:
            False gdy zmiana jest niepoprawna (nic nie zostało wysłane)
        """
        try:
            update = parse_preferences_update(update)
        except ManasError as e:
            logger.warning(f"[APP] Invalid preferences update: {e.message}")
            return False

        self.dispatcher.submit(
            lambda: self.backend.set_preferences(update),
            on_success=self.preferences_changed.emit,
            on_error=lambda error: logger.warning(f"[APP] Failed to save preferences: {error}"),
            name="set_preferences",
        )
        return True

    def _apply_preferences(self, preferences: Preferences) -> None:
        self.preferences = preferences
        self.timer.apply_preferences(preferences)
        logger.debug(
            f"[APP] Preferences applied: focus={preferences.focus_duration} "
            f"short={preferences.short_break_duration} long={preferences.long_break_duration}"
        )
