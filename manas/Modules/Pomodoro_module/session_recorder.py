"""
Session Recorder - zapis zakończonych sesji Pomodoro (fire-and-forget).

Rekord jest walidowany i przekazywany do backendu w tle. Błędy są tylko
logowane - historia sesji to telemetria niekrytyczna, bez ponowień.
"""
import threading
from typing import Callable, Dict, Optional
from loguru import logger

from .pomodoro_models import PomodoroMode, PomodoroSessionRecord
from ...core.dispatcher import Dispatcher
from ...core.errors import ManasError


class SessionRecorder:
    """Przyjmuje rekordy z PomodoroTimer.on_session_complete"""

    def __init__(
        self,
        backend,
        dispatcher: Dispatcher,
        on_recorded: Optional[Callable[[PomodoroSessionRecord], None]] = None,
    ):
        """
        Args:
            backend: StorageBackend (create_session)
            dispatcher: Wykonawca zadań w tle
            on_recorded: Wywoływany po udanym zapisie ukończonej sesji focus
        """
        self.backend = backend
        self.dispatcher = dispatcher
        self.on_recorded = on_recorded

        self.stats: Dict[str, int] = {
            'sent': 0,
            'recorded': 0,
            'failed': 0,
        }
        self._stats_lock = threading.Lock()

    def record(self, record: PomodoroSessionRecord) -> None:
        """Wyślij rekord w tle - nigdy nie zgłasza wyjątku"""
        try:
            record.validate()
        except ManasError as e:
            self._count('failed')
            logger.warning(f"[SESSIONS] Dropping invalid session record: {e.message}")
            return

        self._count('sent')
        self.dispatcher.submit(
            lambda: self.backend.create_session(record),
            on_success=lambda _result: self._on_success(record),
            on_error=lambda error: self._on_error(record, error),
            name="create_session",
        )

    def _on_success(self, record: PomodoroSessionRecord) -> None:
        self._count('recorded')
        logger.info(f"[SESSIONS] Recorded {record.mode.value} session ({record.duration_minutes} min)")

        if self.on_recorded and record.completed and record.mode == PomodoroMode.FOCUS:
            self.on_recorded(record)

    def _on_error(self, record: PomodoroSessionRecord, error: Exception) -> None:
        self._count('failed')
        logger.error(f"[SESSIONS] Failed to record {record.mode.value} session: {error}")

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    def get_stats(self) -> Dict[str, int]:
        with self._stats_lock:
            return self.stats.copy()
