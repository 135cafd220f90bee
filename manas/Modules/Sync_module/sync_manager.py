"""
Sync Manager - pełna synchronizacja AppState z backendem.

Pobiera statystyki i listę myśli, a następnie nadpisuje nimi stan
(last-write-wins). Błąd synchronizacji pozostawia stan bez zmian.
Brak automatycznej pętli - synchronizacja na żądanie (start aplikacji,
po ukończonej sesji focus, gdy nie da się przywrócić usuniętej myśli).
"""
import threading
from datetime import datetime
from typing import Any, Dict, Optional
from loguru import logger
from PyQt6.QtCore import QObject, pyqtSignal

from .backends import StorageBackend, SyncSnapshot
from ...core.dispatcher import Dispatcher
from ...utils.time_utils import utc_now


class SyncStatus:
    """Status synchronizacji"""
    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"
    SUCCESS = "success"


class SyncManager(QObject):
    """
    Menedżer synchronizacji stanu.

    Signals:
        sync_started: Emitowany gdy rozpoczyna się synchronizacja
        sync_completed: Emitowany gdy synchronizacja zakończona (success: bool, message: str)
    """

    sync_started = pyqtSignal()
    sync_completed = pyqtSignal(bool, str)  # success, message

    def __init__(
        self,
        state_store,
        backend: StorageBackend,
        dispatcher: Dispatcher,
        max_thoughts: int = 200,
    ):
        """
        Args:
            state_store: AppStateStore
            backend: Backend danych
            dispatcher: Wykonawca zadań w tle
            max_thoughts: Limit wpisów w pamięci
        """
        super().__init__()
        self.state_store = state_store
        self.backend = backend
        self.dispatcher = dispatcher
        self.max_thoughts = max_thoughts

        self.status = SyncStatus.IDLE
        self.last_sync_time: Optional[datetime] = None
        self.last_stats = None

        # Tylko jedna synchronizacja naraz
        self._sync_lock = threading.Lock()

        self.stats = {
            "syncs_started": 0,
            "syncs_succeeded": 0,
            "syncs_failed": 0,
            "syncs_skipped": 0,
        }

        logger.info("[SYNC] Sync Manager initialized")

    def is_syncing(self) -> bool:
        return self._sync_lock.locked()

    def sync_with_server(self) -> bool:
        """
        Rozpocznij synchronizację w tle.

        Returns:
            True jeśli synchronizacja wystartowała, False jeśli już trwa
        """
        if not self._sync_lock.acquire(blocking=False):
            self.stats["syncs_skipped"] += 1
            logger.debug("[SYNC] Sync already in progress, skipping")
            return False

        self.status = SyncStatus.SYNCING
        self.stats["syncs_started"] += 1
        self._set_loading(True)
        self.sync_started.emit()
        logger.info("[SYNC] Sync started")

        generation = self.state_store.generation
        self.dispatcher.submit(
            self.backend.fetch_snapshot,
            on_success=lambda snapshot: self._on_snapshot(snapshot, generation),
            on_error=self._on_error,
            name="sync",
        )
        return True

    def _on_snapshot(self, snapshot: SyncSnapshot, generation: int) -> None:
        def apply(state):
            # Stan zresetowany w trakcie (clear all / sign out) - wynik nieaktualny
            if self.state_store.generation != generation:
                state.is_loading = False
                return False
            self._apply(state, snapshot)
            return True

        try:
            applied = self.state_store.update(apply)
            if applied:
                self.status = SyncStatus.SUCCESS
                self.last_sync_time = utc_now()
                self.last_stats = snapshot.stats
                self.stats["syncs_succeeded"] += 1
            else:
                self.status = SyncStatus.IDLE
        finally:
            self._sync_lock.release()

        if not applied:
            logger.info("[SYNC] State was reset during sync, result discarded")
            self.sync_completed.emit(False, "State reset during sync")
            return

        count = len(snapshot.thoughts) if snapshot.thoughts is not None else "unchanged"
        logger.success(f"[SYNC] Sync completed (thoughts: {count})")
        self.sync_completed.emit(True, "Sync completed")

    def _apply(self, state, snapshot: SyncSnapshot) -> None:
        stats = snapshot.stats
        if stats.sessions_completed is not None:
            state.sessions_completed = stats.sessions_completed
        if stats.total_focus_time is not None:
            state.total_focus_time = stats.total_focus_time
        if stats.streak is not None:
            state.streak = stats.streak

        if snapshot.thoughts is not None:
            visible = [thought for thought in snapshot.thoughts if not thought.is_deleted]
            state.thoughts = visible[:self.max_thoughts]
        state.is_loading = False

    def _on_error(self, error: Exception) -> None:
        try:
            self._set_loading(False)
            self.status = SyncStatus.ERROR
            self.stats["syncs_failed"] += 1
        finally:
            self._sync_lock.release()

        logger.error(f"[SYNC] Sync failed, keeping local state: {error}")
        self.sync_completed.emit(False, str(error))

    def _set_loading(self, value: bool) -> None:
        def apply(state):
            state.is_loading = value
        self.state_store.update(apply)

    # ==================== STATYSTYKI ====================

    def get_stats(self) -> Dict[str, Any]:
        """Pobierz statystyki synchronizacji"""
        return {
            **self.stats,
            "status": self.status,
            "last_sync_time": self.last_sync_time.isoformat() if self.last_sync_time else None,
        }

    def reset_stats(self):
        """Resetuj statystyki"""
        for key in self.stats:
            self.stats[key] = 0
        logger.debug("[SYNC] Stats reset")
