"""
Thought Store - operacje na dzienniku myśli z aktualizacją optymistyczną.

Każda operacja najpierw zmienia stan lokalny (poza completeThought,
która czeka na serwer), a wywołanie sieciowe idzie w tle przez dispatcher.
Wynik z serwera jest uzgadniany ze stanem albo zmiana jest cofana.

| Operacja            | Optymistyczna | Cofnięcie po błędzie      |
|---------------------|---------------|---------------------------|
| add_thought         | tak           | brak (wpis zostaje)       |
| toggle_task_complete| tak           | tak (przywrócenie)        |
| complete_thought    | nie           | nie dotyczy               |
| remove_thought      | tak           | przywrócenie na początek  |
| reorder_thoughts    | tylko lokalnie| nie dotyczy               |

Żaden wyjątek sieciowy nie wychodzi poza tę klasę.
"""
import threading
from typing import Optional, Set
from loguru import logger

from .thoughts_models import MAX_TEXT_LENGTH, SessionMeta, Thought, new_client_id
from ...core.dispatcher import Dispatcher
from ...core.errors import NotFoundError


class ThoughtStore:
    """Dziennik myśli w AppState"""

    def __init__(
        self,
        state_store,
        backend,
        dispatcher: Dispatcher,
        sync_manager=None,
        max_thoughts: int = 200,
    ):
        """
        Args:
            state_store: AppStateStore (jedyny kanał mutacji stanu)
            backend: StorageBackend (gość / zdalny)
            dispatcher: Wykonawca wywołań sieciowych
            sync_manager: SyncManager - pełna resynchronizacja gdy nie da się przywrócić wpisu
            max_thoughts: Limit wpisów w pamięci
        """
        self.state_store = state_store
        self.backend = backend
        self.dispatcher = dispatcher
        self.sync_manager = sync_manager
        self.max_thoughts = max_thoughts

        # Id z operacją w locie (toggle/complete/remove są serializowane per id)
        self._pending: Set[str] = set()
        self._pending_lock = threading.Lock()

    # ==================== POMOCNICZE ====================

    def is_pending(self, thought_id: str) -> bool:
        with self._pending_lock:
            return thought_id in self._pending

    def _acquire(self, thought_id: str) -> bool:
        with self._pending_lock:
            if thought_id in self._pending:
                return False
            self._pending.add(thought_id)
            return True

    def _release(self, thought_id: str) -> None:
        with self._pending_lock:
            self._pending.discard(thought_id)

    def _can_mutate(self, thought_id, operation: str) -> bool:
        if not isinstance(thought_id, str) or not thought_id:
            logger.debug(f"[THOUGHTS] {operation}: invalid id {thought_id!r}")
            return False
        if not self.backend.is_authenticated:
            logger.debug(f"[THOUGHTS] {operation}: not authenticated")
            return False
        return True

    # ==================== DODAWANIE ====================

    def add_thought(self, text: str, session_meta: Optional[SessionMeta] = None) -> Optional[str]:
        """
        Dodaj myśl na początek listy (natychmiast), potem potwierdź na serwerze.

        Args:
            text: Treść (przycinana)
            session_meta: Tryb timera i numer sesji

        Returns:
            client_id tymczasowego wpisu lub None gdy tekst odrzucony
        """
        if not isinstance(text, str) or not text.strip():
            return None
        text = text.strip()
        if len(text) > MAX_TEXT_LENGTH:
            logger.warning(f"[THOUGHTS] Rejected thought longer than {MAX_TEXT_LENGTH} characters")
            return None

        provisional = Thought(text=text, session=session_meta, client_id=new_client_id())
        client_id = provisional.client_id

        def insert(state):
            state.thoughts.insert(0, provisional)
            del state.thoughts[self.max_thoughts:]

        self.state_store.update(insert)
        logger.debug(f"[THOUGHTS] Added provisional thought {client_id}")

        if self.backend.is_authenticated:
            self.dispatcher.submit(
                lambda: self.backend.create_thought(text, session=session_meta),
                on_success=lambda confirmed: self._confirm(client_id, confirmed),
                on_error=lambda error: logger.warning(
                    f"[THOUGHTS] Failed to save thought {client_id}, keeping local copy: {error}"
                ),
                name="create_thought",
            )
        return client_id

    def _confirm(self, client_id: str, confirmed: Thought) -> None:
        """Zamień tymczasowy wpis o danym client_id na potwierdzony rekord"""
        def apply(state):
            for index, thought in enumerate(state.thoughts):
                if thought.client_id == client_id:
                    state.thoughts[index] = confirmed
                    return True
            return False

        if self.state_store.update(apply):
            logger.debug(f"[THOUGHTS] Confirmed {client_id} as {confirmed.id}")
        else:
            logger.debug(f"[THOUGHTS] Provisional {client_id} no longer present, response dropped")

    # ==================== ZAKOŃCZENIE ZADANIA ====================

    def toggle_task_complete(self, thought_id: str) -> bool:
        """
        Przełącz is_completed (optymistycznie), cofnij po błędzie.

        Returns:
            True jeśli operacja została rozpoczęta
        """
        if not self._can_mutate(thought_id, "toggle"):
            return False
        if not self._acquire(thought_id):
            logger.debug(f"[THOUGHTS] toggle: {thought_id} already in flight")
            return False

        def flip(state):
            index = state.find_index(thought_id)
            if index < 0:
                return None
            thought = state.thoughts[index]
            previous = thought.is_completed
            thought.is_completed = not previous
            return previous

        previous = self.state_store.update(flip)
        if previous is None:
            self._release(thought_id)
            return False

        def on_success(_updated):
            self._release(thought_id)
            logger.debug(f"[THOUGHTS] Toggled {thought_id} to {not previous}")

        def on_error(error):
            def restore(state):
                index = state.find_index(thought_id)
                if index >= 0:
                    state.thoughts[index].is_completed = previous

            try:
                self.state_store.update(restore)
            finally:
                self._release(thought_id)
            logger.warning(f"[THOUGHTS] Toggle of {thought_id} failed, reverted: {error}")

        self.dispatcher.submit(
            lambda: self.backend.update_thought(thought_id, is_completed=not previous),
            on_success=on_success,
            on_error=on_error,
            name="update_thought",
        )
        return True

    def complete_thought(self, thought_id: str) -> bool:
        """
        "Załatwione" - najpierw usunięcie na serwerze, potem lokalnie.

        Returns:
            True jeśli operacja została rozpoczęta
        """
        if not self._can_mutate(thought_id, "complete"):
            return False
        if not self._acquire(thought_id):
            logger.debug(f"[THOUGHTS] complete: {thought_id} already in flight")
            return False

        def remove_local(_result=None):
            def remove(state):
                index = state.find_index(thought_id)
                if index >= 0:
                    del state.thoughts[index]

            try:
                self.state_store.update(remove)
            finally:
                self._release(thought_id)
            logger.info(f"[THOUGHTS] Completed thought {thought_id}")

        def on_error(error):
            if isinstance(error, NotFoundError):
                remove_local()
                return
            self._release(thought_id)
            logger.warning(f"[THOUGHTS] Complete of {thought_id} failed, thought kept: {error}")

        self.dispatcher.submit(
            lambda: self.backend.delete_thought(thought_id),
            on_success=remove_local,
            on_error=on_error,
            name="complete_thought",
        )
        return True

    # ==================== USUWANIE ====================

    def remove_thought(self, thought_id: str) -> bool:
        """
        Usuń optymistycznie; 404 = sukces, inny błąd = przywrócenie wpisu.

        Returns:
            True jeśli operacja została rozpoczęta
        """
        if not self._can_mutate(thought_id, "remove"):
            return False
        if not self._acquire(thought_id):
            logger.debug(f"[THOUGHTS] remove: {thought_id} already in flight")
            return False

        def take(state):
            index = state.find_index(thought_id)
            if index < 0:
                return None
            return state.thoughts.pop(index)

        generation = self.state_store.generation
        removed = self.state_store.update(take)
        if removed is None:
            self._release(thought_id)
            logger.debug(f"[THOUGHTS] remove: {thought_id} not present locally")
            return False

        def on_success(_result):
            self._release(thought_id)
            logger.info(f"[THOUGHTS] Removed thought {thought_id}")

        def on_error(error):
            try:
                if isinstance(error, NotFoundError):
                    logger.info(f"[THOUGHTS] Thought {thought_id} already gone on server")
                    return
                logger.warning(f"[THOUGHTS] Remove of {thought_id} failed: {error}")
                if not self._restore(removed, generation):
                    self._resync()
            finally:
                self._release(thought_id)

        self.dispatcher.submit(
            lambda: self.backend.delete_thought(thought_id),
            on_success=on_success,
            on_error=on_error,
            name="delete_thought",
        )
        return True

    def _restore(self, removed: Thought, generation: int) -> bool:
        """Przywróć usunięty wpis na początek listy (o ile stan nie był resetowany)"""
        def restore(state):
            if self.state_store.generation != generation:
                return False
            if state.find_index(removed.id) < 0:
                state.thoughts.insert(0, removed)
                del state.thoughts[self.max_thoughts:]
            return True

        restored = self.state_store.update(restore)
        if restored:
            logger.info(f"[THOUGHTS] Restored thought {removed.id} at the head of the list")
        return restored

    def _resync(self) -> None:
        if self.sync_manager is None:
            return
        logger.info("[THOUGHTS] State changed since removal, falling back to full sync")
        self.sync_manager.sync_with_server()

    # ==================== KOLEJNOŚĆ ====================

    def reorder_thoughts(self, start_index: int, end_index: int) -> bool:
        """Przesuń wpis w liście (tylko lokalnie, nie jest zapisywane)"""
        def move(state):
            size = len(state.thoughts)
            if not (0 <= start_index < size and 0 <= end_index < size):
                return False
            thought = state.thoughts.pop(start_index)
            state.thoughts.insert(end_index, thought)
            return True

        return self.state_store.update(move)
