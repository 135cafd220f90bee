"""
App State - jedyny agregat stanu aplikacji i jego kanał mutacji.

Każda zmiana AppState przechodzi przez AppStateStore.update(mutator):
mutacje są serializowane jednym zamkiem, a po każdej emitowana jest
głęboka kopia stanu (sygnał state_changed).
"""
import copy
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar
from PyQt6.QtCore import QObject, pyqtSignal
from loguru import logger

from ..Modules.Thoughts_module.thoughts_models import Thought


DEFAULT_THEME = "animated-gradient"

T = TypeVar("T")


@dataclass
class AppState:
    """Stan aplikacji (jedna instancja na działającego klienta)"""
    sessions_completed: int = 0
    thoughts: List[Thought] = field(default_factory=list)
    theme: str = DEFAULT_THEME
    total_focus_time: int = 0       # MINUTY
    streak: int = 0
    is_loading: bool = False

    def find_index(self, thought_id: str) -> int:
        """Indeks myśli o danym id lub -1"""
        for index, thought in enumerate(self.thoughts):
            if thought.id == thought_id:
                return index
        return -1

    def to_snapshot(self) -> Dict[str, Any]:
        """Snapshot do lokalnego zapisu (bez is_loading)"""
        return {
            'sessionsCompleted': self.sessions_completed,
            'thoughts': [thought.to_dict() for thought in self.thoughts],
            'theme': self.theme,
            'totalFocusTime': self.total_focus_time,
            'streak': self.streak,
        }

    @classmethod
    def from_snapshot(cls, data: Any, default_theme: str = DEFAULT_THEME) -> 'AppState':
        """
        Odtwórz stan ze snapshotu - nigdy nie zgłasza wyjątku.

        Niepoprawne pola są zastępowane wartościami domyślnymi,
        niepoprawne wpisy myśli są pomijane.
        """
        state = cls(theme=default_theme)
        if not isinstance(data, dict):
            return state

        state.sessions_completed = _non_negative_int(data.get('sessionsCompleted'))
        state.total_focus_time = _non_negative_int(data.get('totalFocusTime'))
        state.streak = _non_negative_int(data.get('streak'))
        theme = data.get('theme')
        if isinstance(theme, str) and theme:
            state.theme = theme

        raw_thoughts = data.get('thoughts')
        if isinstance(raw_thoughts, list):
            for raw in raw_thoughts:
                if not isinstance(raw, dict):
                    continue
                try:
                    state.thoughts.append(Thought.from_dict(raw))
                except Exception as e:
                    logger.warning(f"[STORAGE] Skipping malformed thought in snapshot: {e}")
        return state


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class AppStateStore(QObject):
    """
    Kanał mutacji AppState (single writer).

    Signals:
        state_changed(AppState): kopia stanu po każdej mutacji
    """

    state_changed = pyqtSignal(object)

    def __init__(self, initial: Optional[AppState] = None, parent=None):
        super().__init__(parent)
        self._state = initial or AppState()
        self._lock = threading.RLock()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Licznik resetów stanu (clear all / sign out)"""
        return self._generation

    def snapshot(self) -> AppState:
        """Głęboka kopia aktualnego stanu"""
        with self._lock:
            return copy.deepcopy(self._state)

    def read(self, reader: Callable[[AppState], T]) -> T:
        """Odczyt pod zamkiem (bez kopiowania całego stanu)"""
        with self._lock:
            return reader(self._state)

    def update(self, mutator: Callable[[AppState], T]) -> T:
        """
        Zmień stan pod zamkiem i wyemituj state_changed.

        Args:
            mutator: Funkcja modyfikująca stan w miejscu

        Returns:
            Wynik mutatora
        """
        with self._lock:
            result = mutator(self._state)
            self.state_changed.emit(copy.deepcopy(self._state))
            return result

    def reset(self, state: Optional[AppState] = None) -> None:
        """Przywróć stan domyślny (lub podany) i zwiększ generation"""
        with self._lock:
            self._state = state or AppState()
            self._generation += 1
            self.state_changed.emit(copy.deepcopy(self._state))
        logger.info("[APP] State reset")
