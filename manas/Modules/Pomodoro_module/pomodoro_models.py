"""
Pomodoro Models - Modele danych sesji Pomodoro
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ...core.errors import ValidationError
from ...utils.time_utils import parse_datetime_field, to_iso


class PomodoroMode(Enum):
    """Tryby timera (wartości zgodne z API)"""
    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self is not PomodoroMode.FOCUS

    @classmethod
    def coerce(cls, value: Any) -> 'PomodoroMode':
        """
        Zamień wartość z API/UI na PomodoroMode.

        Raises:
            ValidationError: nieznany tryb
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise ValidationError(f"Invalid mode: {value}") from e


# Domyślne czasy trwania (MINUTY)
DEFAULT_DURATIONS: Dict[PomodoroMode, int] = {
    PomodoroMode.FOCUS: 25,
    PomodoroMode.SHORT_BREAK: 5,
    PomodoroMode.LONG_BREAK: 15,
}

# Limit czasu sesji przyjmowany przez API (minuty)
MAX_SESSION_MINUTES = 300


@dataclass(frozen=True)
class PomodoroSessionRecord:
    """
    Rekord zakończonej sesji - wysyłany do API (fire-and-forget).

    Tworzony dokładnie raz przy naturalnym zakończeniu odliczania,
    niezmienny po utworzeniu.

    JEDNOSTKI:
    - duration_minutes: MINUTY (zaokrąglone w dół)
    - paused_duration_ms: MILISEKUNDY
    """
    mode: PomodoroMode
    duration_minutes: int
    start_time: datetime
    end_time: Optional[datetime] = None
    completed: bool = True
    paused_duration_ms: int = 0
    thoughts_captured: int = 0

    def validate(self) -> None:
        """
        Walidacja przed wysłaniem (te same reguły co po stronie serwera).

        Raises:
            ValidationError: niepoprawny rekord
        """
        if not isinstance(self.mode, PomodoroMode):
            raise ValidationError(f"Invalid mode: {self.mode}")
        if not 1 <= self.duration_minutes <= MAX_SESSION_MINUTES:
            raise ValidationError(
                f"Duration must be between 1 and {MAX_SESSION_MINUTES} minutes"
            )
        if self.start_time is None:
            raise ValidationError("Start time is required")
        if self.paused_duration_ms < 0 or self.thoughts_captured < 0:
            raise ValidationError("Counters must not be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Format API (camelCase)"""
        return {
            'mode': self.mode.value,
            'duration': self.duration_minutes,
            'completed': self.completed,
            'startTime': to_iso(self.start_time),
            'endTime': to_iso(self.end_time),
            'pausedDuration': self.paused_duration_ms,
            'thoughtsCaptured': self.thoughts_captured,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PomodoroSessionRecord':
        return cls(
            mode=PomodoroMode.coerce(data.get('mode')),
            duration_minutes=int(data.get('duration', 0)),
            start_time=parse_datetime_field(data.get('startTime')),
            end_time=parse_datetime_field(data.get('endTime')),
            completed=bool(data.get('completed', True)),
            paused_duration_ms=int(data.get('pausedDuration', 0)),
            thoughts_captured=int(data.get('thoughtsCaptured', 0)),
        )
