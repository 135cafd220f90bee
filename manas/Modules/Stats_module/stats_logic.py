"""
Stats Logic - statystyki użytkownika
========================================================
- calculate_streak: kolejne dni z ukończoną sesją focus
- peak_productivity_hour: najczęstsza godzina sesji focus
- UserStats: odpowiedź GET /api/user/stats
- FocusHistory: lokalna historia dla trybu gościa
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Set

from ..Pomodoro_module.pomodoro_models import PomodoroMode, PomodoroSessionRecord


DEFAULT_PEAK_HOUR = 10


def calculate_streak(days: Iterable[date], today: Optional[date] = None) -> int:
    """
    Liczba kolejnych dni z sesją focus, licząc wstecz od dziś.

    Brak sesji dzisiaj nie przerywa serii, jeśli jest sesja wczoraj.

    Args:
        days: Dni z co najmniej jedną ukończoną sesją focus
        today: Dzisiejsza data (domyślnie date.today())

    Returns:
        Długość serii (0 gdy brak sesji dziś i wczoraj)
    """
    today = today or date.today()
    distinct: Set[date] = set(days)

    if today in distinct:
        current = today
    elif today - timedelta(days=1) in distinct:
        current = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while current in distinct:
        streak += 1
        current -= timedelta(days=1)
    return streak


def hour_histogram(timestamps: Iterable[datetime]) -> Dict[int, int]:
    """Histogram godzin rozpoczęcia sesji"""
    return dict(Counter(ts.hour for ts in timestamps))


def peak_productivity_hour(hour_counts: Dict[int, int]) -> int:
    """
    Godzina z największą liczbą sesji (przy remisie najwcześniejsza).

    Returns:
        Godzina 0-23, domyślnie 10 gdy brak danych
    """
    peak_hour = DEFAULT_PEAK_HOUR
    max_count = 0
    for hour in sorted(hour_counts):
        if hour_counts[hour] > max_count:
            max_count = hour_counts[hour]
            peak_hour = hour
    return peak_hour


@dataclass
class UserStats:
    """Zagregowane statystyki (wszystkie pola opcjonalne)"""
    sessions_completed: Optional[int] = None
    total_focus_time: Optional[int] = None       # MINUTY
    streak: Optional[int] = None
    today_sessions: Optional[int] = None
    week_sessions: Optional[int] = None
    month_sessions: Optional[int] = None
    total_thoughts: Optional[int] = None
    active_thoughts: Optional[int] = None
    peak_hour: Optional[int] = None

    _FIELDS = {
        'sessionsCompleted': 'sessions_completed',
        'totalFocusTime': 'total_focus_time',
        'streak': 'streak',
        'todaySessions': 'today_sessions',
        'weekSessions': 'week_sessions',
        'monthSessions': 'month_sessions',
        'totalThoughts': 'total_thoughts',
        'activeThoughts': 'active_thoughts',
        'peakHour': 'peak_hour',
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserStats':
        values = {}
        for key, attr in cls._FIELDS.items():
            value = data.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                values[attr] = int(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            key: getattr(self, attr)
            for key, attr in self._FIELDS.items()
            if getattr(self, attr) is not None
        }


@dataclass
class FocusHistory:
    """
    Lokalna historia sesji focus (tylko tryb gościa).

    Pozwala policzyć streak, peak hour i łączny czas bez serwera.
    """
    focus_days: Set[date] = field(default_factory=set)
    hour_counts: Dict[int, int] = field(default_factory=dict)
    total_focus_time: int = 0       # MINUTY
    sessions_completed: int = 0

    def add(self, record: PomodoroSessionRecord) -> bool:
        """
        Dodaj ukończoną sesję focus.

        Returns:
            False jeśli rekord nie dotyczy historii (przerwa / nieukończona)
        """
        if record.mode != PomodoroMode.FOCUS or not record.completed:
            return False
        local_start = record.start_time.astimezone()
        self.focus_days.add(local_start.date())
        self.hour_counts[local_start.hour] = self.hour_counts.get(local_start.hour, 0) + 1
        self.total_focus_time += record.duration_minutes
        self.sessions_completed += 1
        return True

    def to_stats(self, today: Optional[date] = None) -> UserStats:
        return UserStats(
            sessions_completed=self.sessions_completed,
            total_focus_time=self.total_focus_time,
            streak=calculate_streak(self.focus_days, today),
            peak_hour=peak_productivity_hour(self.hour_counts),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'focusDays': sorted(day.isoformat() for day in self.focus_days),
            'hourCounts': {str(hour): count for hour, count in self.hour_counts.items()},
            'totalFocusTime': self.total_focus_time,
            'sessionsCompleted': self.sessions_completed,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'FocusHistory':
        """Odtwórz z lokalnego zapisu - niepoprawne dane dają pustą historię"""
        history = cls()
        if not isinstance(data, dict):
            return history
        try:
            history.focus_days = {date.fromisoformat(day) for day in data.get('focusDays', [])}
            history.hour_counts = {int(h): int(c) for h, c in (data.get('hourCounts') or {}).items()}
            history.total_focus_time = max(0, int(data.get('totalFocusTime', 0)))
            history.sessions_completed = max(0, int(data.get('sessionsCompleted', 0)))
        except (TypeError, ValueError, AttributeError):
            return cls()
        return history
