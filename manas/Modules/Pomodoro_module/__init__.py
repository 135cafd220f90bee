"""
Moduł Pomodoro - timer focus / przerwy
==================================================
"""

from .pomodoro_models import (
    PomodoroMode,
    PomodoroSessionRecord,
    DEFAULT_DURATIONS,
)

from .pomodoro_logic import (
    PomodoroTimer,
    TimerState,
)

from .pomodoro_ticker import PomodoroTicker

from .session_recorder import SessionRecorder

__all__ = [
    # Models
    'PomodoroMode',
    'PomodoroSessionRecord',
    'DEFAULT_DURATIONS',

    # Logic
    'PomodoroTimer',
    'TimerState',
    'PomodoroTicker',

    # Recording
    'SessionRecorder',
]
