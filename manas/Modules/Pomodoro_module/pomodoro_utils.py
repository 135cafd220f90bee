"""
Pomodoro Utility Functions
===========================
Helper functions dla modułu Pomodoro.

JEDNOSTKI CZASU:
- TimerState.time_remaining / durations: SEKUNDY
- PomodoroSessionRecord.duration_minutes: MINUTY
- PomodoroSessionRecord.paused_duration_ms: MILISEKUNDY
"""
from datetime import datetime


def minutes_to_seconds(minutes: int) -> int:
    """
    Konwertuj minuty na sekundy.

    Example:
        >>> minutes_to_seconds(25)
        1500
    """
    return minutes * 60


def seconds_to_minutes(seconds: int) -> int:
    """
    Konwertuj sekundy na minuty (zaokrąglone w dół).

    Example:
        >>> seconds_to_minutes(1559)
        25
    """
    return seconds // 60


def format_seconds_to_mmss(seconds: int) -> str:
    """
    Formatuj sekundy do formatu MM:SS.

    Example:
        >>> format_seconds_to_mmss(1500)
        '25:00'
        >>> format_seconds_to_mmss(65)
        '01:05'
    """
    minutes = seconds // 60
    secs = seconds % 60
    return f"{minutes:02d}:{secs:02d}"


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Liczba milisekund pomiędzy dwoma znacznikami czasu (nigdy ujemna)"""
    delta = end - start
    return max(0, int(delta.total_seconds() * 1000))
