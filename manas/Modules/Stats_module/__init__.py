"""
Moduł Stats - streak, peak hour, statystyki użytkownika
"""
from .stats_logic import (
    calculate_streak,
    peak_productivity_hour,
    hour_histogram,
    UserStats,
    FocusHistory,
)

__all__ = [
    'calculate_streak',
    'peak_productivity_hour',
    'hour_histogram',
    'UserStats',
    'FocusHistory',
]
