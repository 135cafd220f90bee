"""
Moduły funkcjonalne: Pomodoro, Thoughts, Sync, Stats
"""
