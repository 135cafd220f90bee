"""
Utilities Module
"""
from .sound_manager import SoundEvent, SoundManager, NullSoundManager, QtSoundManager
from .time_utils import utc_now, parse_datetime_field, to_iso

__all__ = [
    "SoundEvent", "SoundManager", "NullSoundManager", "QtSoundManager",
    "utc_now", "parse_datetime_field", "to_iso",
]
