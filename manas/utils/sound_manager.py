"""
Sound Manager - dźwięki timera Pomodoro.

Serwis wstrzykiwany do PomodoroTimer (zamiast globalnego singletonu).
Cykl życia: initialize() -> enable()/disable().
W testach używany jest NullSoundManager.
"""
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional
from loguru import logger


class SoundEvent(Enum):
    """Zdarzenia timera, które mają przypisany dźwięk"""
    TIMER_START = "timer_start"
    TIMER_COMPLETE = "timer_complete"
    FOCUS_START = "focus_start"
    FOCUS_END = "focus_end"
    BREAK_START = "break_start"
    BREAK_END = "break_end"
    LONG_BREAK_START = "long_break_start"
    LONG_BREAK_END = "long_break_end"


class SoundManager:
    """
    Bazowy manager dźwięków.

    Podklasy implementują tylko _play(event) - reszta (stan włączenia,
    metody per zdarzenie) jest wspólna.
    """

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self._initialized = False

    # ==================== CYKL ŻYCIA ====================

    def initialize(self) -> bool:
        """
        Przygotuj backend audio.

        Returns:
            True jeśli dźwięk jest dostępny
        """
        self._initialized = True
        return True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def enable(self) -> None:
        self._enabled = True
        logger.debug("[SOUND] Enabled")

    def disable(self) -> None:
        self._enabled = False
        logger.debug("[SOUND] Disabled")

    def is_enabled(self) -> bool:
        return self._enabled

    # ==================== ODTWARZANIE ====================

    def play(self, event: SoundEvent) -> None:
        """Odtwórz dźwięk zdarzenia (jeśli włączony i zainicjalizowany)"""
        if not self._enabled:
            return
        if not self._initialized and not self.initialize():
            return
        try:
            self._play(event)
        except Exception as e:
            # Dźwięk nigdy nie może przerwać przejścia timera
            logger.warning(f"[SOUND] Failed to play {event.value}: {e}")

    def _play(self, event: SoundEvent) -> None:
        raise NotImplementedError

    def play_timer_start(self):
        self.play(SoundEvent.TIMER_START)

    def play_timer_complete(self):
        self.play(SoundEvent.TIMER_COMPLETE)

    def play_focus_start(self):
        self.play(SoundEvent.FOCUS_START)

    def play_focus_end(self):
        self.play(SoundEvent.FOCUS_END)

    def play_break_start(self):
        self.play(SoundEvent.BREAK_START)

    def play_break_end(self):
        self.play(SoundEvent.BREAK_END)

    def play_long_break_start(self):
        self.play(SoundEvent.LONG_BREAK_START)

    def play_long_break_end(self):
        self.play(SoundEvent.LONG_BREAK_END)


class NullSoundManager(SoundManager):
    """Brak dźwięku - zapamiętuje jedynie odtworzone zdarzenia"""

    def __init__(self, enabled: bool = True):
        super().__init__(enabled)
        self.played: List[SoundEvent] = []

    def _play(self, event: SoundEvent) -> None:
        self.played.append(event)


class QtSoundManager(SoundManager):
    """
    Odtwarzanie plików <zdarzenie>.wav z katalogu dźwięków
    przez QMediaPlayer + QAudioOutput.
    """

    def __init__(self, sounds_dir: Path, volume: float = 0.7, enabled: bool = True):
        super().__init__(enabled)
        self.sounds_dir = Path(sounds_dir)
        self.volume = volume
        self._player = None
        self._audio_output = None
        self._sources: Dict[SoundEvent, Path] = {}

    def initialize(self) -> bool:
        if self._initialized:
            return self._player is not None
        self._initialized = True

        try:
            from PyQt6.QtMultimedia import QMediaPlayer, QAudioOutput
        except ImportError as e:
            logger.warning(f"[SOUND] QtMultimedia unavailable, sound disabled: {e}")
            self._enabled = False
            return False

        self._player = QMediaPlayer()
        self._audio_output = QAudioOutput()
        self._player.setAudioOutput(self._audio_output)
        self._audio_output.setVolume(self.volume)

        for event in SoundEvent:
            path = self.sounds_dir / f"{event.value}.wav"
            if path.exists():
                self._sources[event] = path
        logger.info(f"[SOUND] Initialized with {len(self._sources)} sound files from {self.sounds_dir}")
        return True

    def _play(self, event: SoundEvent) -> None:
        if self._player is None:
            return
        path: Optional[Path] = self._sources.get(event)
        if path is None:
            logger.debug(f"[SOUND] No sound file for {event.value}")
            return

        from PyQt6.QtCore import QUrl

        self._player.setSource(QUrl.fromLocalFile(str(path)))
        self._player.play()
