"""
Pomodoro Ticker - QTimer wywołujący PomodoroTimer.tick() co sekundę
"""
from PyQt6.QtCore import QObject, QTimer, pyqtSignal
from loguru import logger

from .pomodoro_logic import PomodoroTimer


class PomodoroTicker(QObject):
    """Zegar Qt dla maszyny stanów timera"""

    # Sygnał: pozostały czas w sekundach (po każdym ticku)
    ticked = pyqtSignal(int)

    def __init__(self, timer: PomodoroTimer, interval_ms: int = 1000, parent=None):
        super().__init__(parent)
        self.timer = timer
        self._qtimer = QTimer(self)
        self._qtimer.setInterval(interval_ms)
        self._qtimer.timeout.connect(self._on_timer_tick)

    def start(self):
        self._qtimer.start()
        logger.debug("[POMODORO] Ticker started")

    def stop(self):
        self._qtimer.stop()
        logger.debug("[POMODORO] Ticker stopped")

    def is_running(self) -> bool:
        return self._qtimer.isActive()

    def _on_timer_tick(self):
        if self.timer.tick():
            self.ticked.emit(self.timer.time_remaining)
