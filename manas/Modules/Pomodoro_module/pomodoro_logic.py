"""
Pomodoro Logic - maszyna stanów timera
========================================================
Zarządza odliczaniem, przejściami między trybami
(focus → shortBreak/longBreak → focus) oraz generowaniem
rekordu zakończonej sesji.

Główne odpowiedzialności:
- Start / pauza z zachowaniem czasu rozpoczęcia i sumy pauz
- Tick co sekundę i przejście po dojściu do zera
- Ręczne przełączanie trybu, reset, zmiana czasu trwania
- Wywołanie callbacków (rekord sesji, licznik sesji focus)

Timer nie wie nic o sieci ani o AppState - komunikuje się
wyłącznie przez callbacki.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from loguru import logger

from .pomodoro_models import DEFAULT_DURATIONS, PomodoroMode, PomodoroSessionRecord
from .pomodoro_utils import elapsed_ms, minutes_to_seconds, seconds_to_minutes
from ...utils.sound_manager import NullSoundManager, SoundManager
from ...utils.time_utils import utc_now


def default_durations_seconds() -> Dict[PomodoroMode, int]:
    return {mode: minutes_to_seconds(minutes) for mode, minutes in DEFAULT_DURATIONS.items()}


@dataclass
class TimerState:
    """
    Stan timera.

    JEDNOSTKI:
    - time_remaining, durations: SEKUNDY
    - paused_accum_ms: MILISEKUNDY
    """
    mode: PomodoroMode = PomodoroMode.FOCUS
    time_remaining: int = 25 * 60
    is_active: bool = False
    durations: Dict[PomodoroMode, int] = field(default_factory=default_durations_seconds)
    session_start_time: Optional[datetime] = None
    paused_accum_ms: int = 0
    session_count: int = 0                      # ukończone sesje focus (dla long break)
    pause_started_at: Optional[datetime] = None

    def duration_for(self, mode: PomodoroMode) -> int:
        return self.durations[mode]


class PomodoroTimer:
    """
    Maszyna stanów timera Pomodoro

    Callbacki (opcjonalne, wyjątki w nich są logowane i nie przerywają przejścia):
    - on_session_complete(record): naturalne zakończenie sesji z ustawionym startem
    - on_focus_complete(): ukończona sesja focus (licznik sesji w AppState)
    - on_mode_switch(mode): zmiana trybu (ręczna lub automatyczna)
    """

    def __init__(
        self,
        durations: Optional[Dict[PomodoroMode, int]] = None,
        sound_manager: Optional[SoundManager] = None,
        long_break_interval: int = 4,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            durations: Czasy trwania trybów w MINUTACH (brakujące = domyślne)
            sound_manager: Serwis dźwięków (domyślnie bez dźwięku)
            long_break_interval: Co ile sesji focus długa przerwa
            clock: Źródło czasu (testy)
        """
        seconds = default_durations_seconds()
        for mode, minutes in (durations or {}).items():
            seconds[PomodoroMode.coerce(mode)] = minutes_to_seconds(minutes)

        self.state = TimerState(
            time_remaining=seconds[PomodoroMode.FOCUS],
            durations=seconds,
        )
        self.sound_manager = sound_manager or NullSoundManager(enabled=False)
        self.long_break_interval = long_break_interval
        self._clock = clock or utc_now

        self.on_session_complete: Optional[Callable[[PomodoroSessionRecord], None]] = None
        self.on_focus_complete: Optional[Callable[[], None]] = None
        self.on_mode_switch: Optional[Callable[[PomodoroMode], None]] = None

    # ==================== WŁAŚCIWOŚCI ====================

    @property
    def mode(self) -> PomodoroMode:
        return self.state.mode

    @property
    def time_remaining(self) -> int:
        return self.state.time_remaining

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def session_count(self) -> int:
        return self.state.session_count

    # ==================== STEROWANIE ====================

    def start_stop(self) -> bool:
        """
        Przełącz start/pauzę.

        Returns:
            Nowa wartość is_active
        """
        state = self.state
        now = self._clock()

        if state.is_active:
            state.is_active = False
            state.pause_started_at = now
            logger.debug(f"[POMODORO] Paused {state.mode.value} at {state.time_remaining}s")
            return False

        if state.session_start_time is None:
            state.session_start_time = now
        if state.pause_started_at is not None:
            state.paused_accum_ms += elapsed_ms(state.pause_started_at, now)
            state.pause_started_at = None

        state.is_active = True
        self.sound_manager.play_timer_start()
        logger.debug(f"[POMODORO] Started {state.mode.value} with {state.time_remaining}s left")
        return True

    def tick(self) -> bool:
        """
        Jeden krok odliczania (wywoływany co sekundę).

        Returns:
            True jeśli czas został zmniejszony
        """
        state = self.state
        if not state.is_active or state.time_remaining <= 0:
            return False

        state.time_remaining -= 1
        if state.time_remaining == 0:
            self._complete()
        return True

    def switch_mode(self, mode: Any) -> None:
        """Ręczna zmiana trybu - niezależnie od licznika sesji"""
        mode = PomodoroMode.coerce(mode)
        self._enter_mode(mode)
        logger.info(f"[POMODORO] Switched to {mode.value}")

    def reset_timer(self) -> None:
        """Reset bieżącego trybu - porzucona sesja NIE jest zapisywana"""
        state = self.state
        state.time_remaining = state.duration_for(state.mode)
        state.is_active = False
        self._clear_tracking()
        logger.debug(f"[POMODORO] Reset {state.mode.value}")

    def update_duration(self, mode: Any, minutes: int) -> None:
        """
        Ustaw czas trwania trybu (bez walidacji - robi to warstwa preferencji).

        Args:
            mode: Tryb
            minutes: Czas w minutach
        """
        mode = PomodoroMode.coerce(mode)
        state = self.state
        state.durations[mode] = minutes_to_seconds(minutes)

        if mode == state.mode:
            state.time_remaining = state.durations[mode]
            state.is_active = False
            self._clear_tracking()
        logger.debug(f"[POMODORO] Duration of {mode.value} set to {minutes} min")

    def apply_preferences(self, preferences: Any) -> None:
        """Zastosuj czasy z preferencji (focus_duration, short_break_duration, long_break_duration)"""
        values = {
            PomodoroMode.FOCUS: preferences.focus_duration,
            PomodoroMode.SHORT_BREAK: preferences.short_break_duration,
            PomodoroMode.LONG_BREAK: preferences.long_break_duration,
        }
        for mode, minutes in values.items():
            if minutes is None:
                continue
            if self.state.durations[mode] != minutes_to_seconds(minutes):
                self.update_duration(mode, minutes)

    # ==================== PRZEJŚCIA ====================

    def _complete(self) -> None:
        """Naturalne zakończenie odliczania"""
        state = self.state
        state.is_active = False
        finished = state.mode

        self._play_end_sound(finished)
        self.sound_manager.play_timer_complete()

        if state.session_start_time is not None:
            record = PomodoroSessionRecord(
                mode=finished,
                duration_minutes=seconds_to_minutes(state.duration_for(finished)),
                start_time=state.session_start_time,
                end_time=self._clock(),
                completed=True,
                paused_duration_ms=state.paused_accum_ms,
                thoughts_captured=0,
            )
            logger.info(f"[POMODORO] Session completed: {finished.value} ({record.duration_minutes} min)")
            self._notify(self.on_session_complete, record)

        if finished == PomodoroMode.FOCUS:
            state.session_count += 1
            self._notify(self.on_focus_complete)
            if state.session_count % self.long_break_interval == 0:
                next_mode = PomodoroMode.LONG_BREAK
            else:
                next_mode = PomodoroMode.SHORT_BREAK
        else:
            next_mode = PomodoroMode.FOCUS

        self._enter_mode(next_mode)

    def _enter_mode(self, mode: PomodoroMode) -> None:
        state = self.state
        state.mode = mode
        state.time_remaining = state.duration_for(mode)
        state.is_active = False
        self._clear_tracking()
        self._play_start_sound(mode)
        self._notify(self.on_mode_switch, mode)

    def _clear_tracking(self) -> None:
        state = self.state
        state.session_start_time = None
        state.paused_accum_ms = 0
        state.pause_started_at = None

    def _notify(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("[POMODORO] Callback raised during transition")

    def _play_start_sound(self, mode: PomodoroMode) -> None:
        if mode == PomodoroMode.FOCUS:
            self.sound_manager.play_focus_start()
        elif mode == PomodoroMode.SHORT_BREAK:
            self.sound_manager.play_break_start()
        else:
            self.sound_manager.play_long_break_start()

    def _play_end_sound(self, mode: PomodoroMode) -> None:
        if mode == PomodoroMode.FOCUS:
            self.sound_manager.play_focus_end()
        elif mode == PomodoroMode.SHORT_BREAK:
            self.sound_manager.play_break_end()
        else:
            self.sound_manager.play_long_break_end()
