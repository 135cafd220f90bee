"""
Dispatcher - wykonywanie operacji sieciowych w tle.

Wywołujący nigdy nie czeka na odpowiedź serwera: zadanie trafia do
dispatchera, a wynik (lub wyjątek) wraca przez callback on_success / on_error.
Brak anulowania - raz wysłane zadanie zawsze dobiega końca.
"""
import threading
from typing import Any, Callable, List, Optional
from loguru import logger


Job = Callable[[], Any]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Dispatcher:
    """Bazowy dispatcher - definiuje kontrakt submit() i wspólne wykonanie zadania"""

    def submit(
        self,
        job: Job,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        name: str = "job",
    ) -> None:
        raise NotImplementedError

    def _execute(
        self,
        job: Job,
        on_success: Optional[SuccessCallback],
        on_error: Optional[ErrorCallback],
        name: str,
    ) -> None:
        """Uruchom zadanie i przekaż wynik do odpowiedniego callbacku"""
        try:
            result = job()
        except Exception as e:
            if on_error is None:
                logger.error(f"[DISPATCH] Job '{name}' failed: {e}")
                return
            try:
                on_error(e)
            except Exception:
                logger.exception(f"[DISPATCH] Error callback of '{name}' raised")
            return

        if on_success is None:
            return
        try:
            on_success(result)
        except Exception:
            logger.exception(f"[DISPATCH] Success callback of '{name}' raised")


class ImmediateDispatcher(Dispatcher):
    """Wykonuje zadanie od razu w wątku wywołującym"""

    def submit(self, job, on_success=None, on_error=None, name="job"):
        self._execute(job, on_success, on_error, name)


class ThreadDispatcher(Dispatcher):
    """
    Każde zadanie w osobnym wątku (daemon).

    Wątki są zapamiętywane, żeby przy zamykaniu aplikacji można było
    poczekać na zakończenie zadań w locie (wait_idle).
    """

    def __init__(self):
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()

    def submit(self, job, on_success=None, on_error=None, name="job"):
        thread = threading.Thread(
            target=self._execute,
            args=(job, on_success, on_error, name),
            name=f"manas-{name}",
            daemon=True,
        )
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        logger.debug(f"[DISPATCH] Job '{name}' started")

    def wait_idle(self, timeout: float = 5.0) -> bool:
        """
        Poczekaj na zakończenie wszystkich zadań.

        Returns:
            True jeśli wszystkie wątki zakończyły się przed timeoutem
        """
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout=timeout)
        return not any(t.is_alive() for t in threads)
