"""
Main entry point for Manas (console runner)

Uruchamia jedną sesję focus z timerem Qt; myśli podane w argumentach
są zapisywane do dziennika przed startem odliczania.
"""
import argparse
import sys

from PyQt6.QtCore import QCoreApplication
from loguru import logger

from manas.core.config import config, ensure_directories
from manas.core.identity import identity_from_config
from manas.core.app_context import ManasApp
from manas.Modules.Pomodoro_module.pomodoro_models import PomodoroMode
from manas.Modules.Pomodoro_module.pomodoro_ticker import PomodoroTicker
from manas.Modules.Pomodoro_module.pomodoro_utils import format_seconds_to_mmss


def setup_logging() -> None:
    """Configure application logging"""
    # Remove default logger
    logger.remove()

    # Add console logger
    logger.add(
        sys.stderr,
        format=config.LOG_FORMAT,
        level=config.LOG_LEVEL,
        colorize=True,
    )

    # Add file logger
    log_file = config.LOGS_DIR / "manas.log"
    logger.add(
        log_file,
        format=config.LOG_FORMAT,
        level=config.LOG_LEVEL,
        rotation=config.LOG_ROTATION,
        retention=config.LOG_RETENTION,
        encoding="utf-8",
    )

    logger.info(f"Starting {config.APP_NAME} v{config.APP_VERSION}")


def parse_args(argv):
    parser = argparse.ArgumentParser(prog="manas", description="Pomodoro timer + thought journal")
    parser.add_argument("thoughts", nargs="*", help="Thoughts to capture before the session starts")
    parser.add_argument("--minutes", type=int, default=None, help="Focus duration override (minutes)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main application entry point"""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        # Setup
        ensure_directories()
        setup_logging()

        qt_app = QCoreApplication(sys.argv)
        qt_app.setApplicationName(config.APP_NAME)
        qt_app.setApplicationVersion(config.APP_VERSION)

        app = ManasApp(config, identity=identity_from_config(config))
        app.start()
        # Preferencje i pierwsza synchronizacja przed startem odliczania
        app.dispatcher.wait_idle(config.API_TIMEOUT)
        qt_app.processEvents()

        for text in args.thoughts:
            app.capture_thought(text)
        if args.minutes is not None:
            app.timer.update_duration(PomodoroMode.FOCUS, args.minutes)

        ticker = PomodoroTicker(app.timer)
        ticker.ticked.connect(
            lambda remaining: logger.debug(f"[POMODORO] {format_seconds_to_mmss(remaining)}")
        )

        def on_mode_switch(mode):
            if mode.is_break:
                logger.info(f"[APP] Focus session finished, next: {mode.value}")
                ticker.stop()
                qt_app.quit()

        app.timer.on_mode_switch = on_mode_switch
        app.timer.start_stop()
        ticker.start()

        exit_code = qt_app.exec()
        app.shutdown()
        state = app.snapshot()
        logger.info(
            f"[APP] Sessions completed: {state.sessions_completed}, "
            f"streak: {state.streak}, thoughts: {len(state.thoughts)}"
        )
        return exit_code

    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
