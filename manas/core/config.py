"""
Application Configuration Module
"""
import sys
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Katalog bazowy zależny od sposobu uruchomienia (źródła lub spakowany exe)
if getattr(sys, "frozen", False):
    _BASE_DIR = Path(sys.executable).parent
else:
    _BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Lokalne dane użytkownika (tryb gościa, logi)
_DATA_DIR = Path.home() / ".manas"


class AppConfig(BaseSettings):
    """Application configuration settings"""

    model_config = SettingsConfigDict(
        env_prefix="MANAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Pozwól na dodatkowe pola z .env
    )

    # Application Info
    APP_NAME: str = "Manas"
    APP_VERSION: str = "0.1.0"

    # Paths
    BASE_DIR: Path = _BASE_DIR
    DATA_DIR: Path = _DATA_DIR
    LOGS_DIR: Path = _DATA_DIR / "logs"
    SOUNDS_DIR: Path = _BASE_DIR / "resources" / "sounds"

    # API (serwer z endpointami /api/...)
    API_BASE_URL: str = Field(
        default="http://127.0.0.1:3000",
        description="API base URL for server communication"
    )
    API_TIMEOUT: int = Field(default=10, description="HTTP timeout in seconds")

    # Tożsamość użytkownika - brak tokenu oznacza tryb gościa
    ACCESS_TOKEN: Optional[str] = None
    USER_ID: Optional[str] = None

    # Lokalne przechowywanie (tryb gościa)
    STORAGE_KEY: str = "manas_app_state_v1"
    PREFERENCES_STORAGE_KEY: str = "manas_preferences_v1"
    FOCUS_HISTORY_STORAGE_KEY: str = "manas_focus_history_v1"

    # Thoughts
    MAX_THOUGHTS: int = 200
    THOUGHTS_FETCH_LIMIT: int = 200

    # Pomodoro (minuty)
    FOCUS_DURATION: int = 25
    SHORT_BREAK_DURATION: int = 5
    LONG_BREAK_DURATION: int = 15
    LONG_BREAK_INTERVAL: int = 4

    # UI / System Settings
    DEFAULT_THEME: str = "animated-gradient"
    ENABLE_SOUND: bool = True
    SOUND_VOLUME: float = 0.7

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "1 month"


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get application configuration instance"""
    return config


def ensure_directories(app_config: Optional[AppConfig] = None) -> None:
    """Create necessary directories if they don't exist"""
    app_config = app_config or config
    directories = [
        app_config.DATA_DIR,
        app_config.LOGS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)
