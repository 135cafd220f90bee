"""
Time helpers - wspólne dla modułów Thoughts / Pomodoro / Stats.

Wszystkie znaczniki czasu w aplikacji są "aware" w strefie UTC.
"""
from datetime import datetime, timezone
from typing import Optional, Union
from loguru import logger


def utc_now() -> datetime:
    """Aktualny czas (UTC, aware)"""
    return datetime.now(timezone.utc)


def parse_datetime_field(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Uniwersalna funkcja do parsowania pól datetime.

    Args:
        value: String ISO (także z końcówką 'Z'), obiekt datetime lub None

    Returns:
        datetime (aware, UTC gdy brak strefy) lub None
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError as e:
            logger.warning(f"[TIME] Failed to parse datetime: {value}, error: {e}")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serializacja do ISO 8601 w formacie z 'Z' (jak zwraca serwer)"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
