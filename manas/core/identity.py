"""
Tożsamość zalogowanego użytkownika.

Wydawanie sesji/tokenów odbywa się poza aplikacją - tutaj tożsamość to tylko
nieprzezroczysty token (plus opcjonalne ID). Brak tożsamości = tryb gościa.
"""
from dataclasses import dataclass
from typing import Optional

from .config import AppConfig, get_config


@dataclass(frozen=True)
class UserIdentity:
    """Aktualny użytkownik (token dostępu do API)"""
    access_token: str
    user_id: Optional[str] = None

    def __repr__(self) -> str:
        # Token nie trafia do logów
        return f"<UserIdentity user_id={self.user_id!r}>"


def identity_from_config(app_config: Optional[AppConfig] = None) -> Optional[UserIdentity]:
    """
    Zbuduj tożsamość z konfiguracji (MANAS_ACCESS_TOKEN / MANAS_USER_ID).

    Returns:
        UserIdentity lub None (tryb gościa)
    """
    app_config = app_config or get_config()
    token = (app_config.ACCESS_TOKEN or "").strip()
    if not token:
        return None
    return UserIdentity(access_token=token, user_id=app_config.USER_ID)
