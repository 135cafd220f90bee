"""
Hierarchia wyjątków aplikacji Manas.

Klient API zgłasza te wyjątki, a warstwy Thought Store / Sync Manager /
Session Recorder łapią je na swojej granicy - do UI nie trafia żaden wyjątek,
użytkownik widzi jedynie cofnięty lub zachowany stan.
"""
from typing import Optional


class ManasError(Exception):
    """Bazowy wyjątek aplikacji"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} status={self.status_code} message='{self.message}'>"


class ValidationError(ManasError):
    """Błąd po stronie klienta (400) - np. pusty tekst, zły zakres czasu"""


class AuthError(ManasError):
    """Brak tożsamości użytkownika (401)"""


class NotFoundError(ManasError):
    """Obiekt nie istnieje (404) - dla usuwania zwykle nieszkodliwe"""


class RemoteError(ManasError):
    """Błąd serwera (5xx) lub sieci - przejściowy"""


class StorageError(ManasError):
    """Błąd lokalnego zapisu - zawsze połykany (tryb gościa)"""
