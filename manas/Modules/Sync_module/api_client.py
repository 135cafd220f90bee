"""
API Client - komunikacja HTTP z serwerem Manas.

Tylko marshaling żądań i odpowiedzi, bez logiki biznesowej:
- Statystyki użytkownika
- Myśli (lista / tworzenie / aktualizacja / usuwanie / cleanup)
- Sesje Pomodoro
- Preferencje

Mapowanie statusów na wyjątki:
- 400 -> ValidationError
- 401 -> AuthError
- 404 -> NotFoundError
- inne błędy, błędy sieci, niepoprawny JSON -> RemoteError
"""
from typing import Any, Dict, List, Optional, Tuple
import requests
from loguru import logger

from ..Pomodoro_module.pomodoro_models import PomodoroMode, PomodoroSessionRecord
from ..Stats_module.stats_logic import UserStats
from ..Thoughts_module.thoughts_models import (
    SessionMeta,
    Thought,
    validate_tags,
    validate_thought_text,
)
from .preferences import Preferences, parse_preferences
from ...core.errors import AuthError, NotFoundError, RemoteError, ValidationError
from ...utils.time_utils import to_iso


class ManasAPIClient:
    """
    Klient REST API (/api/...).

    Jedna sesja requests z nagłówkami JSON i tokenem Bearer.
    """

    def __init__(self, base_url: str, access_token: Optional[str] = None, timeout: int = 10):
        """
        Args:
            base_url: URL serwera (np. "http://127.0.0.1:3000")
            access_token: Token dostępu (opcjonalnie)
            timeout: Timeout żądania w sekundach
        """
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.timeout = timeout
        self.session = requests.Session()

        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })
        if access_token:
            self.session.headers['Authorization'] = f'Bearer {access_token}'

        logger.info(f"[API] Client initialized with base_url: {self.base_url}")

    def close(self):
        self.session.close()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Wykonaj żądanie i zwróć zdekodowane ciało odpowiedzi.

        Raises:
            ValidationError, AuthError, NotFoundError, RemoteError
        """
        url = f"{self.base_url}{path}"
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"[API] Network error {method} {path}: {e}")
            raise RemoteError(f"Network error: {e}") from e

        return self._handle_response(response, method, path)

    def _handle_response(self, response: requests.Response, method: str, path: str) -> Any:
        status = response.status_code
        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None
            if 200 <= status < 300:
                logger.error(f"[API] Invalid JSON in response to {method} {path}")
                raise RemoteError("Invalid JSON response", status_code=status)

        if 200 <= status < 300:
            return data

        message = f"HTTP {status}"
        if isinstance(data, dict):
            message = data.get('error') or data.get('detail') or message

        logger.error(f"[API] HTTP Error {status} on {method} {path}: {message}")
        if status == 400:
            raise ValidationError(message, status_code=status)
        if status == 401:
            raise AuthError(message, status_code=status)
        if status == 404:
            raise NotFoundError(message, status_code=status)
        raise RemoteError(message, status_code=status)

    @staticmethod
    def _expect_dict(data: Any, what: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise RemoteError(f"Malformed {what} response")
        return data

    # =========================================================================
    # STATYSTYKI
    # =========================================================================

    def fetch_stats(self) -> UserStats:
        """GET /api/user/stats"""
        data = self._request('GET', '/api/user/stats')
        return UserStats.from_dict(self._expect_dict(data, "stats"))

    # =========================================================================
    # MYŚLI
    # =========================================================================

    def fetch_thoughts(self, page: int = 1, limit: int = 50) -> Tuple[List[Thought], Dict[str, Any]]:
        """
        GET /api/thoughts - lista bez wpisów soft-deleted.

        Returns:
            (lista myśli, paginacja {page, limit, total, pages})
        """
        data = self._expect_dict(
            self._request('GET', '/api/thoughts', params={'page': page, 'limit': limit}),
            "thoughts",
        )
        raw_thoughts = data.get('thoughts')
        if not isinstance(raw_thoughts, list):
            raise RemoteError("Malformed thoughts response")
        thoughts = []
        for item in raw_thoughts:
            try:
                thoughts.append(Thought.from_dict(item))
            except (ValidationError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"[API] Skipping malformed thought in response: {e}")
        return thoughts, data.get('pagination') or {}

    def create_thought(
        self,
        text: str,
        session: Optional[SessionMeta] = None,
        tags: Optional[List[str]] = None,
    ) -> Thought:
        """
        POST /api/thoughts

        Raises:
            ValidationError: pusty tekst, >1000 znaków, >10 tagów
        """
        payload: Dict[str, Any] = {'text': validate_thought_text(text)}
        if session is not None:
            payload['session'] = session.to_dict()
        if tags:
            payload['tags'] = validate_tags(tags)

        data = self._request('POST', '/api/thoughts', json=payload)
        return Thought.from_dict(self._expect_dict(data, "thought"))

    def update_thought(
        self,
        thought_id: str,
        text: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_completed: Optional[bool] = None,
        is_dealt_with: Optional[bool] = None,
    ) -> Thought:
        """
        PUT /api/thoughts/{id} - zmiana częściowa.

        Raises:
            NotFoundError: myśl nie istnieje lub jest usunięta
        """
        payload: Dict[str, Any] = {}
        if text is not None:
            payload['text'] = validate_thought_text(text)
        if tags is not None:
            payload['tags'] = validate_tags(tags)
        if is_completed is not None:
            payload['isCompleted'] = bool(is_completed)
        if is_dealt_with is not None:
            payload['isDealtWith'] = bool(is_dealt_with)

        data = self._request('PUT', f'/api/thoughts/{thought_id}', json=payload)
        return Thought.from_dict(self._expect_dict(data, "thought"))

    def delete_thought(self, thought_id: str) -> str:
        """
        DELETE /api/thoughts/{id}

        Returns:
            Komunikat serwera
        """
        data = self._request('DELETE', f'/api/thoughts/{thought_id}')
        if isinstance(data, dict):
            return str(data.get('message', ''))
        return ''

    def cleanup_thoughts(self) -> int:
        """
        POST /api/thoughts/cleanup - sprzątanie myśli bieżącego użytkownika.

        Returns:
            Liczba usuniętych myśli
        """
        data = self._expect_dict(self._request('POST', '/api/thoughts/cleanup'), "cleanup")
        return int(data.get('deletedCount', 0))

    def cleanup_all_thoughts(self, api_key: str) -> int:
        """
        DELETE /api/thoughts/cleanup - globalne sprzątanie (klucz x-api-key).

        Returns:
            Liczba usuniętych myśli
        """
        data = self._expect_dict(
            self._request('DELETE', '/api/thoughts/cleanup', headers={'x-api-key': api_key}),
            "cleanup",
        )
        return int(data.get('deletedCount', 0))

    # =========================================================================
    # SESJE
    # =========================================================================

    def create_session(self, record: PomodoroSessionRecord) -> Dict[str, Any]:
        """POST /api/sessions (rekord walidowany przed wysłaniem)"""
        record.validate()
        data = self._request('POST', '/api/sessions', json=record.to_dict())
        return self._expect_dict(data, "session")

    def list_sessions(
        self,
        page: int = 1,
        limit: int = 50,
        mode: Optional[PomodoroMode] = None,
        start_date=None,
        end_date=None,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        GET /api/sessions z filtrami.

        Returns:
            (lista sesji, paginacja)
        """
        params: Dict[str, Any] = {'page': page, 'limit': limit}
        if mode is not None:
            params['mode'] = PomodoroMode.coerce(mode).value
        if start_date is not None:
            params['startDate'] = to_iso(start_date)
        if end_date is not None:
            params['endDate'] = to_iso(end_date)

        data = self._expect_dict(self._request('GET', '/api/sessions', params=params), "sessions")
        sessions = data.get('sessions')
        if not isinstance(sessions, list):
            raise RemoteError("Malformed sessions response")
        return sessions, data.get('pagination') or {}

    # =========================================================================
    # PREFERENCJE
    # =========================================================================

    def get_preferences(self) -> Preferences:
        """GET /api/user/preferences"""
        data = self._request('GET', '/api/user/preferences')
        return parse_preferences(self._expect_dict(data, "preferences"))

    def set_preferences(self, preferences) -> Preferences:
        """
        PUT /api/user/preferences.

        Serwer uzupełnia brakujące pola wartościami domyślnymi, dlatego
        wysyłany jest zawsze komplet preferencji.
        """
        preferences = parse_preferences(preferences)
        data = self._request('PUT', '/api/user/preferences', json=preferences.to_api())
        return parse_preferences(self._expect_dict(data, "preferences"))

    # =========================================================================
    # HEALTH
    # =========================================================================

    def health_check(self) -> bool:
        """
        Sprawdź dostępność serwera.

        Returns:
            True jeśli serwer odpowiada 'healthy'
        """
        try:
            data = self._request('GET', '/api/health', timeout=5)
        except (RemoteError, AuthError, NotFoundError, ValidationError) as e:
            logger.warning(f"[API] Health check failed: {e}")
            return False
        return isinstance(data, dict) and data.get('status') == 'healthy'
