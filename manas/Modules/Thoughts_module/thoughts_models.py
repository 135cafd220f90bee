"""
Thoughts Models - model wpisu dziennika myśli
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..Pomodoro_module.pomodoro_models import PomodoroMode
from ...core.errors import ValidationError
from ...utils.time_utils import parse_datetime_field, to_iso, utc_now


MAX_TEXT_LENGTH = 1000
MAX_TAGS = 10


def validate_thought_text(text: Any) -> str:
    """
    Waliduje i przycina tekst myśli.

    Returns:
        Tekst po trim()

    Raises:
        ValidationError: pusty tekst lub dłuższy niż 1000 znaków
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text is required", status_code=400)
    text = text.strip()
    if len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(f"Text must be {MAX_TEXT_LENGTH} characters or less", status_code=400)
    return text


def validate_tags(tags: Optional[List[str]]) -> List[str]:
    """Maksymalnie 10 tagów, każdy jako string"""
    if tags is None:
        return []
    if len(tags) > MAX_TAGS:
        raise ValidationError(f"Maximum {MAX_TAGS} tags allowed", status_code=400)
    return [str(tag) for tag in tags]


def new_client_id() -> str:
    """Tymczasowy identyfikator korelacji wpisu tymczasowego"""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SessionMeta:
    """Tryb timera i numer sesji w chwili zapisania myśli"""
    mode: PomodoroMode
    session_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {'mode': self.mode.value, 'sessionNumber': self.session_number}

    @classmethod
    def coerce(cls, value: Any) -> Optional['SessionMeta']:
        """
        SessionMeta, słownik z API lub None.

        Tryb jest opcjonalny po stronie serwera - słownik bez poprawnego
        trybu daje None (myśl bez metadanych sesji).
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, dict):
            try:
                mode = PomodoroMode.coerce(value.get('mode'))
            except ValidationError:
                return None
            return cls(mode=mode, session_number=int(value.get('sessionNumber') or 0))
        raise ValidationError(f"Invalid session meta: {value!r}")


@dataclass
class Thought:
    """
    Wpis dziennika myśli.

    Wpis bez id jest tymczasowy (provisional) - czeka na potwierdzenie
    z serwera; client_id pozwala dopasować odpowiedź do właściwego wpisu.
    """
    text: str
    timestamp: datetime = field(default_factory=utc_now)
    id: Optional[str] = None
    session: Optional[SessionMeta] = None
    tags: List[str] = field(default_factory=list)
    is_completed: bool = False
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    client_id: Optional[str] = None

    @property
    def is_provisional(self) -> bool:
        return not self.id

    def copy(self, **changes) -> 'Thought':
        changes.setdefault('tags', list(self.tags))
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Format API / snapshotu (camelCase)"""
        data: Dict[str, Any] = {
            'text': self.text,
            'timestamp': to_iso(self.timestamp),
            'tags': list(self.tags),
            'isCompleted': self.is_completed,
            'isDeleted': self.is_deleted,
        }
        if self.id:
            data['_id'] = self.id
        if self.session is not None:
            data['session'] = self.session.to_dict()
        if self.deleted_at is not None:
            data['deletedAt'] = to_iso(self.deleted_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Thought':
        """
        Utwórz z odpowiedzi API lub snapshotu.

        Akceptuje '_id' (API) i 'id'. Brak isCompleted = False.
        """
        return cls(
            text=str(data.get('text', '')),
            timestamp=parse_datetime_field(data.get('timestamp')) or utc_now(),
            id=data.get('_id') or data.get('id'),
            session=SessionMeta.coerce(data.get('session')),
            tags=list(data.get('tags') or []),
            is_completed=bool(data.get('isCompleted', False)),
            is_deleted=bool(data.get('isDeleted', False)),
            deleted_at=parse_datetime_field(data.get('deletedAt')),
        )
