"""
Preferences - ustawienia użytkownika (pydantic)

Zakresy zgodne z API:
- focusDuration: 1-120 min
- shortBreakDuration: 1-30 min
- longBreakDuration: 5-60 min
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ...core.errors import ValidationError


DEFAULT_THEME = "animated-gradient"


class Preferences(BaseModel):
    """Pełne preferencje użytkownika"""
    model_config = ConfigDict(populate_by_name=True)

    focus_duration: int = Field(default=25, ge=1, le=120, alias="focusDuration")
    short_break_duration: int = Field(default=5, ge=1, le=30, alias="shortBreakDuration")
    long_break_duration: int = Field(default=15, ge=5, le=60, alias="longBreakDuration")
    theme: str = DEFAULT_THEME
    notifications: bool = True

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def merged(self, update: 'PreferencesUpdate') -> 'Preferences':
        """Nowe preferencje z nałożoną częściową zmianą"""
        data = self.model_dump()
        data.update(update.model_dump(exclude_none=True))
        return Preferences.model_validate(data)


class PreferencesUpdate(BaseModel):
    """Częściowa zmiana preferencji (PUT /api/user/preferences)"""
    model_config = ConfigDict(populate_by_name=True)

    focus_duration: Optional[int] = Field(default=None, ge=1, le=120, alias="focusDuration")
    short_break_duration: Optional[int] = Field(default=None, ge=1, le=30, alias="shortBreakDuration")
    long_break_duration: Optional[int] = Field(default=None, ge=5, le=60, alias="longBreakDuration")
    theme: Optional[str] = None
    notifications: Optional[bool] = None

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def parse_preferences(data: Any) -> Preferences:
    """
    Zwaliduj preferencje z API / lokalnego zapisu.

    Raises:
        ValidationError: wartości poza zakresem
    """
    try:
        return Preferences.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid preferences: {e.errors()[0]['msg']}", status_code=400) from e


def parse_preferences_update(data: Any) -> PreferencesUpdate:
    """
    Zwaliduj częściową zmianę (słownik w formacie API lub nazwy pól Pythona).

    Raises:
        ValidationError: wartości poza zakresem
    """
    if isinstance(data, PreferencesUpdate):
        return data
    try:
        return PreferencesUpdate.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid preferences: {e.errors()[0]['msg']}", status_code=400) from e
