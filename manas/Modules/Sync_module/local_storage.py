"""
Local Storage - lokalny magazyn klucz-wartość dla trybu gościa.

Każdy klucz to osobny plik JSON w katalogu danych. Odczyt nigdy nie
zgłasza wyjątku (uszkodzone dane = stan domyślny), zapis jest
"best effort" - błędy są logowane i połykane.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional
from loguru import logger

from ...core.app_state import AppState, DEFAULT_THEME
from ...core.errors import StorageError


class LocalStateStorage:
    """Magazyn JSON (jeden plik na klucz)"""

    def __init__(self, data_dir: Path, storage_key: str = "manas_app_state_v1",
                 default_theme: str = DEFAULT_THEME):
        """
        Args:
            data_dir: Katalog danych użytkownika
            storage_key: Klucz snapshotu AppState
            default_theme: Motyw dla pustego stanu
        """
        self.data_dir = Path(data_dir)
        self.storage_key = storage_key
        self.default_theme = default_theme

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    # ==================== KLUCZ-WARTOŚĆ ====================

    def get_item(self, key: str) -> Optional[Any]:
        """
        Odczytaj wartość klucza.

        Returns:
            Zdekodowany JSON lub None (brak / uszkodzony plik)
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[STORAGE] Failed to read {key}: {e}")
            return None

    def set_item(self, key: str, value: Any) -> bool:
        """
        Zapisz wartość klucza (atomowo: plik tymczasowy + replace).

        Returns:
            True jeśli zapis się powiódł
        """
        try:
            self._write(key, value)
            return True
        except StorageError as e:
            logger.error(f"[STORAGE] {e.message}")
            return False

    def _write(self, key: str, value: Any) -> None:
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(value, ensure_ascii=False)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_name, self._path(key))
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    # ==================== SNAPSHOT STANU ====================

    def load(self) -> AppState:
        """Wczytaj snapshot AppState (nigdy nie zgłasza wyjątku)"""
        state = AppState.from_snapshot(self.get_item(self.storage_key), self.default_theme)
        logger.debug(f"[STORAGE] Loaded state with {len(state.thoughts)} thoughts")
        return state

    def save(self, state: AppState) -> None:
        """Zapisz snapshot AppState (best effort)"""
        self.set_item(self.storage_key, state.to_snapshot())
