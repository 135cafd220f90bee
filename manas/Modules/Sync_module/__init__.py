"""
Moduł Sync - lokalny zapis, klient API i synchronizacja stanu
==================================================
"""

from .local_storage import LocalStateStorage

from .api_client import ManasAPIClient

from .preferences import (
    Preferences,
    PreferencesUpdate,
)

from .backends import (
    StorageBackend,
    GuestBackend,
    RemoteBackend,
    SyncSnapshot,
    create_backend,
)

from .sync_manager import SyncManager, SyncStatus

__all__ = [
    # Storage
    'LocalStateStorage',

    # API Client
    'ManasAPIClient',

    # Preferences
    'Preferences',
    'PreferencesUpdate',

    # Backends
    'StorageBackend',
    'GuestBackend',
    'RemoteBackend',
    'SyncSnapshot',
    'create_backend',

    # Sync
    'SyncManager',
    'SyncStatus',
]
