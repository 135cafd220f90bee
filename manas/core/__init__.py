"""
Core Module - konfiguracja, wyjątki, dispatcher, tożsamość
"""
from .config import AppConfig, config, get_config, ensure_directories
from .errors import (
    ManasError,
    ValidationError,
    AuthError,
    NotFoundError,
    RemoteError,
    StorageError,
)
from .dispatcher import Dispatcher, ImmediateDispatcher, ThreadDispatcher
from .identity import UserIdentity, identity_from_config

__all__ = [
    # Config
    'AppConfig',
    'config',
    'get_config',
    'ensure_directories',

    # Errors
    'ManasError',
    'ValidationError',
    'AuthError',
    'NotFoundError',
    'RemoteError',
    'StorageError',

    # Dispatcher
    'Dispatcher',
    'ImmediateDispatcher',
    'ThreadDispatcher',

    # Identity
    'UserIdentity',
    'identity_from_config',
]
