"""
Moduł Thoughts - dziennik myśli
==================================================
"""

from .thoughts_models import (
    Thought,
    SessionMeta,
    validate_thought_text,
    validate_tags,
)

from .thoughts_store import ThoughtStore

__all__ = [
    'Thought',
    'SessionMeta',
    'validate_thought_text',
    'validate_tags',
    'ThoughtStore',
]
