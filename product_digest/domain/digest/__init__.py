"""Digest domain models and rendering"""
from .models import DigestItem, DigestRunResult, DigestSnapshot, SchedulerState
from .render import (
    DIGEST_TITLE,
    NO_RELEASES_TEXT,
    NO_UPCOMING_TEXT,
    format_digest_message,
)

__all__ = [
    "DigestItem",
    "DigestRunResult",
    "DigestSnapshot",
    "SchedulerState",
    "DIGEST_TITLE",
    "NO_RELEASES_TEXT",
    "NO_UPCOMING_TEXT",
    "format_digest_message",
]
