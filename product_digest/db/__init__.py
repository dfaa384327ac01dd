"""Database module"""
from .database import AsyncSessionLocal, get_db, init_db
from .models import Base, DigestRunClaim, PublishLog, SiteRegistry, WebsiteUpdate

__all__ = [
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "Base",
    "DigestRunClaim",
    "PublishLog",
    "SiteRegistry",
    "WebsiteUpdate",
]
