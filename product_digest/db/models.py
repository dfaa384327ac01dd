"""Database models"""
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC now; all timestamps are stored as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SiteRegistry(Base):
    """Product site registry (reference data)"""
    __tablename__ = "website_registry"

    website_key = Column(String(100), primary_key=True)
    website_name = Column(String(200), nullable=False)
    primary_domain = Column(String(255), nullable=False)
    subdomains = Column(JSON, default=list)
    category = Column(String(100))
    status = Column(String(50), default="active")
    description = Column(Text)

    def to_dict(self) -> dict:
        return {
            "website_key": self.website_key,
            "website_name": self.website_name,
            "primary_domain": self.primary_domain,
            "subdomains": list(self.subdomains or []),
            "category": self.category,
            "status": self.status,
            "description": self.description,
        }


class WebsiteUpdate(Base):
    """Product update: planned or released"""
    __tablename__ = "website_updates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    website_key = Column(
        String(100), ForeignKey("website_registry.website_key"), nullable=False, index=True
    )
    title = Column(String(500), nullable=False)
    summary = Column(Text, nullable=False)
    details = Column(Text)
    update_type = Column(String(50), default="feature")  # feature / fix / announcement
    status = Column(String(20), default="planned", index=True)  # planned / released
    target_date = Column(Date, index=True)
    released_at = Column(DateTime, index=True)
    created_by = Column(String(255))
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "website_key": self.website_key,
            "title": self.title,
            "summary": self.summary,
            "details": self.details,
            "update_type": self.update_type,
            "status": self.status,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "released_at": self.released_at.isoformat() if self.released_at else None,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class PublishLog(Base):
    """Append-only publish audit log"""
    __tablename__ = "update_publish_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel = Column(String(100), nullable=False, index=True)
    post_type = Column(String(100), nullable=False, index=True)
    message_body = Column(Text)
    payload = Column(JSON)
    status = Column(String(20), nullable=False)  # success / failed
    error_message = Column(Text)
    published_at = Column(DateTime, default=utcnow, index=True)


class DigestRunClaim(Base):
    """One row per scheduled job per UTC day; the unique key is the duplicate-run guard"""
    __tablename__ = "digest_run_claims"
    __table_args__ = (UniqueConstraint("job", "date_key", name="uq_digest_run_claim"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    job = Column(String(100), nullable=False)
    date_key = Column(String(10), nullable=False)
    claimed_at = Column(DateTime, default=utcnow)
