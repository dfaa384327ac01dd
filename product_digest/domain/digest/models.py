from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DigestItem:
    """One product update joined with its registry entry."""

    id: int
    website_key: str
    website_name: str
    primary_domain: str
    title: str
    summary: str
    update_type: str = "feature"
    released_at: Optional[datetime] = None  # naive UTC
    target_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "website_key": self.website_key,
            "website_name": self.website_name,
            "primary_domain": self.primary_domain,
            "title": self.title,
            "summary": self.summary,
            "update_type": self.update_type,
            "released_at": self.released_at.isoformat() if self.released_at else None,
            "target_date": self.target_date.isoformat() if self.target_date else None,
        }


@dataclass(frozen=True)
class DigestSnapshot:
    date_key: str  # YYYY-MM-DD, UTC
    released_today: Tuple[DigestItem, ...] = ()  # newest release first
    upcoming: Tuple[DigestItem, ...] = ()  # soonest target date first

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date_key": self.date_key,
            "released_today": [item.to_dict() for item in self.released_today],
            "upcoming": [item.to_dict() for item in self.upcoming],
        }


@dataclass
class SchedulerState:
    """In-memory marker of the last UTC date the scheduled digest ran."""

    last_run_date: Optional[str] = None


@dataclass
class DigestRunResult:
    skipped: bool
    reason: Optional[str] = None
    digest: Optional[DigestSnapshot] = None
    message: Optional[str] = None
    publish_result: Optional[Any] = field(default=None)  # PublishResult

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"skipped": self.skipped}
        if self.reason is not None:
            data["reason"] = self.reason
        if self.digest is not None:
            data["digest"] = self.digest.to_dict()
        if self.message is not None:
            data["message"] = self.message
        if self.publish_result is not None:
            data["publish_result"] = self.publish_result.to_dict()
        return data
