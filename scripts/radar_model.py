# scripts/radar_model.py
#
# Shared record types and time helpers for the pipeline and the client view.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

JST = timezone(timedelta(hours=9), "JST")

# ---------------- Tabs ----------------
ICT       = "ICT"
INFO1     = "INFO1"
EXAM      = "EXAM"
AI_EDU    = "AI_EDU"
AI_LATEST = "AI_LATEST"
MEXT      = "MEXT"

CATEGORIES = (ICT, INFO1, EXAM, AI_EDU, AI_LATEST, MEXT)

# pseudo-tabs, client only
TODAY     = "TODAY"
BOOKMARKS = "BOOKMARKS"
CLIPS     = "X"

# ---------------- Result ----------------
@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Outcome of a parse at a boundary: a value, or the reason there is none."""
    value: Optional[T] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

    def or_else(self, fallback: T) -> T:
        return self.value if self.ok and self.value is not None else fallback

def success(value: T) -> Parsed[T]:
    return Parsed(value=value)

def failure(error: str) -> Parsed[Any]:
    return Parsed(error=error or "unknown error")

# ---------------- Time ----------------
def jst_now() -> datetime:
    return datetime.now(JST).replace(microsecond=0)

def iso_jst(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(JST).replace(microsecond=0).isoformat()

def parse_ts(raw: Any) -> Parsed[datetime]:
    """ISO-8601 first, then RFC-822; naive results are taken as UTC."""
    if isinstance(raw, datetime):
        return success(raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc))
    s = str(raw or "").strip()
    if not s:
        return failure("empty timestamp")
    try:
        dt = datetime.fromisoformat(s[:-1] + "+00:00" if s.endswith("Z") else s)
        return success(dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc))
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(s)
    except (TypeError, ValueError, IndexError) as e:
        return failure(f"unparseable timestamp {s!r}: {e}")
    if dt is None:
        return failure(f"unparseable timestamp {s!r}")
    return success(dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc))

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def ts_or_epoch(raw: Any) -> datetime:
    return parse_ts(raw).or_else(EPOCH)

def days_since(raw: Any, now: datetime) -> float:
    """Age in days; an unparseable timestamp counts as infinitely old."""
    p = parse_ts(raw)
    if not p.ok:
        return float("inf")
    return (now - p.value).total_seconds() / 86400.0

# ---------------- Records ----------------
@dataclass
class ProvisionalRecord:
    title: str
    url: str
    source: str
    published_at: str

@dataclass
class Item:
    id: str
    title: str
    url: str
    source: str
    published_at: str
    tab: str
    tags: List[str] = field(default_factory=list)
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "publishedAt": self.published_at,
            "tab": self.tab,
            "tags": list(self.tags),
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Item":
        tags = d.get("tags")
        try:
            score = int(d.get("score") or 0)
        except (TypeError, ValueError):
            score = 0
        return cls(
            id=str(d.get("id") or ""),
            title=str(d.get("title") or ""),
            url=str(d.get("url") or ""),
            source=str(d.get("source") or ""),
            published_at=str(d.get("publishedAt") or ""),
            tab=str(d.get("tab") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            score=score,
        )
