# scripts/feed_parse.py
#
# Tolerant feed parsing: feedparser never raises on malformed markup, so a
# broken fragment just yields fewer entries or empty fields.

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List

import feedparser  # type: ignore

from radar_model import Parsed, parse_ts

# the text is already decoded; a stale declaration would make feedparser re-decode it
XML_DECL_ENCODING = re.compile(r"""^(\s*<\?xml[^>]*?)\s+encoding\s*=\s*["'][^"']*["']""", re.I)

@dataclass
class FeedEntry:
    title: str
    link: str
    published_raw: str
    description: str

def _text(entry, *keys: str) -> str:
    for k in keys:
        v = entry.get(k)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return ""

def parse_feed_items(text: str) -> List[FeedEntry]:
    if not text or not text.strip():
        return []
    doc = XML_DECL_ENCODING.sub(r"\1", text, count=1)
    parsed = feedparser.parse(doc.encode("utf-8"))
    out: List[FeedEntry] = []
    for e in parsed.entries:
        rec = FeedEntry(
            title=_text(e, "title"),
            link=_text(e, "link", "id"),
            published_raw=_text(e, "published", "updated"),
            description=_text(e, "summary", "description"),
        )
        if rec.title and rec.link:
            out.append(rec)
    return out

def parse_pub_date(raw: str) -> Parsed[datetime]:
    return parse_ts(raw)
