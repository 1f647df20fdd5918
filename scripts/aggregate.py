# scripts/aggregate.py
#
# Provisional records -> the artifact's item list.
#   1) canonicalize url, classify, score each record
#   2) merge records sharing a canonical url (longest title, earliest
#      publishedAt, tag union in first-seen order, max score, first source)
#   3) drop anything older than the retention window
#   4) sort score desc, then publishedAt desc
#   5) cap
# Pure: no I/O, no clock reads beyond the ``now`` it is handed.

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from classifier import classify
from radar_config import DAYS_KEEP, MAX_ITEMS, RETENTION_EPSILON_DAYS
from radar_model import Item, ProvisionalRecord, days_since, iso_jst, jst_now, ts_or_epoch
from scorer import score
from url_canon import item_id, normalize_url

def to_item(rec: ProvisionalRecord, now: datetime, weights: Optional[Dict] = None) -> Optional[Item]:
    url = normalize_url(rec.url or "").strip()
    title = (rec.title or "").strip()
    if not url or not title:
        return None
    source = rec.source or "—"
    cls = classify(title, url, source)
    it = Item(
        id=item_id(url),
        title=title,
        url=url,
        source=source,
        published_at=rec.published_at or iso_jst(now),
        tab=cls.tab,
        tags=list(cls.tags),
    )
    it.score = score(it, now=now, weights=weights)
    return it

def merge_items(base: Item, new: Item) -> Item:
    title = new.title if len(new.title) > len(base.title) else base.title
    published = base.published_at
    if ts_or_epoch(new.published_at) < ts_or_epoch(base.published_at):
        published = new.published_at
    tags = list(base.tags)
    tags += [t for t in new.tags if t not in tags]
    return Item(
        id=base.id,
        title=title,
        url=base.url,
        source=base.source,
        published_at=published,
        tab=base.tab,
        tags=tags,
        score=max(base.score, new.score),
    )

def sort_key(it: Item):
    return (it.score, ts_or_epoch(it.published_at))

def aggregate(
    records: Iterable[ProvisionalRecord],
    retention_days: float = DAYS_KEEP,
    now: Optional[datetime] = None,
    cap: int = MAX_ITEMS,
    weights: Optional[Dict] = None,
) -> List[Item]:
    now = now or jst_now()
    merged: Dict[str, Item] = {}
    for rec in records:
        it = to_item(rec, now, weights)
        if it is None:
            continue
        prev = merged.get(it.id)
        merged[it.id] = it if prev is None else merge_items(prev, it)

    window = retention_days + RETENTION_EPSILON_DAYS
    items = [it for it in merged.values() if days_since(it.published_at, now) <= window]
    items.sort(key=sort_key, reverse=True)
    return items[:max(0, cap)]

# ---------------- Artifact ----------------
def build_artifact(items: List[Item], generated_at: Optional[datetime] = None, debug: Optional[dict] = None) -> dict:
    out = {
        "generatedAt": iso_jst(generated_at or jst_now()),
        "count": len(items),
        "items": [it.to_dict() for it in items],
    }
    if debug is not None:
        out["_debug"] = debug
    return out

def atomic_write_json(path: str, data: dict):
    dstdir = os.path.dirname(path) or "."
    os.makedirs(dstdir, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".items_", suffix=".json", dir=dstdir)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
