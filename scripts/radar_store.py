# scripts/radar_store.py
#
# Client-side state that outlives the artifact: bookmarks (full item
# snapshots, never expire) and manual clips ({url, memo, ts}). Both sit on a
# plain key-value store holding JSON text. Unparseable stored state reads as
# an empty store; it is never surfaced as an error.

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union

from aggregate import atomic_write_json
from radar_model import Item, Parsed, failure, iso_jst, jst_now, success

BOOKMARKS_KEY = "itr.bookmarks.v1"   # {map: {id: snapshot}, order: [id, ...]}
CLIPS_KEY     = "itr.xclips.v1"      # [{url, memo, ts}, ...]

BOOKMARK_CAP = 500
CLIP_CAP     = 1000

# ---------------- Key-value collaborator ----------------
class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, text: str) -> None: ...

class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, text: str) -> None:
        self.data[key] = text

class JsonFileStore:
    """Key -> text map kept in one JSON file, rewritten atomically on every set."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)} if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, text: str) -> None:
        data = self._load()
        data[key] = text
        atomic_write_json(self.path, data)

def parse_state(raw: Optional[str]) -> Parsed[Any]:
    if raw is None:
        return failure("absent")
    try:
        return success(json.loads(raw))
    except ValueError as e:
        return failure(f"corrupt stored state: {e}")

# ---------------- Bookmarks ----------------
class BookmarkImportError(ValueError):
    """Import payload rejected; existing bookmarks are untouched."""

@dataclass
class BookmarkSet:
    map: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"map": self.map, "order": self.order}

def snapshot(item: Union[Item, Dict[str, Any]]) -> Dict[str, Any]:
    it = item if isinstance(item, Item) else Item.from_dict(item)
    return it.to_dict()

def _normalize_bookmarks(data: Any) -> BookmarkSet:
    """Make order and map agree: drop ids without a snapshot, repeated ids and orphan snapshots."""
    if not isinstance(data, dict):
        return BookmarkSet()
    raw_map = data.get("map") if isinstance(data.get("map"), dict) else {}
    raw_order = data.get("order") if isinstance(data.get("order"), list) else []
    order: List[str] = []
    seen = set()
    for bid in raw_order:
        if isinstance(bid, str) and bid not in seen and isinstance(raw_map.get(bid), dict):
            seen.add(bid)
            order.append(bid)
    return BookmarkSet({bid: raw_map[bid] for bid in order}, order)

class BookmarkStore:
    def __init__(self, kv: KeyValueStore, cap: int = BOOKMARK_CAP):
        self.kv = kv
        self.cap = cap

    def load(self) -> BookmarkSet:
        p = parse_state(self.kv.get(BOOKMARKS_KEY))
        return _normalize_bookmarks(p.value) if p.ok else BookmarkSet()

    def save(self, bm: BookmarkSet) -> None:
        self.kv.set(BOOKMARKS_KEY, json.dumps(bm.to_dict(), ensure_ascii=False))

    def _enforce_cap(self, bm: BookmarkSet) -> None:
        if len(bm.order) > self.cap:
            for bid in bm.order[self.cap:]:
                bm.map.pop(bid, None)
            bm.order = bm.order[:self.cap]

    def is_bookmarked(self, item_id: str) -> bool:
        return item_id in self.load().map

    def toggle(self, item: Union[Item, Dict[str, Any]]) -> bool:
        """Add or remove ``item``; returns True when it is bookmarked afterwards."""
        snap = snapshot(item)
        bid = snap["id"]
        if not bid:
            raise ValueError("cannot bookmark an item without an id")
        bm = self.load()
        if bid in bm.map:
            del bm.map[bid]
            bm.order = [x for x in bm.order if x != bid]
            added = False
        else:
            bm.map[bid] = snap
            bm.order.insert(0, bid)
            self._enforce_cap(bm)
            added = True
        self.save(bm)
        return added

    def items(self) -> List[Item]:
        bm = self.load()
        return [Item.from_dict(bm.map[bid]) for bid in bm.order]

    def export(self) -> str:
        return json.dumps(self.load().to_dict(), ensure_ascii=False, indent=2)

    def import_data(self, payload: Union[str, bytes, Dict[str, Any]]) -> int:
        """Merge foreign bookmarks in front of ours; returns how many were new."""
        data = payload
        if isinstance(payload, (str, bytes)):
            try:
                data = json.loads(payload)
            except ValueError as e:
                raise BookmarkImportError(f"not a bookmark export (invalid JSON: {e})") from e
        if not isinstance(data, dict) or not isinstance(data.get("map"), dict) or not isinstance(data.get("order"), list):
            raise BookmarkImportError("not a bookmark export (expected {map: {...}, order: [...]})")

        incoming = _normalize_bookmarks(data)
        bm = self.load()
        fresh = [bid for bid in incoming.order if bid not in bm.map]
        for bid in fresh:
            bm.map[bid] = snapshot({**incoming.map[bid], "id": bid})
        bm = _normalize_bookmarks({"map": bm.map, "order": fresh + bm.order})
        self._enforce_cap(bm)
        self.save(bm)
        return len([bid for bid in fresh if bid in bm.map])

# ---------------- Clips ----------------
@dataclass
class Clip:
    url: str
    memo: str = ""
    ts: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "memo": self.memo, "ts": self.ts}

class ClipStore:
    def __init__(self, kv: KeyValueStore, cap: int = CLIP_CAP):
        self.kv = kv
        self.cap = cap

    def entries(self) -> List[Clip]:
        p = parse_state(self.kv.get(CLIPS_KEY))
        if not p.ok or not isinstance(p.value, list):
            return []
        out = []
        for c in p.value:
            if isinstance(c, dict) and isinstance(c.get("url"), str) and c["url"].strip():
                out.append(Clip(c["url"], str(c.get("memo") or ""), str(c.get("ts") or "")))
        return out

    def _save(self, clips: List[Clip]) -> None:
        self.kv.set(CLIPS_KEY, json.dumps([c.to_dict() for c in clips], ensure_ascii=False))

    def add(self, url: str, memo: str = "", ts: Optional[str] = None) -> Clip:
        url = (url or "").strip()
        if not url:
            raise ValueError("clip url is required")
        clip = Clip(url, (memo or "").strip(), ts or iso_jst(jst_now()))
        clips = [clip] + self.entries()
        self._save(clips[:self.cap])
        return clip

    def remove(self, index: int) -> Optional[Clip]:
        clips = self.entries()
        if not 0 <= index < len(clips):
            return None
        removed = clips.pop(index)
        self._save(clips)
        return removed

# ---------------- Artifact (client side) ----------------
@dataclass
class ArtifactLoad:
    items: List[Item] = field(default_factory=list)
    generated_at: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

LOAD_FAILED_MESSAGE = "記事データを読み込めませんでした。時間をおいて再読み込みしてください。"

def parse_artifact(text: Optional[str]) -> ArtifactLoad:
    if text is None:
        return ArtifactLoad(error=LOAD_FAILED_MESSAGE)
    p = parse_state(text)
    if not p.ok or not isinstance(p.value, dict) or not isinstance(p.value.get("items"), list):
        return ArtifactLoad(error=LOAD_FAILED_MESSAGE)
    items = [Item.from_dict(d) for d in p.value["items"] if isinstance(d, dict)]
    return ArtifactLoad(items=[it for it in items if it.id], generated_at=str(p.value.get("generatedAt") or ""))

def load_artifact(path: str) -> ArtifactLoad:
    if not os.path.exists(path):
        return parse_artifact(None)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return parse_artifact(f.read())
    except (OSError, UnicodeDecodeError):
        return parse_artifact(None)
