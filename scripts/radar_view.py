# scripts/radar_view.py
#
# Client view-model. ViewState is immutable: every interaction returns a new
# state, and derive_view() recomputes the whole displayed view from
# (state, items, bookmarks, now). Item counts are bounded by the artifact
# cap, so nothing is cached or diffed.
#
# Filter order: base list by tab (digest / bookmarks / one tab within the
# window) -> active tag -> search text -> sort. The clips overlay (tab "X")
# bypasses the pipeline entirely and remembers the tab to return to.

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from radar_model import (
    Item, ICT, INFO1, EXAM, AI_EDU, AI_LATEST, MEXT, CATEGORIES,
    TODAY, BOOKMARKS, CLIPS, days_since, jst_now, parse_ts, ts_or_epoch,
)

SORT_SCORE = "score"
SORT_NEW   = "new"

DEFAULT_DAYS = 7
WINDOW_EPSILON_DAYS = 0.001

DIGEST_TABS = (ICT, INFO1, AI_LATEST, AI_EDU, MEXT, EXAM)
DIGEST_PER_TAB = 6
DIGEST_TOTAL = 20
DIGEST_WINDOW_DAYS = 7

TAG_FACETS = 16
FACET_WINDOW_DAYS = 7

TAB_LABELS: Dict[str, str] = {
    TODAY:     "今日のピックアップ",
    ICT:       "ICT教育",
    INFO1:     "高校情報Ⅰ（授業実践）",
    EXAM:      "共通テスト（情報Ⅰ）",
    AI_EDU:    "生成AI（教育・校務）",
    AI_LATEST: "生成AI（最新事情・AIツール）",
    MEXT:      "文科省（MEXT）",
    CLIPS:     "Xまとめ",
    BOOKMARKS: "★ ブックマーク",
}

VIEW_TITLES: Dict[str, str] = {
    **TAB_LABELS,
    BOOKMARKS: "★ ブックマーク（永久）",
    CLIPS:     "Xまとめ（手動クリップ）",
}

VIEW_SUBTITLES: Dict[str, str] = {
    BOOKMARKS: "ブックマークは7日を超えても残ります（端末内に保存）。",
    CLIPS:     "XのURLを手動でクリップして、後から見返すためのタブです。",
}
DEFAULT_SUBTITLE = "授業に効く情報を上に、自動で並べます。"

VALID_TABS = frozenset((*CATEGORIES, TODAY, BOOKMARKS, CLIPS))

# ---------------- State ----------------
@dataclass(frozen=True)
class ViewState:
    tab: str = TODAY
    tag: Optional[str] = None
    search: str = ""
    sort: str = SORT_SCORE
    days: int = DEFAULT_DAYS
    last_tab: str = TODAY   # where closing the clips overlay returns to

    @property
    def days_enabled(self) -> bool:
        return self.tab not in (BOOKMARKS, CLIPS)

    @property
    def clips_open(self) -> bool:
        return self.tab == CLIPS

def select_tab(state: ViewState, tab: str) -> ViewState:
    if tab not in VALID_TABS:
        raise ValueError(f"unknown tab: {tab!r}")
    if tab == CLIPS:
        return open_clips(state)
    return replace(state, tab=tab, tag=None, search="", sort=SORT_SCORE, days=DEFAULT_DAYS, last_tab=tab)

def open_clips(state: ViewState) -> ViewState:
    if state.tab == CLIPS:
        return state
    return replace(state, tab=CLIPS, last_tab=state.tab)

def close_clips(state: ViewState) -> ViewState:
    if state.tab != CLIPS:
        return state
    back = state.last_tab if state.last_tab != CLIPS else TODAY
    return replace(state, tab=back, last_tab=back)

def toggle_tag(state: ViewState, tag: str) -> ViewState:
    return replace(state, tag=None if state.tag == tag else tag)

def clear_tag(state: ViewState) -> ViewState:
    return replace(state, tag=None)

def set_search(state: ViewState, text: str) -> ViewState:
    return replace(state, search=text or "")

def set_sort(state: ViewState, sort: str) -> ViewState:
    if sort not in (SORT_SCORE, SORT_NEW):
        raise ValueError(f"unknown sort mode: {sort!r}")
    return replace(state, sort=sort)

def set_days(state: ViewState, days: int) -> ViewState:
    if not state.days_enabled:
        return state
    if days <= 0:
        raise ValueError(f"days must be positive: {days!r}")
    return replace(state, days=int(days))

# ---------------- Derivations ----------------
def within_days(item: Item, days: float, now: datetime) -> bool:
    return days_since(item.published_at, now) <= days + WINDOW_EPSILON_DAYS

def by_score(items: Sequence[Item]) -> List[Item]:
    return sorted(items, key=lambda x: (x.score, ts_or_epoch(x.published_at)), reverse=True)

def by_time(items: Sequence[Item]) -> List[Item]:
    return sorted(items, key=lambda x: ts_or_epoch(x.published_at), reverse=True)

def pick_today(items: Sequence[Item], now: datetime) -> List[Item]:
    """Top few per important tab, so one busy tab cannot crowd out the rest."""
    picked: List[Item] = []
    for tab in DIGEST_TABS:
        part = [x for x in items if x.tab == tab and within_days(x, DIGEST_WINDOW_DAYS, now)]
        picked.extend(sorted(part, key=lambda x: x.score, reverse=True)[:DIGEST_PER_TAB])
    uniq: Dict[str, Item] = {}
    for it in picked:
        uniq.setdefault(it.id, it)
    return sorted(uniq.values(), key=lambda x: x.score, reverse=True)[:DIGEST_TOTAL]

def base_items(state: ViewState, items: Sequence[Item], bookmarks: Sequence[Item], now: datetime) -> List[Item]:
    if state.tab == CLIPS:
        return []
    if state.tab == BOOKMARKS:
        return list(bookmarks)
    if state.tab == TODAY:
        return pick_today(items, now)
    return [x for x in items if x.tab == state.tab and within_days(x, state.days, now)]

def matches_search(item: Item, query: str) -> bool:
    text = " ".join([item.title or "", item.source or "", " ".join(item.tags), item.tab or ""]).lower()
    return query in text

def filter_items(state: ViewState, items: Sequence[Item], bookmarks: Sequence[Item], now: datetime) -> List[Item]:
    out = base_items(state, items, bookmarks, now)
    if state.tag:
        out = [x for x in out if state.tag in x.tags]
    q = state.search.strip().lower()
    if q:
        out = [x for x in out if matches_search(x, q)]
    return by_time(out) if state.sort == SORT_NEW else by_score(out)

def tag_facets(state: ViewState, items: Sequence[Item], now: datetime, limit: int = TAG_FACETS) -> List[Tuple[str, int]]:
    """Most frequent tags in the current tab (last 7 days), ignoring tag/search filters."""
    if state.tab in (BOOKMARKS, CLIPS):
        return []
    base = items if state.tab == TODAY else [x for x in items if x.tab == state.tab]
    counts: Counter = Counter()
    for it in base:
        if within_days(it, FACET_WINDOW_DAYS, now):
            counts.update(it.tags)
    # Counter.most_common keeps first-seen order among equal counts
    return counts.most_common(limit)

@dataclass(frozen=True)
class View:
    state: ViewState
    items: Tuple[Item, ...]
    tags: Tuple[Tuple[str, int], ...]
    title: str
    subtitle: str
    days_enabled: bool
    clips_open: bool

    @property
    def empty(self) -> bool:
        return not self.items

def derive_view(
    state: ViewState,
    items: Sequence[Item],
    bookmarks: Sequence[Item] = (),
    now: Optional[datetime] = None,
) -> View:
    now = now or jst_now()
    return View(
        state=state,
        items=tuple(filter_items(state, items, bookmarks, now)),
        tags=tuple(tag_facets(state, items, now)),
        title=VIEW_TITLES.get(state.tab, "一覧"),
        subtitle=VIEW_SUBTITLES.get(state.tab, DEFAULT_SUBTITLE),
        days_enabled=state.days_enabled,
        clips_open=state.clips_open,
    )

def format_date(iso: str) -> str:
    p = parse_ts(iso)
    return p.value.strftime("%Y/%m/%d") if p.ok else ""
