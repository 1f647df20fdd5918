# scripts/scorer.py
#
# Additive relevance score. Components (all >= 0):
#   - trusted source / regulator domain / ITmedia visibility bonuses
#   - per-tab weight (product priority: ICT highest, EXAM lowest)
#   - teaching-practice keyword in the title
#   - recency tier (<=1d, <=3d, <=7d)
# Every number can be overridden from weights.json5.

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from radar_config import W
from radar_model import Item, ICT, INFO1, EXAM, AI_EDU, AI_LATEST, MEXT, days_since, jst_now

DEFAULT_TAB_WEIGHTS = {ICT: 8, INFO1: 6, AI_LATEST: 4, AI_EDU: 3, MEXT: 2, EXAM: 1}

TEACH_KEYWORDS = ("授業", "教材", "指導案", "実践", "ワークシート", "評価", "ルーブリック")

def _pts(weights: Dict, path: str, default: int) -> int:
    try:
        v = int(W(weights, path, default))
    except (TypeError, ValueError):
        v = default
    return max(0, v)

def score(item: Item, now: Optional[datetime] = None, weights: Optional[Dict] = None) -> int:
    now = now or jst_now()
    weights = weights or {}
    total = 0

    if "ICT教育ニュース" in item.source:
        total += _pts(weights, "source.ict_enews", 20)
    if "mext.go.jp" in item.url:
        total += _pts(weights, "source.mext_domain", 10)
    if "itmedia.co.jp" in item.url or "itmedia" in item.source.lower():
        total += _pts(weights, "source.itmedia", 6)

    total += _pts(weights, f"tab.{item.tab}", DEFAULT_TAB_WEIGHTS.get(item.tab, 0))

    title = (item.title or "").lower()
    if any(k in title for k in TEACH_KEYWORDS):
        total += _pts(weights, "teaching.keyword", 5)

    age = days_since(item.published_at, now)
    if age <= 1:
        total += _pts(weights, "recency.day1", 6)
    elif age <= 3:
        total += _pts(weights, "recency.day3", 4)
    elif age <= 7:
        total += _pts(weights, "recency.day7", 2)

    return total
