# scripts/radar_config.py
#
# Tunables, built-in sources and json5 config loading for the radar pipeline.
# Every knob can be overridden from the environment (ITR_*); scoring weights
# and the source list can be overridden from json5 files under config/.

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import json5

ROOT = Path(__file__).resolve().parent.parent

# ---------------- Tunables ----------------
DAYS_KEEP           = int(os.getenv("ITR_DAYS_KEEP", "7"))
MAX_ITEMS           = int(os.getenv("ITR_MAX_ITEMS", "800"))
HTTP_TIMEOUT_S      = float(os.getenv("ITR_HTTP_TIMEOUT", "12"))
MAX_LINKS_PER_PAGE  = int(os.getenv("ITR_MAX_LINKS_PER_PAGE", "60"))
MIN_LINK_TEXT       = int(os.getenv("ITR_MIN_LINK_TEXT", "8"))
WORKERS             = int(os.getenv("ITR_WORKERS", "8"))

# Slack on the retention check, in days (~86s of clock skew)
RETENTION_EPSILON_DAYS = 0.001

USER_AGENT = os.getenv(
    "ITR_UA",
    "Mozilla/5.0 (compatible; InfoTeacherRadar/2.1; +https://github.com/rixia6254/info-teacher-radar)",
)
ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

WEIGHTS_PATH = os.getenv("ITR_WEIGHTS_PATH", str(ROOT / "config" / "weights.json5"))
OUT_PATH     = os.getenv("ITR_OUT", str(ROOT / "data" / "items.json"))

VERSION = "radar-v2.1.0"

# ---------------- Sources ----------------
@dataclass(frozen=True)
class FeedSource:
    url: str
    source: str

@dataclass(frozen=True)
class QuerySource:
    query: str
    tab: str = ""   # informational only; classification never reads it

@dataclass(frozen=True)
class PageSource:
    url: str
    source: str = "文部科学省"

DEFAULT_FEEDS: List[FeedSource] = [
    FeedSource("https://ict-enews.net/?feed=rss2", "ICT教育ニュース"),
    FeedSource("https://rss.itmedia.co.jp/rss/2.0/aiplus.xml", "ITmedia AI+"),
    FeedSource("https://rss.itmedia.co.jp/rss/2.0/enterprise.xml", "ITmedia エンタープライズ"),
    FeedSource("https://rss.itmedia.co.jp/rss/2.0/news.xml", "ITmedia NEWS"),
]

DEFAULT_QUERIES: List[QuerySource] = [
    # ICT
    QuerySource("ICT教育 学校", "ICT"),
    QuerySource("教育ICT 最新", "ICT"),
    QuerySource("GIGAスクール 端末 更新", "ICT"),
    QuerySource("校務DX 学校", "ICT"),
    QuerySource("教育委員会 校務DX", "ICT"),
    QuerySource("LMS 学校 導入", "ICT"),
    # Info I (teaching)
    QuerySource("高校 情報I 授業 実践", "INFO1"),
    QuerySource("情報I 教材", "INFO1"),
    QuerySource("情報I プログラミング 授業", "INFO1"),
    QuerySource("情報I データ活用 授業", "INFO1"),
    QuerySource("情報I 情報デザイン 授業", "INFO1"),
    QuerySource("情報I 評価 ルーブリック", "INFO1"),
    # Exam
    QuerySource("共通テスト 情報I", "EXAM"),
    QuerySource("情報I 共通テスト 出題", "EXAM"),
    QuerySource("情報I 共通テスト 問題 解説", "EXAM"),
    # AI in education
    QuerySource("教育 生成AI 活用", "AI_EDU"),
    QuerySource("学校 生成AI ガイドライン", "AI_EDU"),
    QuerySource("校務 生成AI", "AI_EDU"),
    QuerySource("生成AI 教員 研修", "AI_EDU"),
    QuerySource("著作権 生成AI 教育", "AI_EDU"),
    QuerySource("個人情報 生成AI 学校", "AI_EDU"),
    # AI latest
    QuerySource("生成AI 新機能", "AI_LATEST"),
    QuerySource("AIツール 新サービス", "AI_LATEST"),
    QuerySource("LLM 新モデル", "AI_LATEST"),
    QuerySource("生成AI 画像 音声 ツール", "AI_LATEST"),
    QuerySource("AI エージェント ツール", "AI_LATEST"),
    QuerySource("生成AI 仕事術", "AI_LATEST"),
]

DEFAULT_PAGES: List[PageSource] = [
    PageSource("https://www.mext.go.jp/a_menu/whatsnew/index.htm"),
    PageSource("https://www.mext.go.jp/a_menu/shotou/zyouhou/1296907.htm"),
    PageSource("https://www.mext.go.jp/a_menu/shotou/zyouhou/index.htm"),
]

# ---------------- json5 loading ----------------
def load_weights(path: str = WEIGHTS_PATH) -> Tuple[dict, dict]:
    dbg = {"weights_loaded": False, "weights_keys": [], "weights_error": "", "path": path}
    data: dict = {}
    if not os.path.exists(path):
        dbg["weights_error"] = "missing"; return data, dbg
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json5.load(f)
        if not isinstance(data, dict):
            raise ValueError("top level must be an object")
        dbg["weights_loaded"] = True
        dbg["weights_keys"] = sorted(list(data.keys()))
    except Exception as e:
        data = {}
        dbg["weights_error"] = f"{type(e).__name__}: {e}"
    return data, dbg

def W(d: Dict[str, Any], path: str, default):
    cur = d
    for p in path.split("."):
        if not isinstance(cur, dict) or p not in cur: return default
        cur = cur[p]
    return cur

def load_sources(path: str | None = None) -> Tuple[List[FeedSource], List[QuerySource], List[PageSource]]:
    """Sources from a json5 override file; absent keys keep the built-in lists."""
    feeds, queries, pages = list(DEFAULT_FEEDS), list(DEFAULT_QUERIES), list(DEFAULT_PAGES)
    if not path:
        return feeds, queries, pages
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json5.load(f)
    except (OSError, ValueError) as e:
        print(f"[warn] sources file unreadable, using defaults: {path} :: {e}", file=sys.stderr)
        return feeds, queries, pages
    if not isinstance(data, dict):
        print(f"[warn] sources file is not an object, using defaults: {path}", file=sys.stderr)
        return feeds, queries, pages

    if isinstance(data.get("feeds"), list):
        feeds = [
            FeedSource(str(f["url"]), str(f.get("source") or f["url"]))
            for f in data["feeds"] if isinstance(f, dict) and f.get("url")
        ]
    if isinstance(data.get("queries"), list):
        queries = []
        for q in data["queries"]:
            if isinstance(q, str) and q.strip():
                queries.append(QuerySource(q.strip()))
            elif isinstance(q, dict) and q.get("q"):
                queries.append(QuerySource(str(q["q"]), str(q.get("tab") or "")))
    if isinstance(data.get("pages"), list):
        pages = []
        for p in data["pages"]:
            if isinstance(p, str) and p.strip():
                pages.append(PageSource(p.strip()))
            elif isinstance(p, dict) and p.get("url"):
                pages.append(PageSource(str(p["url"]), str(p.get("source") or "文部科学省")))
    return feeds, queries, pages
