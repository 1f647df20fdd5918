# scripts/collectors.py
#
# One collector per source kind (direct feed, search-query feed, listing page).
# A collector never raises: a failed fetch or parse is logged on stderr and the
# source contributes nothing. collect_all() fans out one task per source and
# joins them all before anything downstream sees a record.

from __future__ import annotations

import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Union
from urllib.parse import quote

from feed_parse import parse_feed_items, parse_pub_date
from link_harvest import harvest_links
from radar_config import FeedSource, QuerySource, PageSource, MAX_LINKS_PER_PAGE, WORKERS
from radar_http import FetchError, fetch_text
from radar_model import ProvisionalRecord, iso_jst, jst_now

Fetch = Callable[[str], str]
Source = Union[FeedSource, QuerySource, PageSource]

@dataclass
class CollectOutcome:
    name: str
    url: str
    ok: bool
    records: List[ProvisionalRecord] = field(default_factory=list)
    error: str = ""
    duration_ms: int = 0

def google_news_rss_url(query: str) -> str:
    return f"https://news.google.com/rss/search?q={quote(query, safe='')}&hl=ja&gl=JP&ceid=JP:ja"

def query_source_label(query: str) -> str:
    return f"Google News: {query}"

def describe(src: Source) -> tuple[str, str]:
    """(provenance label, url) for a source descriptor."""
    if isinstance(src, QuerySource):
        return query_source_label(src.query), google_news_rss_url(src.query)
    return src.source, src.url

def _feed_records(text: str, label: str, now: datetime) -> List[ProvisionalRecord]:
    fallback = iso_jst(now)
    out = []
    for e in parse_feed_items(text):
        pub = parse_pub_date(e.published_raw)
        out.append(ProvisionalRecord(
            title=e.title,
            url=e.link,
            source=label,
            published_at=iso_jst(pub.value) if pub.ok else fallback,
        ))
    return out

def _page_records(html: str, page_url: str, label: str, now: datetime) -> List[ProvisionalRecord]:
    collected_at = iso_jst(now)
    links = harvest_links(html, page_url)[:MAX_LINKS_PER_PAGE]
    return [ProvisionalRecord(title=l.title, url=l.url, source=label, published_at=collected_at) for l in links]

def collect(src: Source, fetch: Fetch = fetch_text, now: Optional[datetime] = None) -> CollectOutcome:
    now = now or jst_now()
    label, url = describe(src)
    kind = "page" if isinstance(src, PageSource) else "feed"
    t0 = time.monotonic()
    try:
        text = fetch(url)
        if kind == "page":
            records = _page_records(text, url, label, now)
        else:
            records = _feed_records(text, label, now)
    except FetchError as e:
        err = str(e)
    except Exception as e:
        err = f"parse error: {type(e).__name__}: {e}"
    else:
        return CollectOutcome(label, url, True, records, "", int((time.monotonic() - t0) * 1000))
    print(f"[warn] {kind} failed: {label} {url} :: {err}", file=sys.stderr)
    return CollectOutcome(label, url, False, [], err, int((time.monotonic() - t0) * 1000))

def collect_feed(src: FeedSource, fetch: Fetch = fetch_text, now: Optional[datetime] = None) -> List[ProvisionalRecord]:
    return collect(src, fetch, now).records

def collect_query_feed(src: QuerySource, fetch: Fetch = fetch_text, now: Optional[datetime] = None) -> List[ProvisionalRecord]:
    return collect(src, fetch, now).records

def collect_page(src: PageSource, fetch: Fetch = fetch_text, now: Optional[datetime] = None) -> List[ProvisionalRecord]:
    return collect(src, fetch, now).records

def collect_all(
    sources: Sequence[Source],
    fetch: Fetch = fetch_text,
    workers: int = WORKERS,
    now: Optional[datetime] = None,
) -> List[CollectOutcome]:
    """Outcomes in source order, returned only once every source has settled."""
    if not sources:
        return []
    now = now or jst_now()
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(sources)))) as pool:
        futures = [pool.submit(collect, src, fetch, now) for src in sources]
        return [f.result() for f in futures]

def flatten(outcomes: Sequence[CollectOutcome]) -> List[ProvisionalRecord]:
    out: List[ProvisionalRecord] = []
    for o in outcomes:
        out.extend(o.records)
    return out
