#!/usr/bin/env python3
# scripts/fetch_radar.py
#
# Build data/items.json: collect every source (feeds, Google News queries,
# MEXT listing pages), dedupe by canonical url, classify, score, keep the
# last DAYS_KEEP days and cap at MAX_ITEMS.
#
# A source that fails is skipped with a warning. The run only fails (exit 1)
# when the artifact cannot be written.
#
# Usage:
#   python3 scripts/fetch_radar.py --out data/items.json
#   python3 scripts/fetch_radar.py --sources config/sources.json5 --days 7

from __future__ import annotations

import argparse
import sys
import time
from typing import Iterable, Optional

from aggregate import aggregate, atomic_write_json, build_artifact
from collectors import Fetch, collect_all, flatten
from radar_config import (
    DAYS_KEEP, MAX_ITEMS, OUT_PATH, VERSION, WEIGHTS_PATH, WORKERS,
    load_sources, load_weights,
)
from radar_http import fetch_text
from radar_model import jst_now

def build(
    out_path: str = OUT_PATH,
    days: float = DAYS_KEEP,
    sources_path: Optional[str] = None,
    weights_path: str = WEIGHTS_PATH,
    workers: int = WORKERS,
    fetch: Fetch = fetch_text,
) -> dict:
    start = time.time()
    weights, weights_debug = load_weights(weights_path)
    feeds, queries, pages = load_sources(sources_path)
    sources = [*feeds, *queries, *pages]

    print(f"[fetch] sources={len(sources)} feeds={len(feeds)} queries={len(queries)} pages={len(pages)}")
    now = jst_now()
    outcomes = collect_all(sources, fetch=fetch, workers=workers, now=now)
    collected = flatten(outcomes)
    items = aggregate(collected, retention_days=days, now=now, cap=MAX_ITEMS, weights=weights)

    failed = [o for o in outcomes if not o.ok]
    debug = {
        "sources_total": len(outcomes),
        "sources_failed": len(failed),
        "errors": [f"{o.name}: {o.error}" for o in failed],
        "collected": len(collected),
        "kept": len(items),
        "days_keep": days,
        "cap_items": MAX_ITEMS,
        "elapsed_sec": round(time.time() - start, 2),
        "weights_loaded": weights_debug.get("weights_loaded", False),
        "weights_error": weights_debug.get("weights_error") or None,
        "version": VERSION,
    }
    out = build_artifact(items, generated_at=jst_now(), debug=debug)
    atomic_write_json(out_path, out)
    return out

def main(argv: Optional[Iterable[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Build the radar items.json artifact")
    ap.add_argument("--out", default=OUT_PATH, help="Output JSON file")
    ap.add_argument("--days", type=float, default=DAYS_KEEP, help="Retention window in days")
    ap.add_argument("--sources", default=None, help="json5 file overriding the built-in sources")
    ap.add_argument("--weights", default=WEIGHTS_PATH, help="json5 scoring weights")
    ap.add_argument("--workers", type=int, default=WORKERS, help="Parallel source fetches")
    args = ap.parse_args(list(argv) if argv is not None else None)

    try:
        out = build(args.out, args.days, args.sources, args.weights, args.workers)
    except OSError as e:
        print(f"[error] could not write {args.out}: {e}", file=sys.stderr)
        return 1

    dbg = out.get("_debug", {})
    print(f"[done] wrote {out['count']} items -> {args.out}")
    print("Debug:", {k: dbg.get(k) for k in ("sources_total", "sources_failed", "collected", "kept", "elapsed_sec", "version")})
    return 0

if __name__ == "__main__":
    sys.exit(main())
