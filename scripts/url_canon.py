# scripts/url_canon.py
#
# Canonical URL identity: strip tracking params, normalize the trailing slash,
# hash the result into the item id used for dedupe and bookmarks.

from __future__ import annotations

import hashlib
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from radar_model import Parsed, success, failure

TRACKING_PARAMS = {
    "utm_source","utm_medium","utm_campaign","utm_term","utm_content","utm_id",
    "fbclid","gclid","dclid","gbraid","wbraid","yclid","igshid",
    "mc_cid","mc_eid",
}

def try_normalize_url(url: str) -> Parsed[str]:
    raw = (url or "").strip()
    if not raw:
        return failure("empty url")
    try:
        u = urlsplit(raw)
        _ = u.port  # raises on a malformed port
    except ValueError as e:
        return failure(f"unparseable url {raw!r}: {e}")
    if not u.scheme or not u.netloc:
        return failure(f"not an absolute url: {raw!r}")

    pairs = parse_qsl(u.query, keep_blank_values=True)
    kept = [(k, v) for (k, v) in pairs if k.lower() not in TRACKING_PARAMS]
    # untouched unless a tracker was actually dropped
    query = u.query if len(kept) == len(pairs) else urlencode(kept)

    path = u.path or "/"
    if path != "/" and path.endswith("/"):
        # all of them, so a second pass has nothing left to strip
        path = path.rstrip("/") or "/"

    return success(urlunsplit((u.scheme.lower(), u.netloc.lower(), path, query, u.fragment)))

def normalize_url(url: str) -> str:
    """Canonical form of ``url``; the input comes back unchanged when it cannot be parsed."""
    return try_normalize_url(url).or_else(url)

def item_id(canonical_url: str) -> str:
    return "sha1:" + hashlib.sha1(canonical_url.encode("utf-8")).hexdigest()
