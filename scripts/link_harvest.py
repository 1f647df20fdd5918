# scripts/link_harvest.py
#
# Harvest (title, absolute url) pairs from the anchors of a listing page.
# Listing pages are a pile of anchors; anything with too little visible text
# (icons, "more", page numbers) is dropped.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup  # type: ignore

from radar_config import MIN_LINK_TEXT

WS_RE = re.compile(r"\s+")

@dataclass
class HarvestedLink:
    title: str
    url: str

def harvest_links(html: str, base_url: str, min_text: int = MIN_LINK_TEXT) -> List[HarvestedLink]:
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    links: List[HarvestedLink] = []
    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").strip()
        if not href or href.lower().startswith("javascript:"):
            continue
        text = WS_RE.sub(" ", " ".join(a.stripped_strings)).strip()
        if len(text) < min_text:
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            continue
        if not absolute.startswith(("http://", "https://")):
            continue
        links.append(HarvestedLink(title=text, url=absolute))
    return links
