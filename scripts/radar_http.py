# scripts/radar_http.py
#
# The fetch primitive: GET a URL and return its text within a hard time limit.
# Every failure is raised as a FetchError subclass so callers can treat
# status errors, network errors and timeouts the same way.

from __future__ import annotations

import re
import time
from typing import Optional

import requests  # type: ignore
import urllib3  # type: ignore

from radar_config import ACCEPT_HEADER, HTTP_TIMEOUT_S, USER_AGENT

CHUNK_BYTES = 64 * 1024

RE_HEADER_CHARSET = re.compile(r"charset=([\w.:-]+)", re.I)
RE_DECLARED_CHARSET = re.compile(rb"""(?:encoding|charset)\s*=\s*["']?([\w.:-]+)""", re.I)

class FetchError(Exception):
    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url

class FetchStatusError(FetchError):
    def __init__(self, url: str, status: int):
        super().__init__(url, f"HTTP {status}")
        self.status = status

class FetchNetworkError(FetchError):
    pass

class FetchTimeout(FetchError):
    pass

def new_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": ACCEPT_HEADER,
    })
    return s

def decode_body(body: bytes, content_type: str = "") -> str:
    """Header charset, then the charset the document declares, then UTF-8."""
    m = RE_HEADER_CHARSET.search(content_type or "")
    enc = m.group(1) if m else ""
    if not enc:
        d = RE_DECLARED_CHARSET.search(body[:2048])
        enc = d.group(1).decode("ascii", "ignore") if d else ""
    try:
        return body.decode(enc or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")

def _limit_socket(resp, seconds: float) -> None:
    # a blocked read must not outlive the deadline
    sock = getattr(getattr(resp.raw, "connection", None), "sock", None)
    if sock is not None:
        sock.settimeout(seconds)

def _read_body(resp, url: str, timeout: float, deadline: float) -> bytes:
    """Read whatever bytes are available, one chunk at a time, until EOF or the deadline."""
    chunks = []
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchTimeout(url, f"exceeded {timeout:.0f}s")
        _limit_socket(resp, remaining)
        chunk = resp.raw.read1(CHUNK_BYTES, decode_content=True)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)

def fetch_text(url: str, session: Optional[requests.Session] = None, timeout: float = HTTP_TIMEOUT_S) -> str:
    sess = session or new_session()
    deadline = time.monotonic() + timeout
    try:
        with sess.get(url, timeout=timeout, stream=True, allow_redirects=True) as resp:
            if not resp.ok:
                raise FetchStatusError(url, resp.status_code)
            body = _read_body(resp, url, timeout, deadline)
            return decode_body(body, resp.headers.get("Content-Type", ""))
    except (requests.Timeout, urllib3.exceptions.TimeoutError) as e:
        raise FetchTimeout(url, f"timeout: {e}") from e
    except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
        raise FetchNetworkError(url, f"{type(e).__name__}: {e}") from e
    finally:
        if session is None:
            sess.close()
