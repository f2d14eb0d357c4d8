from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path

from audio_timeline.domain.errors import TransportError

log = logging.getLogger(__name__)


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def read_file_bytes(path: str | Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        log.warning("Could not read %s: %s", path, exc)
        raise TransportError(f"Cannot read {path}: {exc}") from exc


def fetch_url_bytes(url: str, timeout: float = 30.0) -> bytes:
    """GET a URL and return the body; any failure or non-2xx is a TransportError."""
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if not 200 <= status < 300:
                raise TransportError(f"{url} responded with HTTP {status}")
            return response.read()
    except urllib.error.HTTPError as exc:
        log.warning("Fetching %s failed: HTTP %s", url, exc.code)
        raise TransportError(f"{url} responded with HTTP {exc.code} {exc.reason}") from exc
    except (urllib.error.URLError, OSError) as exc:
        log.warning("Fetching %s failed: %s", url, exc)
        raise TransportError(f"Cannot fetch {url}: {exc}") from exc


def read_source_bytes(source: str | Path, timeout: float = 30.0) -> bytes:
    """Read raw bytes from an http(s) URL or a local path."""
    if is_url(source):
        return fetch_url_bytes(str(source), timeout=timeout)
    return read_file_bytes(source)
