from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from iconprep.errors import FetchError
from iconprep.manifest import ManifestEntry

DEFAULT_USER_AGENT = "process-icons/1.0"
DEFAULT_TIMEOUT = (5, 15)
DEFAULT_RETRIES = 3


@dataclass
class FetchResult:
    fetched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _get_logger(logger: logging.Logger | None) -> logging.Logger:
    if logger:
        return logger
    return logging.getLogger("iconprep.fetch")


def _build_session(retries: int) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": DEFAULT_USER_AGENT})
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        backoff_factor=0.4,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


def looks_like_svg(body: bytes) -> bool:
    head = body[:2048].lstrip().lower()
    return b"<svg" in head


class HttpFetcher:
    """Downloads raw files over HTTP(S); any non-2xx answer is an error."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self.session = session or _build_session(retries)
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            resp.raise_for_status()
        except requests.exceptions.Timeout as exc:
            raise FetchError(url, "timeout") from exc
        except requests.exceptions.HTTPError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(url, exc.__class__.__name__) from exc
        return resp.content


def write_file(dest: Path, data: bytes) -> None:
    tmp = dest.with_name(f".{dest.name}.part")
    try:
        tmp.write_bytes(data)
        tmp.replace(dest)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def fetch_icons(
    entries: Iterable[ManifestEntry],
    sources_dir: Path,
    fetcher: Fetcher,
    *,
    logger: logging.Logger | None = None,
) -> FetchResult:
    logger = _get_logger(logger)
    result = FetchResult()

    for entry in entries:
        dest = sources_dir / entry.filename
        if dest.exists():
            logger.info("  %s already exists, skipping", entry.identifier)
            result.skipped.append(entry.identifier)
            continue

        logger.info("  Downloading %s...", entry.identifier)
        start = time.time()
        body = fetcher.fetch(entry.url)
        if not body:
            raise FetchError(entry.url, "empty response body")
        if not looks_like_svg(body):
            raise FetchError(entry.url, "response is not an SVG document")
        try:
            write_file(dest, body)
        except OSError as exc:
            raise FetchError(entry.url, f"cannot write {dest}: {exc}") from exc
        elapsed_ms = int((time.time() - start) * 1000)
        logger.debug("GOT %s %s %s", len(body), elapsed_ms, entry.url)
        result.fetched.append(entry.identifier)

    return result
