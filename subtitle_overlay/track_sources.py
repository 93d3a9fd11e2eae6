"""Track sources that fetch raw subtitle text for the overlay."""
from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Any, Dict, Protocol

import requests

logger = logging.getLogger(__name__)

_SUPPORTED_PROVIDERS = {"http", "file"}


class TrackLoadError(RuntimeError):
    """Raised when a subtitle track cannot be fetched."""


class TrackNotFoundError(TrackLoadError):
    """The requested track does not exist."""


class TrackNetworkError(TrackLoadError):
    """The track could not be retrieved because of a transport failure."""


class TrackSource(Protocol):
    def fetch_text(self, identifier: str) -> str:
        ...


def _sources_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    sources_cfg = config.get("sources", {}) if isinstance(config, dict) else {}
    section = sources_cfg.get(name, {}) if isinstance(sources_cfg, dict) else {}
    return section if isinstance(section, dict) else {}


class HttpTrackSource:
    """Download subtitle tracks over HTTP(S) with retry on transient failures."""

    def __init__(self, config: Dict[str, Any]) -> None:
        http_cfg = _sources_section(config, "http")
        self.base_url = str(http_cfg.get("base_url", "") or "").strip()
        self.retries = int(http_cfg.get("retries", 2))
        self.retry_backoff_base = float(http_cfg.get("retry_backoff_base", 0.5))
        # requests.get accepts a (connect, read) tuple.
        self.timeout_connect = float(http_cfg.get("timeout_connect", 5))
        self.timeout_read = float(http_cfg.get("timeout_read", 20))
        self.encoding = str(http_cfg.get("encoding", "utf-8") or "utf-8")

    def _build_url(self, identifier: str) -> str:
        if not self.base_url or identifier.startswith(("http://", "https://")):
            return identifier
        return f"{self.base_url.rstrip('/')}/{identifier.lstrip('/')}"

    def fetch_text(self, identifier: str) -> str:
        url = self._build_url(identifier)
        logger.info("Fetching subtitle track: %s", url)

        attempt = 0
        while True:
            attempt += 1
            try:
                start = time.monotonic()
                response = requests.get(
                    url,
                    timeout=(self.timeout_connect, self.timeout_read),
                    allow_redirects=True,
                )
                status = response.status_code
                logger.debug("Track response: status=%s elapsed=%.2fs", status, time.monotonic() - start)
                if status in (404, 410):
                    # Missing tracks are not retried
                    raise TrackNotFoundError(f"Subtitle track not found: {url}")
                if status == 429 or 500 <= status < 600:
                    raise requests.HTTPError(f"HTTP {status}")
                response.raise_for_status()
                return response.content.decode(self.encoding, errors="replace")
            except requests.RequestException as exc:
                if attempt > max(0, self.retries):
                    raise TrackNetworkError(
                        f"Failed to fetch subtitle track after {attempt} attempts: {exc}"
                    ) from exc
                wait = self.retry_backoff_base * (2 ** (attempt - 1))
                wait *= random.uniform(0.8, 1.2)
                logger.warning(
                    "Track request failed (attempt %d/%d): %s; retrying in %.2fs",
                    attempt,
                    self.retries,
                    exc,
                    wait,
                )
                time.sleep(max(0.0, min(wait, 10.0)))


class FileTrackSource:
    """Read subtitle tracks from the local filesystem."""

    def __init__(self, config: Dict[str, Any]) -> None:
        file_cfg = _sources_section(config, "file")
        base_dir = file_cfg.get("base_dir")
        self.base_dir = Path(base_dir).expanduser() if base_dir else None
        self.encoding = str(file_cfg.get("encoding", "utf-8") or "utf-8")

    def fetch_text(self, identifier: str) -> str:
        path = Path(identifier).expanduser()
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        if not path.is_file():
            raise TrackNotFoundError(f"Subtitle track not found: {path}")
        logger.info("Reading subtitle track: %s", path)
        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise TrackNetworkError(f"Failed to read subtitle track {path}: {exc}") from exc


def _resolve_provider(config: Dict[str, Any]) -> str:
    provider = "http"
    if not isinstance(config, dict):
        return provider
    sources = config.get("sources", {})
    if isinstance(sources, dict):
        candidate = sources.get("provider")
        if candidate is not None:
            provider = str(candidate).strip().lower() or provider
    return provider


def make_track_source(config: Dict[str, Any]) -> TrackSource:
    """Return a track source based on configuration."""
    provider = _resolve_provider(config)
    if provider not in _SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unsupported track provider '{provider}'. Supported providers: {sorted(_SUPPORTED_PROVIDERS)}"
        )
    if provider == "file":
        logger.debug("Using file track source")
        return FileTrackSource(config)
    logger.debug("Using HTTP track source")
    return HttpTrackSource(config)
