from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, List

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from subtitle_overlay import track_sources  # noqa: E402
from subtitle_overlay.track_sources import (  # noqa: E402
    FileTrackSource,
    HttpTrackSource,
    TrackNetworkError,
    TrackNotFoundError,
    make_track_source,
)


class DummyResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(track_sources.time, "sleep", lambda _seconds: None)


def _http_config(**overrides: Any) -> dict[str, Any]:
    http_cfg = {"base_url": "https://subs.example.com/tracks", "retries": 2}
    http_cfg.update(overrides)
    return {"sources": {"provider": "http", "http": http_cfg}}


def test_http_source_joins_base_url_and_decodes(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[str] = []

    def fake_get(url: str, *args: Any, **kwargs: Any) -> DummyResponse:
        calls.append(url)
        return DummyResponse(200, "WEBVTT\n\nこんにちは".encode("utf-8"))

    monkeypatch.setattr(track_sources.requests, "get", fake_get)

    source = HttpTrackSource(_http_config())
    text = source.fetch_text("/episode1.vtt")

    assert calls == ["https://subs.example.com/tracks/episode1.vtt"]
    assert text.endswith("こんにちは")


def test_absolute_urls_bypass_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[str] = []

    def fake_get(url: str, *args: Any, **kwargs: Any) -> DummyResponse:
        calls.append(url)
        return DummyResponse(200, b"WEBVTT")

    monkeypatch.setattr(track_sources.requests, "get", fake_get)

    HttpTrackSource(_http_config()).fetch_text("https://cdn.example.org/a.ass")
    assert calls == ["https://cdn.example.org/a.ass"]


def test_missing_track_is_not_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    attempts: List[int] = []

    def fake_get(*args: Any, **kwargs: Any) -> DummyResponse:
        attempts.append(1)
        return DummyResponse(404)

    monkeypatch.setattr(track_sources.requests, "get", fake_get)

    with pytest.raises(TrackNotFoundError):
        HttpTrackSource(_http_config()).fetch_text("missing.vtt")
    assert len(attempts) == 1


def test_server_errors_are_retried_then_succeed(monkeypatch: pytest.MonkeyPatch) -> None:
    responses = [DummyResponse(503), DummyResponse(429), DummyResponse(200, b"WEBVTT")]

    def fake_get(*args: Any, **kwargs: Any) -> DummyResponse:
        return responses.pop(0)

    monkeypatch.setattr(track_sources.requests, "get", fake_get)

    assert HttpTrackSource(_http_config()).fetch_text("a.vtt") == "WEBVTT"
    assert responses == []


def test_exhausted_retries_raise_network_error(monkeypatch: pytest.MonkeyPatch) -> None:
    attempts: List[int] = []

    def fake_get(*args: Any, **kwargs: Any) -> DummyResponse:
        attempts.append(1)
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(track_sources.requests, "get", fake_get)

    with pytest.raises(TrackNetworkError):
        HttpTrackSource(_http_config(retries=1)).fetch_text("a.vtt")
    assert len(attempts) == 2


def test_file_source_reads_relative_to_base_dir(tmp_path: Path) -> None:
    (tmp_path / "intro.vtt").write_text("WEBVTT\n", encoding="utf-8")
    source = FileTrackSource({"sources": {"file": {"base_dir": str(tmp_path)}}})

    assert source.fetch_text("intro.vtt") == "WEBVTT\n"
    with pytest.raises(TrackNotFoundError):
        source.fetch_text("nope.vtt")


def test_factory_selects_provider() -> None:
    assert isinstance(make_track_source({}), HttpTrackSource)
    assert isinstance(make_track_source({"sources": {"provider": "FILE"}}), FileTrackSource)
    with pytest.raises(ValueError):
        make_track_source({"sources": {"provider": "ftp"}})
