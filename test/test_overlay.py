from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from subtitle_overlay.models import AnchoredPlacement, FlowPlacement, RenderInstruction  # noqa: E402
from subtitle_overlay.overlay import SubtitleOverlay  # noqa: E402
from subtitle_overlay.track_sources import TrackNotFoundError  # noqa: E402

VTT_TRACK = """WEBVTT

00:00.000 --> 00:02.000
Hello

00:03.000 --> 00:05.000
World
"""

ASS_TRACK = """[Script Info]
PlayResX: 384
PlayResY: 288

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, OutlineColour, BackColour, Bold, Italic, Alignment, MarginL, MarginR, MarginV, Outline, Shadow
Style: Default,Arial,20,&H00FFFFFF,&H00000000,&H00000000,0,0,2,10,10,10,2,0

[Events]
Format: Layer, Start, End, Style, Text
Dialogue: 0,0:00:00.00,0:00:03.00,Default,{\\pos(100,200)\\an7}Pinned
Dialogue: 0,0:00:04.00,0:00:07.00,Default,{\\fad(500,500)}Fading
"""


class FakeSurface:
    def __init__(self, size: Tuple[float, float] = (768, 576)) -> None:
        self.size = size
        self.pushes: List[List[RenderInstruction]] = []

    def content_size(self) -> Tuple[float, float]:
        return self.size

    def replace_all(self, instructions: Sequence[RenderInstruction]) -> None:
        self.pushes.append(list(instructions))


class FakeSource:
    def __init__(self, tracks: Dict[str, str]) -> None:
        self.tracks = tracks

    def fetch_text(self, identifier: str) -> str:
        if identifier not in self.tracks:
            raise TrackNotFoundError(f"Subtitle track not found: {identifier}")
        return self.tracks[identifier]


def _overlay(surface: FakeSurface, tracks: Dict[str, str] | None = None, **kwargs) -> SubtitleOverlay:
    return SubtitleOverlay(surface, FakeSource(tracks or {}), **kwargs)


def test_load_track_notifies_and_enables() -> None:
    messages: List[str] = []
    overlay = _overlay(FakeSurface(), {"ep1.vtt": VTT_TRACK}, notifier=messages.append)

    assert overlay.load_track("ep1.vtt") is True
    assert overlay.enabled is True
    assert len(overlay.track) == 2
    assert messages == ["Subtitles loaded: 2 lines"]


def test_failed_load_disables_and_clears_surface() -> None:
    surface = FakeSurface()
    messages: List[str] = []
    overlay = _overlay(surface, {"ep1.vtt": VTT_TRACK}, notifier=messages.append)
    overlay.load_track("ep1.vtt")
    overlay.tick(1)

    assert overlay.load_track("missing.vtt") is False
    assert overlay.enabled is False
    assert surface.pushes[-1] == []
    assert messages[-1].startswith("Subtitles failed to load:")
    assert overlay.tick(1) == []


def test_tick_pushes_only_on_change_for_static_cues() -> None:
    surface = FakeSurface()
    overlay = _overlay(surface)
    overlay.load_text(VTT_TRACK, "vtt")

    first = overlay.tick(1)
    assert [instruction.text for instruction in first] == ["Hello"]
    assert len(surface.pushes) == 1

    overlay.tick(1.5)
    assert len(surface.pushes) == 1

    assert overlay.tick(2.5) == []
    assert len(surface.pushes) == 2

    assert [instruction.text for instruction in overlay.tick(4)] == ["World"]
    assert len(surface.pushes) == 3


def test_animated_cues_push_every_tick() -> None:
    surface = FakeSurface()
    overlay = _overlay(surface)
    overlay.load_text(ASS_TRACK, "ass")

    first = overlay.tick(4.1)
    second = overlay.tick(4.2)

    assert len(surface.pushes) == 2
    assert first[0].opacity == pytest.approx(0.2)
    assert second[0].opacity == pytest.approx(0.4)
    assert isinstance(first[0].placement, FlowPlacement)


def test_positioned_cue_scales_to_viewport() -> None:
    surface = FakeSurface((768, 576))
    overlay = _overlay(surface)
    overlay.load_text(ASS_TRACK, "ass")

    instruction = overlay.tick(1)[0]
    assert instruction.text == "Pinned"
    assert isinstance(instruction.placement, AnchoredPlacement)
    assert (instruction.placement.left, instruction.placement.top) == (200.0, 400.0)
    assert (instruction.placement.translate_x, instruction.placement.translate_y) == (0.0, 0.0)
    assert instruction.font.size == 40.0
    assert instruction.outline_width == 4.0


def test_resize_rerenders_active_cues() -> None:
    surface = FakeSurface((768, 576))
    overlay = _overlay(surface)
    overlay.load_text(ASS_TRACK, "ass")
    overlay.tick(1)

    resized = overlay.resize(1152, 864)

    assert len(surface.pushes) == 2
    assert (resized[0].placement.left, resized[0].placement.top) == (300.0, 600.0)


def test_resize_without_active_cues_does_not_push() -> None:
    surface = FakeSurface()
    overlay = _overlay(surface)
    overlay.load_text(VTT_TRACK)
    overlay.tick(2.5)
    pushes = len(surface.pushes)

    overlay.resize(1920, 1080)
    assert len(surface.pushes) == pushes


def test_vtt_track_is_not_scaled() -> None:
    overlay = _overlay(FakeSurface((1920, 1080)))
    overlay.load_text(VTT_TRACK)

    instruction = overlay.tick(1)[0]
    assert instruction.font.size == 20.0
    assert instruction.html == "Hello"
    assert isinstance(instruction.placement, FlowPlacement)
    assert instruction.placement.bottom == 10.0


def test_zero_content_size_falls_back_to_default_viewport() -> None:
    overlay = _overlay(FakeSurface((0, 0)))
    assert overlay.viewport_size() == (1280.0, 720.0)


def test_tick_uses_clock_and_refresh_after_load() -> None:
    surface = FakeSurface()
    now = {"t": 4.0}
    overlay = _overlay(surface, clock=lambda: now["t"])

    overlay.load_text(VTT_TRACK)
    assert [instruction.text for instruction in surface.pushes[-1]] == ["World"]

    now["t"] = 1.0
    assert [instruction.text for instruction in overlay.tick()] == ["Hello"]


def test_tick_without_time_or_clock_raises() -> None:
    overlay = _overlay(FakeSurface())
    with pytest.raises(ValueError):
        overlay.tick()


def test_unknown_format_is_rejected() -> None:
    overlay = _overlay(FakeSurface())
    with pytest.raises(ValueError):
        overlay.load_text(VTT_TRACK, "srt")


def test_disable_clears_output() -> None:
    surface = FakeSurface()
    overlay = _overlay(surface)
    overlay.load_text(VTT_TRACK)
    overlay.tick(1)

    overlay.disable()

    assert overlay.enabled is False
    assert surface.pushes[-1] == []
    assert overlay.instructions == []
    assert overlay.active_cues == ()


def test_async_load_installs_track() -> None:
    messages: List[str] = []
    overlay = _overlay(FakeSurface(), {"ep1.vtt": VTT_TRACK}, notifier=messages.append)

    thread = overlay.load_track_async("ep1.vtt")
    thread.join(timeout=5)

    assert overlay.enabled is True
    assert messages == ["Subtitles loaded: 2 lines"]


class BlockingSource(FakeSource):
    def __init__(self, tracks: Dict[str, str]) -> None:
        super().__init__(tracks)
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_text(self, identifier: str) -> str:
        self.started.set()
        self.release.wait(timeout=5)
        return super().fetch_text(identifier)


def test_superseded_load_is_discarded() -> None:
    source = BlockingSource({"old.vtt": VTT_TRACK})
    overlay = SubtitleOverlay(FakeSurface(), source)

    thread = overlay.load_track_async("old.vtt")
    assert source.started.wait(timeout=5)

    newer = "WEBVTT\n\n00:00.000 --> 00:01.000\nNewer\n"
    assert overlay.load_text(newer) is True
    source.release.set()
    thread.join(timeout=5)

    assert [cue.text for cue in overlay.track.cues] == ["Newer"]


class FailingAfterReleaseSource(BlockingSource):
    def __init__(self) -> None:
        super().__init__({})


def test_superseded_failed_load_keeps_newer_track() -> None:
    surface = FakeSurface()
    messages: List[str] = []
    source = FailingAfterReleaseSource()
    overlay = SubtitleOverlay(surface, source, notifier=messages.append)

    thread = overlay.load_track_async("broken.vtt")
    assert source.started.wait(timeout=5)

    assert overlay.load_text(VTT_TRACK) is True
    overlay.tick(1)
    source.release.set()
    thread.join(timeout=5)

    assert overlay.enabled is True
    assert len(overlay.track) == 2
    assert [instruction.text for instruction in surface.pushes[-1]] == ["Hello"]
    assert not any(message.startswith("Subtitles failed to load") for message in messages)


def test_disable_with_stale_generation_is_ignored() -> None:
    surface = FakeSurface()
    overlay = _overlay(surface)
    stale = overlay._next_generation()
    overlay.load_text(VTT_TRACK)
    overlay.tick(1)

    assert overlay.disable(stale) is False
    assert overlay.enabled is True
    assert surface.pushes[-1] != []

    assert overlay.disable() is True
    assert overlay.enabled is False
