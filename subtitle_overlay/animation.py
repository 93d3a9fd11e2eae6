"""Time-varying cue properties (\\fad opacity and \\move position)."""
from __future__ import annotations

from typing import Optional

from .models import AnimatedProps, Cue, Fade, Move, Point, ViewportScale


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def fade_opacity(fade: Fade, start: float, end: float, time: float) -> float:
    """Opacity for a ``\\fad(t1,t2)`` cue; durations are milliseconds."""
    elapsed = (time - start) * 1000
    remaining = (end - time) * 1000
    if fade.fade_in_ms > 0 and elapsed < fade.fade_in_ms:
        opacity = elapsed / fade.fade_in_ms
    elif fade.fade_out_ms > 0 and remaining < fade.fade_out_ms:
        opacity = remaining / fade.fade_out_ms
    else:
        opacity = 1.0
    return _clamp(opacity)


def move_progress(move: Move, start: float, end: float, time: float) -> float:
    duration = (end - start) * 1000
    start_ms = move.t1 if move.t1 is not None else 0.0
    end_ms = move.t2 if move.t2 is not None else duration
    if end_ms <= start_ms:
        return 1.0

    elapsed = (time - start) * 1000
    if elapsed <= start_ms:
        return 0.0
    if elapsed >= end_ms:
        return 1.0
    return (elapsed - start_ms) / (end_ms - start_ms)


def move_position(move: Move, start: float, end: float, time: float) -> Point:
    """Interpolated ``\\move`` position in script coordinates."""
    progress = move_progress(move, start, end, time)
    return Point(
        move.x1 + (move.x2 - move.x1) * progress,
        move.y1 + (move.y2 - move.y1) * progress,
    )


class AnimationEngine:
    """Compute per-tick opacity and anchor position for a cue."""

    def animate(self, cue: Cue, time: float, scale: Optional[ViewportScale] = None) -> AnimatedProps:
        scale = scale or ViewportScale()
        overrides = cue.overrides
        if overrides is None:
            return AnimatedProps()

        opacity = 1.0
        if overrides.fade is not None:
            opacity = fade_opacity(overrides.fade, cue.start, cue.end, time)

        point: Optional[Point] = None
        if overrides.move is not None:
            point = move_position(overrides.move, cue.start, cue.end, time)
        elif overrides.pos is not None:
            point = overrides.pos

        position = Point(point.x * scale.x, point.y * scale.y) if point is not None else None
        return AnimatedProps(opacity=opacity, position=position)
