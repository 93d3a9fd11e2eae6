"""
Subtitle overlay package.

Parses WebVTT and ASS tracks and turns the cues active at a playback time into
styled, positioned, animated render instructions for a presentation surface.
"""

from __future__ import annotations

__all__ = [
    "SubtitleOverlay",
    "build_overlay",
    "parse_vtt",
    "parse_ass",
    "TrackFormat",
    "RenderInstruction",
]

from .ass_parser import parse_ass
from .factory import build_overlay
from .models import RenderInstruction, TrackFormat
from .overlay import SubtitleOverlay
from .vtt_parser import parse_vtt
