"""WebVTT track parser."""
from __future__ import annotations

import re
from typing import List, Optional

from logging_utils import get_logger

from .models import Cue, Track, TrackFormat
from .timecodes import parse_time

logger = get_logger(__name__)

HTML_LINE_BREAK = "<br>"

# Vector drawing payloads leaked by some authoring pipelines, e.g. "m 0 0 l 100 0 ..."
_DRAWING_RE = re.compile(r"^\s*m\s+-?\d")
_VOICE_OPEN_RE = re.compile(r"<v[ .][^>]*>")
_VOICE_CLOSE_RE = re.compile(r"</v>")
# Only LF and CRLF end a line; other Unicode separators stay in the cue text.
_LINE_RE = re.compile(r"\r?\n")


def _strip_voice_tags(text: str) -> str:
    return _VOICE_CLOSE_RE.sub("", _VOICE_OPEN_RE.sub("", text))


def _parse_timing(line: str) -> tuple[float, float]:
    start_str, _, end_rest = line.partition("-->")
    # Cue settings ("line:90% align:start") follow the end timestamp.
    end_tokens = end_rest.split()
    end_str = end_tokens[0] if end_tokens else ""
    return parse_time(start_str.strip()), parse_time(end_str)


def parse_vtt(text: str) -> Track:
    """Parse WebVTT text into a ``Track`` of cues.

    Cue times are not validated on this path. Consecutive cues with the same
    start, end and text collapse into the first one.
    """
    lines = _LINE_RE.split(text.lstrip("\ufeff"))
    cues: List[Cue] = []
    previous: Optional[Cue] = None
    dropped = 0

    i = 0
    if lines and lines[0].startswith("WEBVTT"):
        i = 1

    while i < len(lines):
        line = lines[i].strip()

        if not line or line.startswith("NOTE"):
            i += 1
            continue

        if "-->" not in line:
            # Optional cue identifier; the timing line should follow
            i += 1
            if i >= len(lines):
                break
            line = lines[i].strip()

        if "-->" not in line:
            i += 1
            continue

        start, end = _parse_timing(line)
        i += 1
        payload: List[str] = []
        while i < len(lines) and lines[i].strip():
            if _DRAWING_RE.match(lines[i]):
                logger.debug("Dropping drawing command payload line: %s", lines[i][:40])
            else:
                payload.append(lines[i])
            i += 1

        if not payload:
            dropped += 1
            continue

        cue = Cue(
            start=start,
            end=end,
            format=TrackFormat.VTT,
            text="\n".join(payload),
            html=_strip_voice_tags(HTML_LINE_BREAK.join(payload)),
        )
        if previous is not None and (previous.start, previous.end, previous.text) == (cue.start, cue.end, cue.text):
            dropped += 1
            continue
        cues.append(cue)
        previous = cue

    logger.debug("Parsed %d VTT cues (%d dropped)", len(cues), dropped)
    return Track(format=TrackFormat.VTT, cues=tuple(cues))
