"""Inline ASS override tag extraction.

Tags are read in a single left-to-right pass over every ``{...}`` block. The
first occurrence of each tag kind wins; repeats later in the text are ignored.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from logging_utils import get_logger

from .colors import decode_ass_color
from .models import Fade, Move, Overrides, Point, Rotation

logger = get_logger(__name__)

LINE_BREAK = "\n"

_BLOCK_RE = re.compile(r"\{([^}]*)\}")
# name up to the next backslash or "(", then an optional parenthesised argument list.
# The argument list may itself contain backslashes, e.g. \t(0,500,\frz30).
# \fn names may contain parentheses and run to the next backslash.
_TOKEN_RE = re.compile(r"\\(fn[^\\]*|[^\\(]*)(?:\(([^)]*)\)?)?")

_NUM = r"-?(?:\d+(?:\.\d*)?|\.\d+)"
_AN_RE = re.compile(r"^an([1-9])$")
_COLOR_RE = re.compile(r"^1?c&[Hh]([0-9a-fA-F]+)&?$")
_ROTATION_RE = re.compile(rf"^fr([xyz]?)\s*({_NUM})$")
_NUMERIC_RE = re.compile(rf"^(bord|shad|blur)\s*({_NUM})$")
_FONT_SIZE_RE = re.compile(r"^fs(\d+(?:\.\d+)?)$")
_KARAOKE_RE = re.compile(r"^(?:k|kf|ko|K)\d+$")
_ARG_RE = re.compile(rf"^\s*{_NUM}\s*$")


def _parse_args(raw: Optional[str], counts: Tuple[int, ...]) -> Optional[List[float]]:
    if raw is None:
        return None
    parts = raw.split(",")
    if len(parts) not in counts or not all(_ARG_RE.match(part) for part in parts):
        return None
    return [float(part) for part in parts]


def _scan_tokens(text: str):
    for block in _BLOCK_RE.finditer(text):
        for token in _TOKEN_RE.finditer(block.group(1)):
            yield token.group(1).strip(), token.group(2)


def extract_overrides(text: str) -> Overrides:
    """Collect the recognised override tags of ``text`` into an ``Overrides`` record."""
    found: Dict[str, object] = {}
    rotation: Dict[str, float] = {}
    karaoke = False

    def keep_first(kind: str, value: object) -> None:
        if kind in found:
            logger.debug("Ignoring repeated \\%s override tag", kind)
            return
        found[kind] = value

    for name, args in _scan_tokens(text):
        if not name:
            continue

        if name == "pos":
            values = _parse_args(args, (2,))
            if values:
                keep_first("pos", Point(values[0], values[1]))
            continue
        if name == "move":
            values = _parse_args(args, (4, 6))
            if values:
                t1, t2 = (values[4], values[5]) if len(values) == 6 else (None, None)
                keep_first("move", Move(values[0], values[1], values[2], values[3], t1, t2))
            continue
        if name == "fad":
            values = _parse_args(args, (2,))
            if values:
                keep_first("fade", Fade(max(0.0, values[0]), max(0.0, values[1])))
            continue

        match = _AN_RE.match(name)
        if match:
            keep_first("alignment", int(match.group(1)))
            continue
        match = _COLOR_RE.match(name)
        if match:
            color = decode_ass_color(match.group(1))
            if color is not None:
                keep_first("color", color)
            continue
        match = _ROTATION_RE.match(name)
        if match:
            axis = match.group(1) or "z"
            if axis in rotation:
                logger.debug("Ignoring repeated \\fr%s override tag", axis)
            else:
                rotation[axis] = float(match.group(2))
            continue
        match = _NUMERIC_RE.match(name)
        if match:
            keep_first(match.group(1), float(match.group(2)))
            continue
        match = _FONT_SIZE_RE.match(name)
        if match:
            keep_first("fs", float(match.group(1)))
            continue
        if name.startswith("fn") and name[2:].strip():
            keep_first("fn", name[2:].strip())
            continue
        if _KARAOKE_RE.match(name):
            karaoke = True

    return Overrides(
        pos=found.get("pos"),  # type: ignore[arg-type]
        alignment=found.get("alignment"),  # type: ignore[arg-type]
        color=found.get("color"),  # type: ignore[arg-type]
        fade=found.get("fade"),  # type: ignore[arg-type]
        move=found.get("move"),  # type: ignore[arg-type]
        rotation=Rotation(**rotation) if rotation else None,
        border=found.get("bord"),  # type: ignore[arg-type]
        shadow=found.get("shad"),  # type: ignore[arg-type]
        blur=found.get("blur"),  # type: ignore[arg-type]
        font_size=found.get("fs"),  # type: ignore[arg-type]
        font_name=found.get("fn"),  # type: ignore[arg-type]
        karaoke=karaoke,
    )


def clean_text(text: str) -> str:
    """Drop tag blocks and translate ASS escapes into displayable text."""
    cleaned = _BLOCK_RE.sub("", text)
    return cleaned.replace("\\N", LINE_BREAK).replace("\\n", " ").replace("\\h", "\u00a0")


def parse_cue_text(text: str) -> Tuple[str, Overrides]:
    return clean_text(text), extract_overrides(text)
