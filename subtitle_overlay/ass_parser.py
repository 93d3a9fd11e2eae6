"""Advanced SubStation Alpha (ASS/SSA) track parser."""
from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, List, Optional

from logging_utils import get_logger

from .models import Cue, ScriptParams, StyleEntry, Track, TrackFormat
from .override_tags import parse_cue_text
from .timecodes import is_valid_time, parse_time

logger = get_logger(__name__)

SCRIPT_INFO_SECTION = "[Script Info]"
STYLE_SECTIONS = {"[V4+ Styles]", "[V4 Styles]"}
EVENTS_SECTION = "[Events]"
REQUIRED_EVENT_COLUMNS = ("Start", "End", "Text")
_LINE_RE = re.compile(r"\r?\n")


def _split_columns(header: str) -> List[str]:
    return [part.strip() for part in header.split(",")]


def _positive_int(value: str) -> Optional[int]:
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number > 0 else None


def split_dialogue(content: str, columns: List[str]) -> Optional[Dict[str, str]]:
    """Map a ``Dialogue:`` payload onto ``columns``.

    Only the last column (Text) may contain commas, so the payload is cut at
    the (N-1)-th comma: everything before is comma-split metadata, everything
    after is the text verbatim. Returns ``None`` when there are too few commas.
    """
    meta_count = len(columns) - 1
    if meta_count <= 0:
        return {"Text": content}

    found = 0
    cut = -1
    for index, char in enumerate(content):
        if char == ",":
            found += 1
            if found == meta_count:
                cut = index
                break
    if cut < 0:
        return None

    meta_values = [value.strip() for value in content[:cut].split(",")]
    event: Dict[str, str] = {}
    for name, value in zip(columns[:meta_count], meta_values):
        event[name] = value
    event["Text"] = content[cut + 1 :]
    return event


class AssParser:
    """Section-oriented state machine producing cues, a style table and script params."""

    def __init__(self, default_params: Optional[ScriptParams] = None) -> None:
        self.section = ""
        self.params = default_params or ScriptParams()
        self.styles: Dict[str, StyleEntry] = {}
        self.cues: List[Cue] = []
        self._style_columns: List[str] = []
        self._event_columns: List[str] = []
        self.skipped = 0

    def parse(self, text: str) -> Track:
        for raw_line in _LINE_RE.split(text.lstrip("\ufeff")):
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith("["):
                self.section = line
                continue

            if self.section == SCRIPT_INFO_SECTION:
                self._handle_script_info(line)
            elif self.section in STYLE_SECTIONS:
                self._handle_style_line(line)
            elif self.section == EVENTS_SECTION:
                self._handle_event_line(line)

        logger.debug(
            "Parsed ASS track: %d cues, %d styles, PlayRes %dx%d (%d lines skipped)",
            len(self.cues),
            len(self.styles),
            self.params.play_res_x,
            self.params.play_res_y,
            self.skipped,
        )
        return Track(
            format=TrackFormat.ASS,
            cues=tuple(self.cues),
            styles=dict(self.styles),
            params=self.params,
        )

    # ------------------------------------------------------------------
    def _handle_script_info(self, line: str) -> None:
        key, sep, value = line.partition(":")
        if not sep:
            return
        key = key.strip()
        if key not in ("PlayResX", "PlayResY"):
            return
        number = _positive_int(value)
        if number is None:
            logger.warning("Ignoring invalid %s value: %r", key, value.strip())
            self.skipped += 1
            return
        if key == "PlayResX":
            self.params = replace(self.params, play_res_x=number)
        else:
            self.params = replace(self.params, play_res_y=number)

    def _handle_style_line(self, line: str) -> None:
        if line.startswith("Format:"):
            self._style_columns = _split_columns(line[len("Format:") :])
            return
        if not line.startswith("Style:"):
            return

        values = line[len("Style:") :].split(",")
        columns = {
            name: values[index].strip()
            for index, name in enumerate(self._style_columns)
            if index < len(values)
        }
        name = columns.get("Name")
        if not name:
            logger.debug("Skipping style row without a Name column: %s", line[:60])
            self.skipped += 1
            return
        self.styles[name] = StyleEntry.from_columns(columns)

    def _handle_event_line(self, line: str) -> None:
        if line.startswith("Format:"):
            self._event_columns = _split_columns(line[len("Format:") :])
            return
        if not line.startswith("Dialogue:"):
            return

        if not all(column in self._event_columns for column in REQUIRED_EVENT_COLUMNS):
            logger.debug("Skipping dialogue before a Format line declaring Start/End/Text")
            self.skipped += 1
            return

        content = line[line.index(":") + 1 :].strip()
        event = split_dialogue(content, self._event_columns)
        if event is None:
            logger.debug("Skipping dialogue with too few fields: %s", line[:60])
            self.skipped += 1
            return

        start = parse_time(event.get("Start", ""))
        end = parse_time(event.get("End", ""))
        if not (is_valid_time(start) and is_valid_time(end)):
            logger.debug("Skipping dialogue with invalid timing: %s", line[:60])
            self.skipped += 1
            return

        raw_text = event["Text"]
        text, overrides = parse_cue_text(raw_text)
        style_name = event.get("Style", "").lstrip("*") or None

        self.cues.append(
            Cue(
                start=start,
                end=end,
                format=TrackFormat.ASS,
                text=text,
                raw_text=raw_text,
                style_name=style_name,
                overrides=overrides,
            )
        )


def parse_ass(text: str, default_params: Optional[ScriptParams] = None) -> Track:
    return AssParser(default_params).parse(text)
