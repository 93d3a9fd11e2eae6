"""Data model shared by the parsers, scheduler, resolver and layout engine."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple, Union

from .colors import Rgba


class TrackFormat(str, Enum):
    VTT = "vtt"
    ASS = "ass"

    @classmethod
    def parse(cls, value: Union[str, "TrackFormat"]) -> "TrackFormat":
        if isinstance(value, TrackFormat):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(
                f"Unsupported subtitle format '{value}'. Supported formats: {[f.value for f in cls]}"
            ) from exc


# --- Override tag payloads ---


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Fade:
    fade_in_ms: float
    fade_out_ms: float


@dataclass(frozen=True)
class Move:
    x1: float
    y1: float
    x2: float
    y2: float
    t1: Optional[float] = None
    t2: Optional[float] = None


@dataclass(frozen=True)
class Rotation:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Overrides:
    """Inline ASS override tags for one cue. ``None`` means inherit, never zero."""

    pos: Optional[Point] = None
    alignment: Optional[int] = None
    color: Optional[Rgba] = None
    fade: Optional[Fade] = None
    move: Optional[Move] = None
    rotation: Optional[Rotation] = None
    border: Optional[float] = None
    shadow: Optional[float] = None
    blur: Optional[float] = None
    font_size: Optional[float] = None
    font_name: Optional[str] = None
    karaoke: bool = False

    @property
    def is_anchored(self) -> bool:
        return self.pos is not None or self.move is not None

    @property
    def is_animated(self) -> bool:
        return self.fade is not None or self.move is not None


# --- Track contents ---


@dataclass(frozen=True)
class Cue:
    start: float
    end: float
    format: TrackFormat
    text: str
    raw_text: Optional[str] = None
    html: Optional[str] = None
    style_name: Optional[str] = None
    overrides: Optional[Overrides] = None

    @property
    def identity(self) -> Tuple[str, float]:
        return (self.raw_text if self.raw_text is not None else self.text, self.start)

    @property
    def is_animated(self) -> bool:
        return self.overrides is not None and self.overrides.is_animated

    def is_active(self, time: float) -> bool:
        return self.start <= time <= self.end


@dataclass(frozen=True)
class StyleEntry:
    """One ``Style:`` row of an ASS styles section."""

    name: str
    font_name: Optional[str] = None
    font_size: Optional[float] = None
    primary_colour: Optional[str] = None
    secondary_colour: Optional[str] = None
    outline_colour: Optional[str] = None
    back_colour: Optional[str] = None
    bold: bool = False
    italic: bool = False
    alignment: Optional[int] = None
    margin_l: Optional[int] = None
    margin_r: Optional[int] = None
    margin_v: Optional[int] = None
    outline: Optional[float] = None
    shadow: Optional[float] = None
    columns: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_columns(cls, columns: Mapping[str, str]) -> "StyleEntry":
        def text(key: str) -> Optional[str]:
            value = columns.get(key)
            return value if value else None

        alignment = _to_int(columns.get("Alignment"))
        if alignment is not None and not 1 <= alignment <= 9:
            alignment = None

        return cls(
            name=columns.get("Name", ""),
            font_name=text("Fontname"),
            font_size=_to_float(columns.get("Fontsize")),
            primary_colour=text("PrimaryColour"),
            secondary_colour=text("SecondaryColour"),
            outline_colour=text("OutlineColour") or text("TertiaryColour"),
            back_colour=text("BackColour"),
            bold=_is_ass_true(columns.get("Bold")),
            italic=_is_ass_true(columns.get("Italic")),
            alignment=alignment,
            margin_l=_to_int(columns.get("MarginL")),
            margin_r=_to_int(columns.get("MarginR")),
            margin_v=_to_int(columns.get("MarginV")),
            outline=_to_float(columns.get("Outline")),
            shadow=_to_float(columns.get("Shadow")),
            columns=dict(columns),
        )


@dataclass(frozen=True)
class ScriptParams:
    play_res_x: int = 384
    play_res_y: int = 288


@dataclass(frozen=True)
class Track:
    format: TrackFormat
    cues: Tuple[Cue, ...] = ()
    styles: Mapping[str, StyleEntry] = field(default_factory=dict)
    params: ScriptParams = field(default_factory=ScriptParams)

    def __len__(self) -> int:
        return len(self.cues)


# --- Per-tick results ---


@dataclass(frozen=True)
class ResolvedStyle:
    alignment: int
    primary_color: Rgba
    outline_color: Rgba
    shadow_color: Rgba
    font_family: str
    font_size: float
    bold: bool
    italic: bool
    outline_width: float
    shadow_distance: float
    blur: float
    margin_l: Optional[int] = None
    margin_r: Optional[int] = None
    margin_v: Optional[int] = None
    rotation: Optional[Rotation] = None


@dataclass(frozen=True)
class AnimatedProps:
    opacity: float = 1.0
    position: Optional[Point] = None


@dataclass(frozen=True)
class ViewportScale:
    x: float = 1.0
    y: float = 1.0


@dataclass(frozen=True)
class AnchoredPlacement:
    """Absolute placement: the point ``(left, top)`` becomes the alignment anchor."""

    left: float
    top: float
    translate_x: float
    translate_y: float
    rotation: Optional[Rotation] = None

    def transform(self) -> str:
        parts = [f"translate({self.translate_x:g}%, {self.translate_y:g}%)"]
        if self.rotation is not None:
            if self.rotation.x:
                parts.append(f"rotateX({self.rotation.x:g}deg)")
            if self.rotation.y:
                parts.append(f"rotateY({self.rotation.y:g}deg)")
            if self.rotation.z:
                # ASS rotates counter-clockwise
                parts.append(f"rotateZ({-self.rotation.z:g}deg)")
        return " ".join(parts)


@dataclass(frozen=True)
class FlowPlacement:
    """Edge placement inside the viewport; ``None`` edges are automatic."""

    vertical: str
    horizontal: str
    text_align: str
    top: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None
    right: Optional[float] = None
    padding_left: float = 0.0
    padding_right: float = 0.0
    full_width: bool = False
    translate_y: float = 0.0


Placement = Union[AnchoredPlacement, FlowPlacement]


@dataclass(frozen=True)
class FontDescriptor:
    family: str
    size: float
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class RenderInstruction:
    text: str
    format: TrackFormat
    placement: Placement
    color: Rgba
    outline_color: Rgba
    shadow_color: Rgba
    font: FontDescriptor
    outline_width: float
    shadow_distance: float
    blur: float
    opacity: float = 1.0
    rotation: Optional[Rotation] = None
    html: Optional[str] = None


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None or not str(value).strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Optional[str]) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _is_ass_true(value: Optional[str]) -> bool:
    return value is not None and value.strip() in {"-1", "1"}

