"""Layout geometry for numpad alignment codes, margins and viewport scaling.

Alignment codes follow the numeric keypad: 1-3 bottom, 4-6 middle, 7-9 top;
1/4/7 left, 2/5/8 centre, 3/6/9 right.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from .models import (
    AnchoredPlacement,
    FlowPlacement,
    Point,
    ResolvedStyle,
    Rotation,
    ScriptParams,
    TrackFormat,
    ViewportScale,
)

DEFAULT_MARGIN = 10

# alignment -> (translate x %, translate y %) so the anchor point lands on that corner/edge
ANCHOR_TRANSLATIONS: Dict[int, Tuple[float, float]] = {
    1: (0.0, -100.0),
    2: (-50.0, -100.0),
    3: (-100.0, -100.0),
    4: (0.0, -50.0),
    5: (-50.0, -50.0),
    6: (-100.0, -50.0),
    7: (0.0, 0.0),
    8: (-50.0, 0.0),
    9: (-100.0, 0.0),
}


def vertical_row(alignment: int) -> str:
    if alignment in (7, 8, 9):
        return "top"
    if alignment in (4, 5, 6):
        return "middle"
    return "bottom"


def horizontal_column(alignment: int) -> str:
    if alignment in (1, 4, 7):
        return "left"
    if alignment in (3, 6, 9):
        return "right"
    return "center"


class LayoutEngine:
    """Turn resolved styles and animated positions into viewport placements."""

    def __init__(self, default_margin: int = DEFAULT_MARGIN) -> None:
        self.default_margin = default_margin

    @staticmethod
    def viewport_scale(
        width: float,
        height: float,
        params: ScriptParams,
        track_format: TrackFormat,
    ) -> ViewportScale:
        if track_format is not TrackFormat.ASS:
            return ViewportScale()
        return ViewportScale(width / params.play_res_x, height / params.play_res_y)

    def anchored(
        self,
        position: Point,
        alignment: int,
        rotation: Optional[Rotation] = None,
    ) -> AnchoredPlacement:
        """Place an element so ``position`` (already scaled) is its alignment anchor."""
        tx, ty = ANCHOR_TRANSLATIONS.get(alignment, ANCHOR_TRANSLATIONS[5])
        return AnchoredPlacement(
            left=position.x,
            top=position.y,
            translate_x=tx,
            translate_y=ty,
            rotation=rotation,
        )

    def flow(self, style: ResolvedStyle, scale: ViewportScale, viewport_height: float) -> FlowPlacement:
        margin_l = self._margin(style.margin_l) * scale.x
        margin_r = self._margin(style.margin_r) * scale.x
        margin_v = self._margin(style.margin_v) * scale.y

        row = vertical_row(style.alignment)
        column = horizontal_column(style.alignment)

        top: Optional[float] = None
        bottom: Optional[float] = None
        translate_y = 0.0
        if row == "top":
            top = margin_v
        elif row == "middle":
            top = viewport_height / 2
            translate_y = -50.0
        else:
            bottom = margin_v

        if column == "left":
            return FlowPlacement(
                vertical=row, horizontal=column, text_align="left",
                top=top, bottom=bottom, left=margin_l, translate_y=translate_y,
            )
        if column == "right":
            return FlowPlacement(
                vertical=row, horizontal=column, text_align="right",
                top=top, bottom=bottom, right=margin_r, translate_y=translate_y,
            )
        return FlowPlacement(
            vertical=row,
            horizontal=column,
            text_align="center",
            top=top,
            bottom=bottom,
            left=0.0,
            padding_left=margin_l,
            padding_right=margin_r,
            full_width=True,
            translate_y=translate_y,
        )

    def _margin(self, value: Optional[int]) -> float:
        return float(value) if value is not None else float(self.default_margin)
