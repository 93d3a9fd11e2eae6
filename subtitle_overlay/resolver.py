"""Merge style-table entries with inline overrides into a resolved cue style."""
from __future__ import annotations

from typing import Mapping, Optional

from .colors import decode_ass_color
from .models import Cue, Overrides, ResolvedStyle, StyleEntry
from .settings import RenderDefaults, resolve_render_defaults

_EMPTY_OVERRIDES = Overrides()
_EMPTY_STYLE = StyleEntry(name="")


class PresentationResolver:
    """Resolve the visual style of a cue against a style table."""

    def __init__(
        self,
        styles: Mapping[str, StyleEntry] | None = None,
        defaults: RenderDefaults | None = None,
    ) -> None:
        self.styles: Mapping[str, StyleEntry] = styles or {}
        self.defaults = defaults or resolve_render_defaults()

    def style_for(self, cue: Cue) -> StyleEntry:
        if cue.style_name and cue.style_name in self.styles:
            return self.styles[cue.style_name]
        return self.styles.get("Default", _EMPTY_STYLE)

    def resolve(self, cue: Cue) -> ResolvedStyle:
        style = self.style_for(cue)
        ov = cue.overrides or _EMPTY_OVERRIDES
        defaults = self.defaults

        primary = ov.color or decode_ass_color(style.primary_colour) or defaults.primary_color
        outline_color = decode_ass_color(style.outline_colour) or defaults.outline_color
        shadow_color = decode_ass_color(style.back_colour) or defaults.shadow_color

        return ResolvedStyle(
            alignment=_first(ov.alignment, style.alignment, defaults.alignment),
            primary_color=primary,
            outline_color=outline_color,
            shadow_color=shadow_color,
            font_family=ov.font_name or style.font_name or defaults.font_family,
            font_size=_first(_positive(ov.font_size), _positive(style.font_size), defaults.font_size),
            bold=style.bold,
            italic=style.italic,
            outline_width=_first(ov.border, style.outline, defaults.outline_width),
            shadow_distance=_first(ov.shadow, 1.0 if style.back_colour else 0.0),
            blur=_first(ov.blur, 0.0),
            margin_l=style.margin_l,
            margin_r=style.margin_r,
            margin_v=style.margin_v,
            rotation=ov.rotation,
        )


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _positive(value: Optional[float]) -> Optional[float]:
    return value if value is not None and value > 0 else None
