from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from subtitle_overlay.colors import Rgba  # noqa: E402
from subtitle_overlay.models import Cue, Overrides, StyleEntry, TrackFormat  # noqa: E402
from subtitle_overlay.resolver import PresentationResolver  # noqa: E402
from subtitle_overlay.settings import resolve_render_defaults  # noqa: E402


def _style(**columns: str) -> StyleEntry:
    base = {"Name": "Default"}
    base.update(columns)
    return StyleEntry.from_columns(base)


def _ass_cue(style_name: str | None = None, overrides: Overrides | None = None) -> Cue:
    return Cue(
        start=0,
        end=1,
        format=TrackFormat.ASS,
        text="line",
        raw_text="line",
        style_name=style_name,
        overrides=overrides,
    )


def test_defaults_apply_without_styles() -> None:
    resolved = PresentationResolver().resolve(_ass_cue())

    assert resolved.alignment == 2
    assert resolved.font_size == 20.0
    assert resolved.font_family == "Arial, sans-serif"
    assert resolved.primary_color == Rgba(255, 255, 255, 1.0)
    assert resolved.outline_width == 1.0
    assert resolved.shadow_distance == 0.0
    assert resolved.blur == 0.0
    assert resolved.bold is False
    assert resolved.margin_v is None


def test_unknown_style_falls_back_to_default_entry() -> None:
    styles = {"Default": _style(Fontname="Verdana", Fontsize="32", Bold="-1")}
    resolved = PresentationResolver(styles).resolve(_ass_cue("Missing"))

    assert resolved.font_family == "Verdana"
    assert resolved.font_size == 32.0
    assert resolved.bold is True


def test_named_style_is_used() -> None:
    styles = {
        "Default": _style(Fontname="Verdana"),
        "Sign": _style(Name="Sign", Fontname="Georgia", Alignment="8", MarginV="0"),
    }
    resolved = PresentationResolver(styles).resolve(_ass_cue("Sign"))

    assert resolved.font_family == "Georgia"
    assert resolved.alignment == 8
    assert resolved.margin_v == 0


def test_overrides_take_precedence_over_style() -> None:
    styles = {
        "Default": _style(
            PrimaryColour="&H000000FF",
            Fontsize="32",
            Alignment="2",
            Outline="3",
            BackColour="&H80000000",
        )
    }
    overrides = Overrides(
        alignment=7,
        color=Rgba(0, 255, 0),
        font_size=48.0,
        border=0.0,
        shadow=2.0,
        blur=1.5,
    )
    resolved = PresentationResolver(styles).resolve(_ass_cue(overrides=overrides))

    assert resolved.alignment == 7
    assert resolved.primary_color == Rgba(0, 255, 0)
    assert resolved.font_size == 48.0
    assert resolved.outline_width == 0.0
    assert resolved.shadow_distance == 2.0
    assert resolved.blur == 1.5


def test_style_colours_and_shadow_heuristic() -> None:
    styles = {"Default": _style(PrimaryColour="&H000000FF", BackColour="&H80000000")}
    resolved = PresentationResolver(styles).resolve(_ass_cue())

    assert resolved.primary_color == Rgba(255, 0, 0, 1.0)
    assert resolved.shadow_color == Rgba(0, 0, 0, 0.5)
    assert resolved.shadow_distance == 1.0


def test_non_positive_font_size_uses_default() -> None:
    defaults = resolve_render_defaults({"font_size": 26})
    styles = {"Default": _style(Fontsize="0")}
    resolved = PresentationResolver(styles, defaults).resolve(_ass_cue())
    assert resolved.font_size == 26.0


def test_out_of_range_alignment_is_ignored() -> None:
    styles = {"Default": _style(Alignment="12")}
    assert PresentationResolver(styles).resolve(_ass_cue()).alignment == 2
