"""Helpers for resolving render defaults from configuration."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from logging_utils import get_logger

from .colors import Rgba

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderDefaults:
    font_size: float
    font_family: str
    outline_width: float
    margin: int
    alignment: int
    play_res_x: int
    play_res_y: int
    primary_color: Rgba
    outline_color: Rgba
    shadow_color: Rgba
    viewport_width: int
    viewport_height: int


_COMMON_DEFAULTS: Dict[str, Any] = {
    "font_size": 20.0,
    "font_family": "Arial, sans-serif",
    "outline_width": 1.0,
    "margin": 10,
    "alignment": 2,
    "play_res_x": 384,
    "play_res_y": 288,
    "primary_color": "white",
    "outline_color": "black",
    "shadow_color": "#00000080",
    "viewport_width": 1280,
    "viewport_height": 720,
}


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int, *, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= minimum else default


def _to_color(value: Any, default: str) -> Rgba:
    try:
        return Rgba.from_name(str(value))
    except ValueError:
        logger.warning("Invalid colour %r in render config; using %s", value, default)
        return Rgba.from_name(default)


def resolve_render_defaults(render_cfg: Dict[str, Any] | None = None) -> RenderDefaults:
    cfg = render_cfg if isinstance(render_cfg, dict) else {}
    merged: Dict[str, Any] = dict(_COMMON_DEFAULTS)
    merged.update({k: v for k, v in cfg.items() if v is not None})

    alignment = _to_int(merged.get("alignment"), _COMMON_DEFAULTS["alignment"], minimum=1)
    if alignment > 9:
        alignment = _COMMON_DEFAULTS["alignment"]

    return RenderDefaults(
        font_size=_to_float(merged.get("font_size"), _COMMON_DEFAULTS["font_size"]),
        font_family=str(merged.get("font_family") or _COMMON_DEFAULTS["font_family"]),
        outline_width=_to_float(merged.get("outline_width"), _COMMON_DEFAULTS["outline_width"]),
        margin=_to_int(merged.get("margin"), _COMMON_DEFAULTS["margin"]),
        alignment=alignment,
        play_res_x=_to_int(merged.get("play_res_x"), _COMMON_DEFAULTS["play_res_x"], minimum=1),
        play_res_y=_to_int(merged.get("play_res_y"), _COMMON_DEFAULTS["play_res_y"], minimum=1),
        primary_color=_to_color(merged.get("primary_color"), _COMMON_DEFAULTS["primary_color"]),
        outline_color=_to_color(merged.get("outline_color"), _COMMON_DEFAULTS["outline_color"]),
        shadow_color=_to_color(merged.get("shadow_color"), _COMMON_DEFAULTS["shadow_color"]),
        viewport_width=_to_int(merged.get("viewport_width"), _COMMON_DEFAULTS["viewport_width"], minimum=1),
        viewport_height=_to_int(merged.get("viewport_height"), _COMMON_DEFAULTS["viewport_height"], minimum=1),
    )
