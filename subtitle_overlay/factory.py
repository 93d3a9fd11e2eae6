"""Build a configured ``SubtitleOverlay`` from a YAML config file."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from config_loader import load_config
from logging_utils import configure_logging, get_logger

from .overlay import Clock, Notifier, PresentationSurface, SubtitleOverlay
from .settings import resolve_render_defaults
from .track_sources import make_track_source

logger = get_logger(__name__)


def build_overlay(
    config_path: Path | str,
    surface: PresentationSurface,
    *,
    notifier: Optional[Notifier] = None,
    clock: Optional[Clock] = None,
    configure_logs: bool = True,
) -> SubtitleOverlay:
    config = load_config(config_path)
    if configure_logs:
        configure_logging(config.logging_level, config.log_file)
    logger.debug("Overlay config: %s", config.dumps())

    return SubtitleOverlay(
        surface,
        make_track_source(config.raw),
        defaults=resolve_render_defaults(config.render),
        notifier=notifier,
        clock=clock,
    )
