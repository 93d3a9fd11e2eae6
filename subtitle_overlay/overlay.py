"""Overlay controller: track loading, playback ticks and viewport resizes."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from logging_utils import get_logger

from .animation import AnimationEngine
from .ass_parser import parse_ass
from .layout import LayoutEngine
from .models import (
    Cue,
    FontDescriptor,
    RenderInstruction,
    ResolvedStyle,
    ScriptParams,
    Track,
    TrackFormat,
    ViewportScale,
)
from .resolver import PresentationResolver
from .scheduler import CueScheduler
from .settings import RenderDefaults, resolve_render_defaults
from .track_sources import TrackLoadError, TrackSource
from .vtt_parser import parse_vtt

logger = get_logger(__name__)

Notifier = Callable[[str], None]
Clock = Callable[[], float]


class PresentationSurface(Protocol):
    """The painting collaborator. It owns the pixels, the overlay owns the geometry."""

    def content_size(self) -> Tuple[float, float]:
        ...

    def replace_all(self, instructions: Sequence[RenderInstruction]) -> None:
        ...


@dataclass(frozen=True)
class _OverlayState:
    """Everything a tick reads, published as one reference."""

    track: Track
    enabled: bool = False
    scheduler: CueScheduler = field(default_factory=CueScheduler, compare=False)
    resolver: PresentationResolver = field(default_factory=PresentationResolver, compare=False)


class SubtitleOverlay:
    """Turn a subtitle track into render instructions for the current playback time."""

    def __init__(
        self,
        surface: PresentationSurface,
        source: TrackSource,
        *,
        config: Optional[Dict[str, Any]] = None,
        defaults: Optional[RenderDefaults] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        render_cfg = config.get("render") if isinstance(config, dict) else None
        self.surface = surface
        self.source = source
        self.defaults = defaults or resolve_render_defaults(render_cfg)
        self.notifier = notifier
        self.clock = clock
        self.animation = AnimationEngine()
        self.layout = LayoutEngine(self.defaults.margin)

        self._state_lock = threading.Lock()
        self._render_lock = threading.RLock()
        self._load_generation = 0
        self._state = self._empty_state()

        self._rendered_state: Optional[_OverlayState] = None
        self._resolved: List[Tuple[Cue, ResolvedStyle]] = []
        self._instructions: List[RenderInstruction] = []
        self._viewport: Optional[Tuple[float, float]] = None
        self._last_time: Optional[float] = None
        self._dirty = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def track(self) -> Track:
        return self._state.track

    @property
    def active_cues(self) -> Tuple[Cue, ...]:
        return tuple(cue for cue, _ in self._resolved)

    @property
    def instructions(self) -> List[RenderInstruction]:
        return list(self._instructions)

    def _empty_state(self) -> _OverlayState:
        return _OverlayState(track=Track(format=TrackFormat.VTT))

    def _next_generation(self) -> int:
        with self._state_lock:
            self._load_generation += 1
            return self._load_generation

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_track(self, identifier: str, track_format: Union[str, TrackFormat] = TrackFormat.VTT) -> bool:
        """Fetch, parse and install a track. Failures disable output instead of raising."""
        fmt = TrackFormat.parse(track_format)
        generation = self._next_generation()
        try:
            text = self.source.fetch_text(identifier)
        except TrackLoadError as exc:
            logger.error("Error loading subtitle track %s: %s", identifier, exc)
            if self.disable(generation):
                self._notify(f"Subtitles failed to load: {exc}")
            return False
        return self._install(self._parse(text, fmt), generation)

    def load_track_async(
        self, identifier: str, track_format: Union[str, TrackFormat] = TrackFormat.VTT
    ) -> threading.Thread:
        """Run ``load_track`` in the background; the newest load wins."""
        fmt = TrackFormat.parse(track_format)
        thread = threading.Thread(
            target=self.load_track,
            args=(identifier, fmt),
            name="subtitle-track-loader",
            daemon=True,
        )
        thread.start()
        return thread

    def load_text(self, text: str, track_format: Union[str, TrackFormat] = TrackFormat.VTT) -> bool:
        """Parse and install already-fetched track text."""
        fmt = TrackFormat.parse(track_format)
        generation = self._next_generation()
        return self._install(self._parse(text, fmt), generation)

    def _parse(self, text: str, fmt: TrackFormat) -> Track:
        if fmt is TrackFormat.ASS:
            params = ScriptParams(self.defaults.play_res_x, self.defaults.play_res_y)
            return parse_ass(text, params)
        return parse_vtt(text)

    def _install(self, track: Track, generation: int) -> bool:
        state = _OverlayState(
            track=track,
            enabled=True,
            scheduler=CueScheduler(track.cues),
            resolver=PresentationResolver(track.styles, self.defaults),
        )
        with self._state_lock:
            if generation != self._load_generation:
                logger.info("Discarding superseded subtitle track (%d cues)", len(track))
                return False
            self._state = state

        logger.info("Loaded %d cues (%s)", len(track), track.format.value)
        self._notify(f"Subtitles loaded: {len(track)} lines")
        self.refresh()
        return True

    def disable(self, generation: Optional[int] = None) -> bool:
        """Stop output, drop cues and styles and clear the surface.

        With ``generation`` the reset only happens while that load is still the
        newest one; returns whether the overlay was disabled.
        """
        with self._render_lock:
            with self._state_lock:
                if generation is not None and generation != self._load_generation:
                    logger.info("Ignoring failure of superseded subtitle load")
                    return False
                self._state = self._empty_state()
            self._rendered_state = None
            self._resolved = []
            self._instructions = []
            self._dirty = False
            self.surface.replace_all([])
        return True

    def _notify(self, message: str) -> None:
        if self.notifier is not None:
            self.notifier(message)

    # ------------------------------------------------------------------
    # Host entry points
    # ------------------------------------------------------------------
    def refresh(self) -> List[RenderInstruction]:
        """Re-render at the host clock time, or the last ticked time."""
        if self.clock is not None:
            return self.tick(self.clock())
        if self._last_time is not None:
            return self.tick(self._last_time)
        return self.instructions

    def tick(self, time: Optional[float] = None) -> List[RenderInstruction]:
        """Evaluate the track at ``time`` and push instructions when anything visible changed."""
        if time is None:
            if self.clock is None:
                raise ValueError("tick() needs a playback time when no clock is configured")
            time = self.clock()

        with self._render_lock:
            state = self._state
            if not state.enabled:
                return []
            if state is not self._rendered_state:
                self._rendered_state = state
                self._resolved = []
                self._dirty = True

            self._last_time = time
            result = state.scheduler.evaluate(time)
            if result.changed:
                self._resolved = [(cue, state.resolver.resolve(cue)) for cue in result.active]

            animated = any(cue.is_animated for cue, _ in self._resolved)
            if not (result.changed or self._dirty or animated):
                return self.instructions
            return self._render(state, time)

    def resize(self, width: Optional[float] = None, height: Optional[float] = None) -> List[RenderInstruction]:
        """Record a viewport change and re-render the current active set, if any."""
        with self._render_lock:
            if width and height:
                self._viewport = (float(width), float(height))
            else:
                self._viewport = None
            self._dirty = True

            state = self._state
            if not state.enabled or not self._resolved or self._last_time is None:
                return self.instructions
            if state is not self._rendered_state:
                return self.tick(self._last_time)
            return self._render(state, self._last_time)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def viewport_size(self) -> Tuple[float, float]:
        if self._viewport is not None:
            return self._viewport
        width, height = self.surface.content_size()
        if not width or not height:
            return float(self.defaults.viewport_width), float(self.defaults.viewport_height)
        return float(width), float(height)

    def _render(self, state: _OverlayState, time: float) -> List[RenderInstruction]:
        width, height = self.viewport_size()
        track = state.track
        scale = self.layout.viewport_scale(width, height, track.params, track.format)

        self._instructions = [
            self._build_instruction(cue, style, time, scale, height) for cue, style in self._resolved
        ]
        self._dirty = False
        self.surface.replace_all(list(self._instructions))
        return self.instructions

    def _build_instruction(
        self,
        cue: Cue,
        style: ResolvedStyle,
        time: float,
        scale: ViewportScale,
        viewport_height: float,
    ) -> RenderInstruction:
        props = self.animation.animate(cue, time, scale)
        if props.position is not None:
            placement = self.layout.anchored(props.position, style.alignment, style.rotation)
        else:
            placement = self.layout.flow(style, scale, viewport_height)

        return RenderInstruction(
            text=cue.text,
            format=cue.format,
            placement=placement,
            color=style.primary_color,
            outline_color=style.outline_color,
            shadow_color=style.shadow_color,
            font=FontDescriptor(
                family=style.font_family,
                size=style.font_size * scale.y,
                bold=style.bold,
                italic=style.italic,
            ),
            outline_width=style.outline_width * scale.x,
            shadow_distance=style.shadow_distance * scale.y,
            blur=style.blur * scale.y,
            opacity=props.opacity,
            rotation=style.rotation,
            html=cue.html,
        )
