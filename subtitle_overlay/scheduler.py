"""Active-cue selection with change detection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import Cue


@dataclass(frozen=True)
class ScheduleResult:
    active: Tuple[Cue, ...]
    changed: bool


class CueScheduler:
    """Filter the cue list by playback time and report when the active set changes.

    A cue is active on the closed interval ``[start, end]``, so touching cues
    are both active at the shared boundary. Only the fingerprint of the active
    set is compared between ticks; animated properties must still be
    recomputed by the caller on every tick.
    """

    def __init__(self, cues: Sequence[Cue] = ()) -> None:
        self._cues: Tuple[Cue, ...] = tuple(cues)
        self._fingerprint: Tuple[Tuple[str, float], ...] = ()
        self._active: Tuple[Cue, ...] = ()

    @property
    def active(self) -> Tuple[Cue, ...]:
        return self._active

    def replace_cues(self, cues: Sequence[Cue]) -> None:
        self._cues = tuple(cues)
        self.reset()

    def reset(self) -> None:
        self._fingerprint = ()
        self._active = ()

    def evaluate(self, time: float) -> ScheduleResult:
        active = tuple(cue for cue in self._cues if cue.is_active(time))
        fingerprint = tuple(cue.identity for cue in active)
        changed = fingerprint != self._fingerprint
        if changed:
            self._fingerprint = fingerprint
            self._active = active
        return ScheduleResult(active=self._active, changed=changed)
