"""Data models for the startlist generator."""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum


class Anchor(Enum):
    CURRENT = "current"
    TOP = "top"
    BOTTOM = "bottom"


# Order of the three groups inside a settled window
_GROUP_ORDER = {Anchor.BOTTOM: 0, Anchor.CURRENT: 1, Anchor.TOP: 2}


@dataclass(eq=False)
class Competitor:
    """A competitor waiting for a start time.

    hops counts window boundaries crossed by migration: negative for net
    moves into earlier windows, positive for later ones. anchor is the edge
    of the current window the competitor is pinned to, i.e. the edge facing
    the boundary it last crossed. When not given it follows the sign of
    hops (negative pins to the top edge, positive to the bottom edge).
    """
    name: str
    hops: int = 0
    anchor: Anchor | None = None

    def __post_init__(self):
        if self.anchor is None:
            if self.hops < 0:
                self.anchor = Anchor.TOP
            elif self.hops > 0:
                self.anchor = Anchor.BOTTOM
            else:
                self.anchor = Anchor.CURRENT

    def cross(self, step: int):
        """Record one move: step is -1 (previous window) or +1 (next window)."""
        self.hops += step
        if self.hops == 0:
            self.anchor = Anchor.CURRENT
        elif step < 0:
            self.anchor = Anchor.TOP
        else:
            self.anchor = Anchor.BOTTOM

    @property
    def migrated(self) -> bool:
        return self.hops != 0


@dataclass
class CompetitorWithOffset:
    """A competitor with its start offset from the beginning of the event."""
    competitor: Competitor
    offset: int

    @property
    def name(self) -> str:
        return self.competitor.name


def window_spacing(duration: int, count: int) -> float:
    """Average gap between starts; an empty window offers its whole duration."""
    if count == 0:
        return float(duration)
    return duration / count


@dataclass
class Window:
    """A fixed-duration time span and the competitors starting inside it."""
    duration: int
    competitors: deque[Competitor] = field(default_factory=deque)
    label: str = ""

    def __post_init__(self):
        if not isinstance(self.competitors, deque):
            self.competitors = deque(self.competitors)

    @property
    def count(self) -> int:
        return len(self.competitors)

    def spacing(self) -> float:
        return window_spacing(self.duration, self.count)

    def spacing_after(self, delta: int) -> float:
        """Spacing this window would have with delta more competitors."""
        return window_spacing(self.duration, self.count + delta)

    def settle(self):
        """Restore the bottom / current / top partition, keeping relative order."""
        ordered = sorted(self.competitors, key=lambda c: _GROUP_ORDER[c.anchor])
        self.competitors = deque(ordered)

    def is_settled(self) -> bool:
        groups = [_GROUP_ORDER[c.anchor] for c in self.competitors]
        return groups == sorted(groups)


def window_starts(windows: list[Window]) -> list[int]:
    """Start offset of each window; windows are back to back from 0."""
    starts = []
    total = 0
    for w in windows:
        starts.append(total)
        total += w.duration
    return starts


def total_duration(windows: list[Window]) -> int:
    return sum(w.duration for w in windows)


def total_competitors(windows: list[Window]) -> int:
    return sum(w.count for w in windows)
