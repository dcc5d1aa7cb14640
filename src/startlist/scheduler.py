"""Main startlist engine.

Three phases:
1. Shuffle: random order inside each window
2. Stabilize: migrate competitors out of windows packed at or below the
   spacing threshold (stabilize.py)
3. Assign offsets: walk the windows in time order and give every
   competitor an integer start offset

Offsets count time units from the start of the first window. Windows are
back to back; window i starts at the sum of the durations before it.
"""

import math
import random

from startlist.models import (
    Anchor, CompetitorWithOffset, Window,
    total_competitors, total_duration,
)
from startlist.stabilize import shuffle_windows, stabilize_windows


def validate_windows(windows: list[Window], spacing_threshold: int,
                     min_spacing: int):
    """Raise ValueError on input the engine cannot schedule."""
    errors = []
    if spacing_threshold < 0:
        errors.append(f"spacing threshold must be >= 0, got {spacing_threshold}")
    if min_spacing < 0:
        errors.append(f"min spacing must be >= 0, got {min_spacing}")
    for i, window in enumerate(windows):
        name = window.label or f"#{i + 1}"
        if window.duration < 0:
            errors.append(f"window {name} has negative duration {window.duration}")
        if not window.is_settled():
            errors.append(f"window {name} has anchored competitors out of place")
    if errors:
        raise ValueError("; ".join(errors))


def _split_anchored(window: Window):
    """Split a settled window into (bottom, current, top) lists."""
    bottom, current, top = [], [], []
    for competitor in window.competitors:
        anchor = competitor.anchor
        if anchor == Anchor.BOTTOM:
            if current or top:
                raise ValueError(
                    f"bottom-anchored {competitor.name} after the window start"
                )
            bottom.append(competitor)
        elif anchor == Anchor.CURRENT:
            if top:
                raise ValueError(
                    f"unanchored {competitor.name} after a top-anchored competitor"
                )
            current.append(competitor)
        else:
            top.append(competitor)
    return bottom, current, top


def assign_offsets(windows: list[Window], spacing_threshold: int,
                   min_spacing: int,
                   rng: random.Random) -> list[CompetitorWithOffset]:
    """Give every competitor a start offset, window by window.

    Within a window, competitors pinned to the bottom edge start first,
    spacing_threshold apart from the running cursor. Competitors pinned to
    the top edge end the window, spacing_threshold apart and counting back
    from its last unit. Unanchored competitors share the room in between:
    the integer gap is clamped to min_spacing, and the division remainder
    is spread with weighted coin flips so the last gap lands exactly on the
    boundary.

    Starts never go back past the cursor. When a window is too full for its
    duration the top edge is pushed forward past the unanchored starts, and
    the next window picks up after the last start.

    Returns entries sorted by offset.
    """
    entries: list[CompetitorWithOffset] = []
    cursor = 0
    window_start = 0

    for window in windows:
        window_end = window_start + window.duration
        if window.count == 0:
            cursor = max(cursor, window_end)
            window_start = window_end
            continue

        bottom, current, top = _split_anchored(window)

        # Bottom edge: consecutive threshold steps from the cursor
        offset = cursor
        for competitor in bottom:
            entries.append(CompetitorWithOffset(competitor, offset))
            offset += spacing_threshold
        if bottom:
            # Back off to the last bottom start
            offset -= spacing_threshold
        lower = offset

        # Top edge: counted back from the window's last unit, not below lower
        upper = window_end
        if top:
            upper = max(window_end - 1 - spacing_threshold * (len(top) - 1),
                        lower)

        last_offset = lower
        step = spacing_threshold
        if current:
            gaps = len(current) + (1 if bottom else 0)
            spacing, remainder = divmod(upper - lower, gaps)
            if spacing < min_spacing:
                spacing, remainder = min_spacing, 0
            spacing = max(spacing, 0)

            gaps_left = gaps
            offset = lower
            for k, competitor in enumerate(current):
                if k > 0 or bottom:
                    gap = spacing
                    if remainder and rng.random() < remainder / gaps_left:
                        gap += 1
                        remainder -= 1
                    gaps_left -= 1
                    offset += gap
                entries.append(CompetitorWithOffset(competitor, offset))
            last_offset = offset
            step = spacing

        if top:
            offset = upper
            if bottom or current:
                offset = max(offset, last_offset + step)
            for competitor in top:
                entries.append(CompetitorWithOffset(competitor, offset))
                offset += spacing_threshold
            last_offset = offset - spacing_threshold
            step = spacing_threshold

        cursor = max(last_offset + step, window_end)
        window_start = window_end

    entries.sort(key=lambda e: e.offset)
    return entries


def generate_startlist(windows: list[Window], spacing_threshold: int,
                       min_spacing: int,
                       rng: random.Random | None = None,
                       seed: int | None = None,
                       max_sweeps: int | None = None,
                       verbose: bool = True) -> list[CompetitorWithOffset]:
    """Generate a complete startlist.

    The windows are shuffled and stabilized in place. Pass either a
    random.Random as rng or a seed; a fixed seed gives a reproducible
    startlist.

    Returns entries sorted by offset.
    """
    if rng is None:
        rng = random.Random(seed)

    validate_windows(windows, spacing_threshold, min_spacing)

    count = total_competitors(windows)
    if count == 0:
        if verbose:
            print("  No competitors, empty startlist")
        return []

    shuffle_windows(windows, rng)

    duration = total_duration(windows)
    result = stabilize_windows(windows, spacing_threshold, rng,
                               max_sweeps=max_sweeps)
    if verbose:
        print(f"  Stabilized: {result.sweeps} sweeps, {result.moves} moves")
        event_spacing = math.ceil(duration / count)
        if event_spacing <= spacing_threshold:
            print(f"  Event spacing {event_spacing} <= threshold "
                  f"{spacing_threshold}, some windows stay dense")

    entries = assign_offsets(windows, spacing_threshold, min_spacing, rng)

    if verbose:
        print(f"  Total competitors scheduled: {len(entries)}")
        if entries:
            print(f"  Last start at offset {entries[-1].offset} "
                  f"(event length {duration})")
    return entries
