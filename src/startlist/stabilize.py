"""Window shuffling and stabilization for the startlist generator.

Stabilization moves competitors one at a time across a single window
boundary, out of windows whose spacing is at or below the spacing threshold
and into the neighbour that relieves them most. A competitor leaving through
the start of its window lands at the end of the previous window (pinned to
its top edge); one leaving through the end lands at the start of the next
window (pinned to its bottom edge).

Each accepted move strictly raises the smallest spacing of the two windows
involved, so the sorted list of window spacings grows lexicographically with
every move and the sweeps reach a fixed point.
"""

import random
from dataclasses import dataclass

from startlist.models import Window, total_competitors


class StabilizationError(RuntimeError):
    """Stabilization did not reach a fixed point within the sweep limit."""


@dataclass
class StabilizationResult:
    sweeps: int = 0
    moves: int = 0


def shuffle_windows(windows: list[Window], rng: random.Random):
    """Shuffle the competitors inside each window independently.

    Anchored competitors stay at their edge of the window.
    """
    for window in windows:
        if window.count < 2:
            continue
        shuffled = list(window.competitors)
        rng.shuffle(shuffled)
        window.competitors.clear()
        window.competitors.extend(shuffled)
        window.settle()


def is_candidate(window: Window, spacing_threshold: int) -> bool:
    """True if the window is packed at or below the threshold."""
    return window.count > 0 and window.spacing() <= spacing_threshold


def move_gain(windows: list[Window], i: int, j: int) -> tuple[float, float]:
    """Score moving one competitor from window i to its neighbour j.

    First element is the rise of the pair's smaller spacing (positive means
    the move helps); the second is the neighbour's spacing after the move and
    separates neighbours that relieve window i equally.
    """
    donor, receiver = windows[i], windows[j]
    receiver_after = receiver.spacing_after(1)
    donor_after = donor.spacing_after(-1)
    return min(receiver_after, donor_after) - donor.spacing(), receiver_after


def move_to_previous(windows: list[Window], i: int):
    """Move the first competitor of window i to the end of window i-1."""
    if i <= 0:
        raise IndexError(f"window {i} has no previous window")
    competitor = windows[i].competitors.popleft()
    competitor.cross(-1)
    windows[i - 1].competitors.append(competitor)
    windows[i - 1].settle()
    windows[i].settle()


def move_to_next(windows: list[Window], i: int):
    """Move the last competitor of window i to the start of window i+1."""
    if i >= len(windows) - 1:
        raise IndexError(f"window {i} has no next window")
    competitor = windows[i].competitors.pop()
    competitor.cross(1)
    windows[i + 1].competitors.appendleft(competitor)
    windows[i + 1].settle()
    windows[i].settle()


def stabilize_window(windows: list[Window], i: int, spacing_threshold: int,
                     rng: random.Random) -> bool:
    """Perform at most one relieving move out of window i.

    Returns True if a competitor was moved.
    """
    if not is_candidate(windows[i], spacing_threshold):
        return False

    options = []
    if i > 0:
        options.append((move_gain(windows, i, i - 1), move_to_previous))
    if i < len(windows) - 1:
        options.append((move_gain(windows, i, i + 1), move_to_next))

    options = [(gain, move) for gain, move in options if gain[0] > 0]
    if not options:
        return False

    if len(options) == 2 and options[0][0] == options[1][0]:
        # Neighbours tie exactly: coin flip
        _, move = options[rng.randrange(2)]
    else:
        _, move = max(options, key=lambda o: o[0])
    move(windows, i)
    return True


def stabilize_windows(windows: list[Window], spacing_threshold: int,
                      rng: random.Random,
                      max_sweeps: int | None = None) -> StabilizationResult:
    """Sweep over all windows until no window can be relieved.

    Every sweep starts at a random window and wraps around, and lets each
    window shed at most one competitor. Raises StabilizationError if
    max_sweeps (default: (competitors + 1) x windows squared) is exceeded.
    """
    result = StabilizationResult()
    n = len(windows)
    if n < 2:
        return result

    if max_sweeps is None:
        max_sweeps = (total_competitors(windows) + 1) * n * n

    while True:
        if result.sweeps >= max_sweeps:
            raise StabilizationError(
                f"no fixed point after {result.sweeps} sweeps "
                f"({result.moves} moves)"
            )
        result.sweeps += 1
        start = rng.randrange(n)
        moved = 0
        for k in range(n):
            if stabilize_window(windows, (start + k) % n, spacing_threshold, rng):
                moved += 1
        result.moves += moved
        if moved == 0:
            return result
