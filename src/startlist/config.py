"""Config loading and validation for the startlist generator."""

from datetime import datetime, time
from pathlib import Path

import yaml

from startlist.models import Competitor, Window

DEFAULT_SPACING_THRESHOLD = 3
DEFAULT_MIN_SPACING = 2
DEFAULT_START_TIME = time(9, 0)


def parse_time(s: str) -> time:
    """Parse time strings like '9am', '5:30pm', '17:00', '9:00:30'."""
    s = s.strip()
    s_lower = s.lower()

    is_pm = s_lower.endswith("pm")
    is_am = s_lower.endswith("am")

    # Strip am/pm suffix
    s_clean = s_lower
    if is_pm or is_am:
        s_clean = s_clean[:-2].strip()

    parts = [int(p) for p in s_clean.split(":")]
    h = parts[0]
    m = parts[1] if len(parts) > 1 else 0
    sec = parts[2] if len(parts) > 2 else 0

    if is_pm and h < 12:
        h += 12
    elif is_am and h == 12:
        h = 0

    return time(h, m, sec)


def parse_duration(value) -> int:
    """Parse a duration in minutes: 30, '30', '45m', '2h', '1:30'."""
    if isinstance(value, int):
        return value
    s = str(value).strip().lower()
    if ":" in s:
        h, m = s.split(":")
        return int(h) * 60 + int(m)
    if s.endswith("h"):
        return int(s[:-1].strip()) * 60
    if s.endswith("m"):
        return int(s[:-1].strip())
    return int(s)


def _minutes_between(start: time, end: time) -> int:
    day = datetime(2000, 1, 1)
    delta = datetime.combine(day, end) - datetime.combine(day, start)
    return int(delta.total_seconds() // 60)


def _parse_int(data: dict, key: str, default: int, errors: list[str]) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"event: {key} must be an integer, got {value!r}")
        return default


def _parse_window(index: int, wdata: dict, errors: list[str]) -> Window | None:
    label = str(wdata.get("label", f"Window {index + 1}"))

    if "duration" in wdata:
        try:
            duration = parse_duration(wdata["duration"])
        except ValueError:
            errors.append(f"{label}: bad duration {wdata['duration']!r}")
            return None
    elif "start" in wdata and "end" in wdata:
        try:
            start = parse_time(str(wdata["start"]))
            end = parse_time(str(wdata["end"]))
        except ValueError:
            errors.append(f"{label}: bad start/end {wdata['start']!r} "
                          f"- {wdata['end']!r}")
            return None
        duration = _minutes_between(start, end)
        if duration <= 0:
            errors.append(f"{label}: end {wdata['end']} is not after "
                          f"start {wdata['start']}")
            return None
    else:
        errors.append(f"{label}: needs a duration or start/end times")
        return None

    if duration < 0:
        errors.append(f"{label}: negative duration {duration}")
        return None

    names = wdata.get("competitors") or []
    if isinstance(names, int):
        # Placeholder entrants: Early-1, Early-2, ... for competitors: 2
        names = [f"{label}-{i}" for i in range(1, names + 1)]
    competitors = [Competitor(name=str(n)) for n in names]

    return Window(duration=duration, competitors=competitors, label=label)


def load_config(path: str | Path) -> dict:
    """Load and validate config YAML, returning structured data.

    Returns dict with:
    - event: {name, start_time, spacing_threshold, min_spacing, seed}
    - windows: list[Window] in time order

    Raises ValueError listing every problem found.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return parse_config(raw)


def parse_config(raw: dict) -> dict:
    """Build event settings and windows from already-parsed YAML."""
    errors = []

    # Event
    edata = raw.get("event", {}) or {}
    start_time = DEFAULT_START_TIME
    if "start_time" in edata:
        try:
            start_time = parse_time(str(edata["start_time"]))
        except ValueError:
            errors.append(f"event: bad start_time {edata['start_time']!r}")

    event = {
        "name": edata.get("name", ""),
        "start_time": start_time,
        "spacing_threshold": _parse_int(edata, "spacing_threshold",
                                        DEFAULT_SPACING_THRESHOLD, errors),
        "min_spacing": _parse_int(edata, "min_spacing",
                                  DEFAULT_MIN_SPACING, errors),
        "seed": edata.get("seed"),
    }
    if event["spacing_threshold"] < 0:
        errors.append("event: spacing_threshold must be >= 0")
    if event["min_spacing"] < 0:
        errors.append("event: min_spacing must be >= 0")
    if event["min_spacing"] > event["spacing_threshold"]:
        print(f"Warning: min_spacing {event['min_spacing']} is larger than "
              f"spacing_threshold {event['spacing_threshold']}")

    # Windows
    raw_windows = raw.get("windows") or []
    if not raw_windows:
        errors.append("no windows defined")

    windows = []
    for i, wdata in enumerate(raw_windows):
        if not isinstance(wdata, dict):
            errors.append(f"Window {i + 1}: expected a mapping, got {wdata!r}")
            continue
        window = _parse_window(i, wdata, errors)
        if window is not None:
            windows.append(window)

    if edata.get("reverse_windows", False):
        # File lists the latest window first
        windows.reverse()

    if errors:
        raise ValueError("Config validation errors:\n" + "\n".join(
            f"  {e}" for e in errors
        ))

    return {
        "event": event,
        "windows": windows,
    }
