"""Output formatters for the startlist generator."""

import csv
from bisect import bisect_right
from datetime import datetime, time, timedelta
from io import StringIO

from startlist.models import CompetitorWithOffset, Window, window_starts


def offset_to_time(start_time: time, offset: int) -> time:
    """Wall-clock time of an offset in minutes, wrapping past midnight."""
    anchor = datetime.combine(datetime(2000, 1, 1), start_time)
    return (anchor + timedelta(minutes=offset)).time()


def window_index(windows: list[Window], offset: int) -> int:
    """Index of the window containing offset; overflow counts as the last."""
    starts = window_starts(windows)
    return max(bisect_right(starts, offset) - 1, 0)


def format_startlist(entries: list[CompetitorWithOffset], start_time: time,
                     title: str = "",
                     windows: list[Window] | None = None) -> str:
    """Format the startlist as numbered text, optionally grouped by window."""
    lines = []
    lines.append("=" * 60)
    lines.append((title or "STARTLIST").upper())
    lines.append("=" * 60)

    for i, entry in enumerate(entries, 1):
        t = offset_to_time(start_time, entry.offset)
        lines.append(
            f"[{i}] Competitor: {entry.name}, time: {t.strftime('%H:%M:%S')}"
        )

    if windows:
        by_window: dict[int, list[CompetitorWithOffset]] = {}
        for entry in entries:
            by_window.setdefault(window_index(windows, entry.offset),
                                 []).append(entry)

        lines.append("\n--- BY WINDOW ---")
        starts = window_starts(windows)
        for idx, window in enumerate(windows):
            begin = offset_to_time(start_time, starts[idx])
            end = offset_to_time(start_time, starts[idx] + window.duration)
            label = window.label or f"Window {idx + 1}"
            window_entries = by_window.get(idx, [])
            lines.append(
                f"\n  {label} {begin.strftime('%H:%M')}-{end.strftime('%H:%M')}"
                f" ({len(window_entries)} starts)"
            )
            for entry in window_entries:
                t = offset_to_time(start_time, entry.offset)
                moved = ""
                if entry.competitor.migrated:
                    moved = f"  [{entry.competitor.anchor.value} {entry.competitor.hops:+d}]"
                lines.append(f"    {t.strftime('%H:%M')}  {entry.name}{moved}")

    return "\n".join(lines)


def format_startlist_csv(entries: list[CompetitorWithOffset],
                         start_time: time) -> str:
    """Format the startlist as CSV text.

    Columns: Order, Name, Offset, Start_Time, Anchor
    """
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["Order", "Name", "Offset", "Start_Time", "Anchor"])

    for i, entry in enumerate(entries, 1):
        t = offset_to_time(start_time, entry.offset)
        writer.writerow([i, entry.name, entry.offset, t.strftime("%H:%M:%S"),
                         entry.competitor.anchor.value])

    return output.getvalue()
