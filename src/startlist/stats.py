"""Statistics and balance reporting for generated startlists."""

from startlist.models import (
    Anchor, CompetitorWithOffset, Window, total_competitors, total_duration,
)


def compute_stats(entries: list[CompetitorWithOffset], windows: list[Window],
                  spacing_threshold: int) -> dict:
    """Compute balance statistics for a startlist and its stabilized windows.

    Returns dict with per-window rows, gap summary and event-wide figures.
    """
    per_window = []
    for i, w in enumerate(windows):
        per_window.append({
            "label": w.label or f"Window {i + 1}",
            "duration": w.duration,
            "count": w.count,
            "spacing": w.spacing(),
            "bottom": sum(1 for c in w.competitors if c.anchor == Anchor.BOTTOM),
            "top": sum(1 for c in w.competitors if c.anchor == Anchor.TOP),
            "dense": w.count > 0 and w.spacing() <= spacing_threshold,
        })

    gaps = [b.offset - a.offset for a, b in zip(entries, entries[1:])]
    occupied = [row["spacing"] for row in per_window if row["count"]]

    count = total_competitors(windows)
    duration = total_duration(windows)

    return {
        "windows": per_window,
        "competitors": count,
        "duration": duration,
        "event_spacing": duration / count if count else float(duration),
        "migrated": sum(1 for e in entries if e.competitor.migrated),
        "min_gap": min(gaps) if gaps else 0,
        "max_gap": max(gaps) if gaps else 0,
        "mean_gap": sum(gaps) / len(gaps) if gaps else 0.0,
        "spacing_spread": (max(occupied) - min(occupied)) if occupied else 0.0,
        "last_offset": entries[-1].offset if entries else 0,
    }


def format_stats_report(stats: dict) -> str:
    """Format statistics as text."""
    lines = []
    lines.append("=" * 60)
    lines.append("STARTLIST STATISTICS")
    lines.append("=" * 60)

    lines.append(f"\nCompetitors: {stats['competitors']}")
    lines.append(f"Event length: {stats['duration']}")
    lines.append(f"Event spacing: {stats['event_spacing']:.2f}")
    lines.append(f"Migrated competitors: {stats['migrated']}")
    lines.append(f"Gaps: min={stats['min_gap']}, max={stats['max_gap']}, "
                 f"mean={stats['mean_gap']:.2f}")
    lines.append(f"Window spacing spread: {stats['spacing_spread']:.2f}")

    def _z(v, width=5):
        """Format an integer, suppressing zeros to blank."""
        if v == 0:
            return " " * width
        return f"{v:>{width}}"

    lines.append("\n--- WINDOWS ---")
    lines.append(f"{'Window':<14} {'Dur':>5} {'Cnt':>5} {'Space':>7} "
                 f"{'Bot':>5} {'Top':>5}")
    lines.append("-" * 46)
    for row in stats["windows"]:
        flag = " ***" if row["dense"] else ""
        lines.append(
            f"{row['label']:<14} {row['duration']:>5} {row['count']:>5} "
            f"{row['spacing']:>7.2f} {_z(row['bottom'])} {_z(row['top'])}{flag}"
        )

    return "\n".join(lines)
