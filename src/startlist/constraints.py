"""Constraint validation for generated startlists."""

from collections import Counter

from startlist.models import Competitor, CompetitorWithOffset


def validate_startlist(entries: list[CompetitorWithOffset],
                       competitors: list[Competitor],
                       min_spacing: int,
                       event_length: int | None = None) -> dict:
    """Validate a startlist against the competitors that were entered.

    Competitors are matched by identity, so two entrants sharing a name
    are still told apart.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft constraint issues
    """
    errors = []
    warnings = []

    # Conservation: everyone entered starts exactly once
    if len(entries) != len(competitors):
        errors.append(
            f"{len(entries)} starts for {len(competitors)} competitors"
        )

    starts = Counter(id(e.competitor) for e in entries)
    entered = {id(c): c for c in competitors}
    for cid, count in starts.items():
        if cid not in entered:
            name = next(e.name for e in entries if id(e.competitor) == cid)
            errors.append(f"{name} starts but was never entered")
        elif count > 1:
            errors.append(f"{entered[cid].name} starts {count} times")
    for cid, competitor in entered.items():
        if cid not in starts:
            errors.append(f"{competitor.name} has no start time")

    # Ordering
    for prev, curr in zip(entries, entries[1:]):
        if curr.offset < prev.offset:
            errors.append(
                f"{curr.name} at {curr.offset} listed after "
                f"{prev.name} at {prev.offset}"
            )

    for e in entries:
        if e.offset < 0:
            errors.append(f"{e.name} has negative offset {e.offset}")

    # Spacing
    for prev, curr in zip(entries, entries[1:]):
        gap = curr.offset - prev.offset
        if 0 <= gap < min_spacing:
            warnings.append(
                f"{prev.name} ({prev.offset}) and {curr.name} ({curr.offset}) "
                f"only {gap} apart (min {min_spacing})"
            )

    if event_length is not None:
        for e in entries:
            if e.offset >= event_length:
                warnings.append(
                    f"{e.name} starts at {e.offset}, after the event ends "
                    f"at {event_length}"
                )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def format_validation_report(result: dict) -> str:
    """Format validation results as text."""
    lines = []
    lines.append("=" * 60)
    lines.append("STARTLIST VALIDATION REPORT")
    lines.append("=" * 60)

    if result["valid"]:
        lines.append("\nRESULT: VALID (no hard constraint violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(result['errors'])} violations)")

    if result["errors"]:
        lines.append(f"\n--- ERRORS ({len(result['errors'])}) ---")
        for e in result["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n--- WARNINGS ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
