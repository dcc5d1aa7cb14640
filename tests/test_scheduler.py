"""Tests for scheduler.py — offset assignment and the full pipeline."""

import random

import pytest

from startlist.models import Competitor, Window
from startlist.scheduler import (
    assign_offsets, generate_startlist, validate_windows,
)
from startlist.stabilize import stabilize_window


def _make_window(count, duration=30, prefix="C"):
    return Window(duration, [Competitor(f"{prefix}{i}") for i in range(count)])


def _make_windows(*counts, duration=30):
    return [_make_window(c, duration, prefix=f"W{i}-")
            for i, c in enumerate(counts)]


def _offsets(entries):
    return [e.offset for e in entries]


class TestScenarios:
    def test_dense_middle_window(self):
        windows = _make_windows(2, 15, 4)
        competitors = [c for w in windows for c in w.competitors]
        entries = generate_startlist(windows, 3, 2, seed=1, verbose=False)

        assert len(entries) == 21
        assert {id(e.competitor) for e in entries} == {id(c) for c in competitors}
        offsets = _offsets(entries)
        assert offsets == sorted(offsets)
        assert offsets[0] >= 0
        assert offsets[-1] <= 89
        # Middle window relieved to at least the threshold
        assert windows[1].spacing() >= 3

    def test_dense_middle_window_many_seeds(self):
        for seed in range(25):
            windows = _make_windows(2, 15, 4)
            entries = generate_startlist(windows, 3, 2, seed=seed, verbose=False)
            offsets = _offsets(entries)
            assert len(entries) == 21
            assert offsets == sorted(offsets)
            assert 0 <= offsets[0] and offsets[-1] <= 89

    def test_single_competitor(self):
        windows = _make_windows(1)
        entries = generate_startlist(windows, 3, 2, seed=1, verbose=False)
        assert len(entries) == 1
        assert entries[0].offset == 0

    def test_empty_window_keeps_boundary(self):
        windows = _make_windows(0, 1)
        entries = generate_startlist(windows, 3, 2, seed=1, verbose=False)
        assert len(entries) == 1
        assert entries[0].offset == 30

    def test_no_competitors(self):
        windows = _make_windows(0, 0, 0)
        assert generate_startlist(windows, 3, 2, seed=1, verbose=False) == []

    def test_no_windows(self):
        assert generate_startlist([], 3, 2, seed=1, verbose=False) == []


class TestAssignOffsets:
    def test_even_spacing(self):
        windows = _make_windows(3)
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert _offsets(entries) == [0, 10, 20]

    def test_keeps_window_order(self):
        windows = _make_windows(5)
        names = [c.name for c in windows[0].competitors]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert [e.name for e in entries] == names

    def test_remainder_spread(self):
        windows = _make_windows(3, duration=10)
        entries = assign_offsets(windows, 3, 0, random.Random(9))
        offsets = _offsets(entries)
        assert offsets[0] == 0
        gaps = [b - a for a, b in zip(offsets, offsets[1:])]
        assert all(g in (3, 4) for g in gaps)
        assert offsets[-1] in (6, 7)

    def test_remainder_never_overflows_window(self):
        for seed in range(30):
            windows = _make_windows(7, duration=30)
            offsets = _offsets(assign_offsets(windows, 3, 2, random.Random(seed)))
            # 30 // 7 = 4 remainder 2: at most two gaps of 5
            gaps = [b - a for a, b in zip(offsets, offsets[1:])]
            assert all(g in (4, 5) for g in gaps)
            assert sum(1 for g in gaps if g == 5) <= 2
            assert offsets[-1] <= 29

    def test_min_spacing_clamp(self):
        windows = _make_windows(20)
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        offsets = _offsets(entries)
        assert offsets == list(range(0, 40, 2))

    def test_anchored_edges(self):
        b1 = Competitor("b1", hops=1)
        b2 = Competitor("b2", hops=1)
        c1 = Competitor("c1")
        c2 = Competitor("c2")
        t1 = Competitor("t1", hops=-1)
        windows = [Window(30, [b1, b2, c1, c2, t1])]
        entries = assign_offsets(windows, 3, 2, random.Random(5))

        assert [e.name for e in entries] == ["b1", "b2", "c1", "c2", "t1"]
        by_name = {e.name: e.offset for e in entries}
        assert by_name["b1"] == 0
        assert by_name["b2"] == 3
        assert by_name["t1"] == 29
        # 26 units between b2 and t1 split into three gaps of 8 or 9
        assert by_name["c1"] in (11, 12)
        assert by_name["c2"] - by_name["c1"] in (8, 9)
        assert by_name["c2"] <= 21

    def test_top_edge_counts_back(self):
        tops = [Competitor(f"t{i}", hops=-1) for i in range(3)]
        windows = [Window(30, [Competitor("c")] + tops)]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert [(e.name, e.offset) for e in entries] == [
            ("c", 0), ("t0", 23), ("t1", 26), ("t2", 29),
        ]

    def test_next_window_after_top_edge(self):
        windows = [
            Window(30, [Competitor("a"), Competitor("t", hops=-1)]),
            Window(30, [Competitor("c")]),
        ]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert [(e.name, e.offset) for e in entries] == [
            ("a", 0), ("t", 29), ("c", 32),
        ]

    def test_bottom_edge_starts_at_window(self):
        windows = [
            Window(30, [Competitor("a")]),
            Window(30, [Competitor("b1", hops=1), Competitor("b2", hops=1)]),
        ]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert [(e.name, e.offset) for e in entries] == [
            ("a", 0), ("b1", 30), ("b2", 33),
        ]

    def test_overflow_pushes_next_window(self):
        windows = [_make_window(20, prefix="A"), _make_window(1, prefix="B")]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        # First window overflows to 38; next start keeps the clamped step
        assert entries[-1].name == "B0"
        assert entries[-1].offset == 40

    def test_top_edge_after_clamped_overflow(self):
        current = [Competitor(f"c{i}") for i in range(20)]
        top = Competitor("t", hops=-1)
        windows = [Window(30, current + [top]), Window(30, [Competitor("n")])]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        by_name = {e.name: e.offset for e in entries}
        # Unanchored run is clamped out to 38; the top edge and the next
        # window both follow it
        assert by_name["c19"] == 38
        assert by_name["t"] == 40
        assert by_name["n"] == 43
        offsets = _offsets(entries)
        assert len(set(offsets)) == len(offsets)

    def test_top_stack_stays_inside_window(self):
        tops = [Competitor(f"t{i}", hops=-1) for i in range(12)]
        windows = [
            Window(30, [Competitor("a")]),
            Window(30, [Competitor("b")] + tops),
        ]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert [e.name for e in entries] == ["a", "b"] + [f"t{i}" for i in range(12)]
        by_name = {e.name: e.offset for e in entries}
        assert by_name["b"] == 30
        assert by_name["t0"] == 32
        assert by_name["t11"] == 65

    def test_top_stack_only(self):
        tops = [Competitor(f"t{i}", hops=-1) for i in range(12)]
        windows = [Window(30, [Competitor("a")]), Window(30, tops)]
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert _offsets(entries) == [0] + list(range(30, 66, 3))

    def test_empty_window_skipped(self):
        windows = _make_windows(1, 0, 1)
        entries = assign_offsets(windows, 3, 2, random.Random(1))
        assert _offsets(entries) == [0, 60]

    def test_unsettled_window_rejected(self):
        windows = [Window(30, [Competitor("t", hops=-1), Competitor("c")])]
        with pytest.raises(ValueError):
            assign_offsets(windows, 3, 2, random.Random(1))


class TestValidateWindows:
    def test_negative_duration(self):
        with pytest.raises(ValueError, match="negative duration"):
            validate_windows([Window(-5)], 3, 2)

    def test_negative_threshold(self):
        with pytest.raises(ValueError, match="threshold"):
            validate_windows([Window(30)], -1, 2)

    def test_negative_min_spacing(self):
        with pytest.raises(ValueError, match="min spacing"):
            validate_windows([Window(30)], 3, -2)

    def test_generate_fails_fast(self):
        windows = [Window(-30, [Competitor("A")])]
        with pytest.raises(ValueError):
            generate_startlist(windows, 3, 2, seed=1, verbose=False)


class TestGenerateStartlist:
    def test_deterministic_with_seed(self):
        def run(seed):
            windows = _make_windows(4, 14, 0, 9, 2)
            entries = generate_startlist(windows, 3, 2, seed=seed, verbose=False)
            return [(e.name, e.offset) for e in entries]

        assert run(42) == run(42)

    def test_rng_matches_seed(self):
        w1 = _make_windows(3, 12, 5)
        w2 = _make_windows(3, 12, 5)
        e1 = generate_startlist(w1, 3, 2, seed=8, verbose=False)
        e2 = generate_startlist(w2, 3, 2, rng=random.Random(8), verbose=False)
        assert [(e.name, e.offset) for e in e1] == [(e.name, e.offset) for e in e2]

    def test_saturated_event_still_stabilized(self):
        windows = _make_windows(0, 20)
        entries = generate_startlist(windows, 3, 2, seed=1, verbose=False)
        # 60 / 20 = 3 <= 3, yet the empty first window takes half the field
        assert [w.count for w in windows] == [10, 10]
        for i in range(len(windows)):
            assert not stabilize_window(windows, i, 3, random.Random(0))
        offsets = _offsets(entries)
        assert len(entries) == 20
        assert offsets[0] < 30
        assert offsets[-1] <= 59
        assert len(set(offsets)) == 20

    def test_prints_progress(self, capsys):
        windows = _make_windows(2, 15, 4)
        generate_startlist(windows, 3, 2, seed=1)
        out = capsys.readouterr().out
        assert "Stabilized:" in out
        assert "Total competitors scheduled: 21" in out

    def test_min_spacing_within_unanchored(self):
        windows = _make_windows(6, 25, 6, 3)
        entries = generate_startlist(windows, 3, 2, seed=3, verbose=False)
        current = [e for e in entries if not e.competitor.migrated]
        by_window = {}
        for e in current:
            by_window.setdefault(e.name.split("-")[0], []).append(e.offset)
        for offsets in by_window.values():
            gaps = [b - a for a, b in zip(offsets, offsets[1:])]
            assert all(g >= 2 for g in gaps)


def _random_windows(rng):
    windows = []
    for i in range(rng.randint(1, 6)):
        count = rng.choice([0, rng.randint(1, 8), rng.randint(10, 30)])
        windows.append(_make_window(count, rng.choice([10, 20, 30, 45]),
                                    prefix=f"W{i}-"))
    return windows


def _check_layout(windows, entries):
    """Every window's starts come after the previous window's, none shared."""
    offsets = _offsets(entries)
    assert len(set(offsets)) == len(offsets)
    assert offsets == sorted(offsets)

    starts = {e.competitor: e.offset for e in entries}
    boundary = 0
    last = -1
    for window in windows:
        mine = [starts[c] for c in window.competitors]
        if mine:
            assert min(mine) >= boundary
            assert min(mine) > last
            last = max(mine)
        boundary += window.duration


class TestNoOverlap:
    def test_mixed_anchors_many_configs(self):
        for seed in range(200):
            rng = random.Random(seed)
            windows = _random_windows(rng)
            threshold = rng.randint(1, 5)
            min_spacing = rng.randint(1, threshold + 1)
            entries = generate_startlist(windows, threshold, min_spacing,
                                         rng=rng, verbose=False)
            assert len(entries) == sum(w.count for w in windows)
            _check_layout(windows, entries)

    def test_deep_top_stack_in_stabilized_windows(self):
        for seed in range(20):
            windows = [
                _make_window(1, 30, "A"), _make_window(1, 20, "B"),
                _make_window(2, 30, "C"), _make_window(16, 30, "D"),
                _make_window(24, 30, "E"),
            ]
            entries = generate_startlist(windows, 3, 3, seed=seed,
                                         verbose=False)
            assert any(c.migrated for w in windows for c in w.competitors)
            _check_layout(windows, entries)

    def test_hand_built_anchors(self):
        windows = [
            Window(20, [Competitor("a0"), Competitor("a1"),
                        Competitor("ta", hops=-2), Competitor("tb", hops=-1)]),
            Window(10, [Competitor("bb", hops=1)]
                   + [Competitor(f"m{i}") for i in range(6)]
                   + [Competitor(f"t{i}", hops=-1) for i in range(4)]),
            Window(30, [Competitor(f"b{i}", hops=2) for i in range(5)]
                   + [Competitor("z")]),
        ]
        entries = assign_offsets(windows, 3, 2, random.Random(4))
        _check_layout(windows, entries)
