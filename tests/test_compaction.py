"""Tests for ctxmap.services.compaction."""

import pytest

from ctxmap.services.compaction import MODEL_WINDOW, detect_compacts, segment_session
from ctxmap.services.jsonl_parser import parse_session_file
from ctxmap.services.turn_extractor import extract_turns
from ctxmap.types.turns import CompactEvent

from helpers import make_turns


# ---------------------------------------------------------------------------
# 1. Detection threshold
# ---------------------------------------------------------------------------

def test_detects_drop_below_half():
    turns = make_turns([50000, 20000, 25000])
    compacts = detect_compacts(turns)

    assert len(compacts) == 1
    event = compacts[0]
    assert event.turn_index == 1
    assert event.before_tokens == 50000
    assert event.after_tokens == 20000
    assert event.tokens_saved == 30000


@pytest.mark.parametrize("after, expected", [(25000, 0), (24999, 1)])
def test_exactly_half_is_not_a_compact(after, expected):
    assert len(detect_compacts(make_turns([50000, after]))) == expected


def test_zero_previous_context_never_compacts():
    assert detect_compacts(make_turns([0, 0, 100])) == []


def test_single_turn_and_empty():
    assert detect_compacts(make_turns([1000])) == []
    assert detect_compacts([]) == []


def test_multiple_compacts_in_order():
    compacts = detect_compacts(make_turns([100000, 20000, 90000, 10000]))
    assert [c.turn_index for c in compacts] == [1, 3]


# ---------------------------------------------------------------------------
# 2. Segmentation
# ---------------------------------------------------------------------------

def test_no_compacts_single_segment():
    turns = make_turns([1000, 2000, 3000])
    segments = segment_session(turns, [])

    assert len(segments) == 1
    seg = segments[0]
    assert seg.label == "Pre-compact"
    assert (seg.start_turn, seg.end_turn) == (0, 2)
    assert seg.turn_count == 3
    assert seg.peak_context == 3000
    assert seg.total_tokens == 3000


def test_segments_split_at_compacts():
    turns = make_turns([50000, 20000, 25000])
    segments = segment_session(turns, detect_compacts(turns))

    assert [s.label for s in segments] == ["Pre-compact", "Post-compact #1"]
    assert [(s.start_turn, s.end_turn) for s in segments] == [(0, 0), (1, 2)]
    assert segments[1].peak_context == 25000
    assert segments[1].total_tokens == -25000


def test_segments_cover_every_turn_once():
    turns = make_turns([100000, 20000, 90000, 10000, 12000])
    segments = segment_session(turns, detect_compacts(turns))

    covered = [t.turn_index for s in segments for t in s.turns]
    assert covered == list(range(len(turns)))
    assert [s.index for s in segments] == list(range(len(segments)))


def test_adjacent_compacts_each_get_a_segment():
    turns = make_turns([40000, 10000, 4000])
    compacts = detect_compacts(turns)
    assert [c.turn_index for c in compacts] == [1, 2]

    segments = segment_session(turns, compacts)
    assert [s.label for s in segments] == ["Pre-compact", "Post-compact #1", "Post-compact #2"]
    assert [s.turn_count for s in segments] == [1, 1, 1]


def test_empty_slice_consumes_no_label():
    turns = make_turns([1000, 2000, 3000])
    compacts = [
        CompactEvent(turn_index=0, timestamp="", before_tokens=0, after_tokens=1000, tokens_saved=0),
        CompactEvent(turn_index=2, timestamp="", before_tokens=2000, after_tokens=3000, tokens_saved=0),
    ]
    segments = segment_session(turns, compacts)

    assert [s.label for s in segments] == ["Pre-compact", "Post-compact #1"]
    assert [(s.start_turn, s.end_turn) for s in segments] == [(0, 1), (2, 2)]


def test_empty_turns_no_segments():
    assert segment_session([], []) == []


def test_segment_peak_percent_and_duration():
    turns = make_turns(
        [100000, 150000],
        timestamp="2026-02-15T09:00:00.000Z",
    )
    seg = segment_session(turns, [])[0]
    assert seg.peak_context_percent == pytest.approx(150000 / MODEL_WINDOW * 100)
    assert seg.duration == "0s"


# ---------------------------------------------------------------------------
# 3. Fixture session
# ---------------------------------------------------------------------------

def test_compaction_session(compaction_session_path):
    turns = extract_turns(parse_session_file(compaction_session_path))
    compacts = detect_compacts(turns)

    assert len(compacts) == 1
    assert compacts[0].turn_index == 2
    assert compacts[0].before_tokens == 60000
    assert compacts[0].after_tokens == 20000
    assert compacts[0].timestamp == "2026-02-15T09:10:10.000Z"

    pre, post = segment_session(turns, compacts)
    assert pre.label == "Pre-compact"
    assert pre.duration == "5m 0s"
    assert pre.peak_context == 60000
    assert pre.peak_context_percent == pytest.approx(30.0)
    assert post.label == "Post-compact #1"
    assert post.duration == "5m 20s"
    assert post.start_timestamp == "2026-02-15T09:10:10.000Z"
    assert post.end_timestamp == "2026-02-15T09:15:30.000Z"
