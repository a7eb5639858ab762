"""
Tests for lecture_core.engine.windowing.

Covers timestamp conversion and aggregate_windows() boundaries, oversized
segments, text preservation and argument validation.
"""

import pytest

from domain.models import Segment, Window
from lecture_core.engine.windowing import (
    aggregate_windows,
    seconds_to_timestamp,
    timestamp_to_seconds,
)
from lecture_core.parser.caption_parser import CaptionParser
from shared_utils.error_handler import ProcessingError, ValidationError


def _seg(start: str, end: str, text: str) -> Segment:
    return Segment(start=start, end=end, text=text)


# ---------------------------------------------------------------------------
# Timestamp conversion
# ---------------------------------------------------------------------------


class TestTimestampConversion:
    @pytest.mark.parametrize(
        "timestamp, expected",
        [
            ("00:00:00.000", 0.0),
            ("00:00:02.500", 2.5),
            ("00:01:05.000", 65.0),
            ("01:00:00.001", 3600.001),
        ],
    )
    def test_timestamp_to_seconds(self, timestamp: str, expected: float) -> None:
        assert timestamp_to_seconds(timestamp) == pytest.approx(expected)

    def test_malformed_timestamp_raises(self) -> None:
        with pytest.raises(ProcessingError) as exc_info:
            timestamp_to_seconds("not-a-time")
        assert exc_info.value.error_code == "PARSING_FAILED"

    def test_seconds_to_timestamp(self) -> None:
        assert seconds_to_timestamp(3723.25) == "01:02:03.250"
        assert seconds_to_timestamp(0) == "00:00:00.000"


# ---------------------------------------------------------------------------
# aggregate_windows
# ---------------------------------------------------------------------------


class TestAggregateWindows:
    def test_empty_input(self) -> None:
        assert aggregate_windows([]) == []

    def test_segments_within_window_are_merged(self, sample_segments) -> None:
        windows = aggregate_windows(sample_segments[:2], window_seconds=45)
        assert windows == [
            Window(
                start="00:00:00.000",
                end="00:00:40.000",
                text="Welcome to the course. Today we install Node.",
            )
        ]

    def test_segment_ending_past_window_starts_new_one(self, sample_segments) -> None:
        windows = aggregate_windows(sample_segments, window_seconds=45)
        assert len(windows) == 2
        assert windows[1].start == "00:00:40.000"
        assert windows[1].end == "00:01:00.000"
        assert windows[1].text == "Let's run our first script."

    def test_end_exactly_on_boundary_stays_in_window(self) -> None:
        segments = [
            _seg("00:00:00.000", "00:00:30.000", "a"),
            _seg("00:00:30.000", "00:00:45.000", "b"),
        ]
        windows = aggregate_windows(segments, window_seconds=45)
        assert len(windows) == 1
        assert windows[0].text == "a b"

    def test_oversized_single_segment_is_its_own_window(self) -> None:
        segments = [_seg("00:00:00.000", "00:02:00.000", "a very long monologue")]
        windows = aggregate_windows(segments, window_seconds=45)
        assert windows == [
            Window(start="00:00:00.000", end="00:02:00.000", text="a very long monologue")
        ]

    def test_oversized_segment_after_buffer_not_split(self) -> None:
        segments = [
            _seg("00:00:00.000", "00:00:10.000", "short"),
            _seg("00:00:10.000", "00:03:00.000", "long"),
            _seg("00:03:00.000", "00:03:05.000", "tail"),
        ]
        windows = aggregate_windows(segments, window_seconds=45)
        assert [w.text for w in windows] == ["short", "long", "tail"]

    def test_windows_never_overlap_and_preserve_text(self) -> None:
        segments = [
            _seg(
                f"00:{i // 60:02d}:{i % 60:02d}.000",
                f"00:{(i + 7) // 60:02d}:{(i + 7) % 60:02d}.000",
                f"segment {i}",
            )
            for i in range(0, 300, 7)
        ]
        windows = aggregate_windows(segments, window_seconds=45)

        for prev, nxt in zip(windows, windows[1:]):
            assert timestamp_to_seconds(prev.end) <= timestamp_to_seconds(nxt.start)
        assert " ".join(w.text for w in windows) == " ".join(s.text for s in segments)

    def test_accepts_generator_input(self) -> None:
        gen = (s for s in [_seg("00:00:00.000", "00:00:01.000", "x")])
        assert len(aggregate_windows(gen)) == 1

    @pytest.mark.parametrize("bad", [0, -5])
    def test_non_positive_window_rejected(self, bad: int) -> None:
        with pytest.raises(ValidationError):
            aggregate_windows([], window_seconds=bad)

    def test_parse_then_aggregate_two_windows(self) -> None:
        content = (
            "WEBVTT\n\n1\n00:00:00.000 --> 00:00:02.000\nHello world\n\n"
            "2\n00:00:02.000 --> 00:00:50.000\nSecond line\n"
        )
        windows = aggregate_windows(CaptionParser.parse(content), window_seconds=45)
        assert windows == [
            Window(start="00:00:00.000", end="00:00:02.000", text="Hello world"),
            Window(start="00:00:02.000", end="00:00:50.000", text="Second line"),
        ]
