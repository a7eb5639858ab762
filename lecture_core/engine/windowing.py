"""
Time-based aggregation of caption segments into retrieval windows.
"""

from typing import Iterable, List

from domain.models import Segment, Window
from shared_utils.constants import Defaults, LogScope
from shared_utils.error_handler import ProcessingError
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.validation import InputValidator


logger = get_scoped_logger(LogScope.WINDOWING)


def timestamp_to_seconds(timestamp: str) -> float:
    """Convert ``HH:MM:SS.mmm`` to elapsed seconds.

    Raises:
        ProcessingError: If the timestamp is malformed.
    """
    try:
        hh, mm, rest = timestamp.split(":")
        ss, _, ms = rest.partition(".")
        return int(hh) * 3600 + int(mm) * 60 + int(ss) + int(ms or "0") / 1000
    except ValueError as exc:
        raise ProcessingError(
            f"Malformed timestamp: {timestamp!r}",
            error_type="parsing",
            context={"timestamp": timestamp},
        ) from exc


def seconds_to_timestamp(total_seconds: float) -> str:
    """Convert elapsed seconds to ``HH:MM:SS.mmm``."""
    total_ms = int(round(total_seconds * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def _flush(buffer: List[Segment]) -> Window:
    return Window(
        start=buffer[0].start,
        end=buffer[-1].end,
        text=" ".join(s.text for s in buffer),
    )


def aggregate_windows(
    segments: Iterable[Segment],
    window_seconds: int = Defaults.WINDOW_SECONDS,
) -> List[Window]:
    """Merge consecutive segments into windows of roughly ``window_seconds``.

    A window is closed when the incoming segment would end past
    ``window_start + window_seconds``; the next window is anchored at that
    segment's start.  A segment longer than the window on its own is never
    split and becomes a window by itself.  The last window may be shorter.

    Args:
        segments: Segments in file order
        window_seconds: Target window duration

    Returns:
        Ordered, non-overlapping windows covering every segment's text
    """
    window_seconds = InputValidator.validate_positive_int(window_seconds, "window_seconds")

    windows: List[Window] = []
    buffer: List[Segment] = []
    window_start = None

    for seg in segments:
        start_sec = timestamp_to_seconds(seg.start)
        end_sec = timestamp_to_seconds(seg.end)
        if window_start is None:
            window_start = start_sec

        if end_sec > window_start + window_seconds and buffer:
            windows.append(_flush(buffer))
            buffer = []
            window_start = start_sec

        buffer.append(seg)

    if buffer:
        windows.append(_flush(buffer))

    logger.debug(
        "windows_aggregated",
        window_count=len(windows),
        window_seconds=window_seconds,
    )
    return windows
