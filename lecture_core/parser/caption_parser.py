"""
WebVTT caption parsing.
Turns raw caption text into an ordered stream of timed segments.
"""

import os
import re
from typing import Iterator, List

from domain.models import Segment
from shared_utils.logging_utils import ContextualLogger
from shared_utils.constants import LogScope


logger = ContextualLogger(scope=LogScope.PARSER)


class CaptionParser:
    """Parser for WebVTT-style caption files.

    Expected cue layout (index line optional)::

        WEBVTT

        1
        00:00:00.240 --> 00:00:01.520
        First caption line
        possibly continued here

    Lines that are neither an index nor a timestamp range are skipped, so
    stray NOTE/STYLE lines or malformed cues never abort a parse.
    """

    HEADER: str = "WEBVTT"
    INDEX_PATTERN: re.Pattern = re.compile(r"^\d+$")
    TIMESTAMP_PATTERN: re.Pattern = re.compile(
        r"(\d{2}:\d{2}:\d{2}\.\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2}\.\d{3})"
    )

    @staticmethod
    def parse(content: str) -> Iterator[Segment]:
        """Yield one Segment per caption cue, in file order.

        Cues whose text is blank after trimming, and cues that end before
        they start, yield nothing.

        Args:
            content: Raw caption file text (``\\n`` or ``\\r\\n`` line endings)

        Returns:
            Single-pass iterator of segments
        """
        lines = content.lstrip("\ufeff").splitlines()
        total = len(lines)
        i = 0
        emitted = 0
        skipped = 0

        while i < total and lines[i].strip().upper() == CaptionParser.HEADER:
            i += 1

        while i < total:
            if CaptionParser.INDEX_PATTERN.match(lines[i].strip()):
                i += 1
                if i >= total:
                    break

            match = CaptionParser.TIMESTAMP_PATTERN.search(lines[i])
            if not match:
                if lines[i].strip():
                    skipped += 1
                    logger.debug("caption_line_skipped", line_number=i + 1)
                i += 1
                continue

            start, end = match.group(1), match.group(2)
            cue_line = i + 1
            i += 1

            text_lines = []
            while i < total and lines[i].strip():
                text_lines.append(lines[i].strip())
                i += 1

            text = " ".join(text_lines)
            # fixed-width timestamps compare correctly as strings
            if end < start:
                skipped += 1
                logger.debug(
                    "caption_line_skipped",
                    line_number=cue_line,
                    reason="end_before_start",
                )
            elif text:
                emitted += 1
                yield Segment(start=start, end=end, text=text)

            while i < total and not lines[i].strip():
                i += 1

        logger.info(
            "caption_parsed",
            line_count=total,
            segment_count=emitted,
            skipped_lines=skipped,
        )

    @staticmethod
    def parse_to_list(content: str) -> List[Segment]:
        """Parse caption text fully into a list."""
        return list(CaptionParser.parse(content))


def section_from_filename(file_name: str) -> str:
    """Derive a section title from a caption file name.

    ``"01-node-introduction.vtt"`` becomes ``"Node Introduction"``; a leading
    ordinal part is dropped when the name has more than one part.
    """
    base = os.path.basename(file_name.replace("\\", "/"))
    if base.lower().endswith(".vtt"):
        base = base[: -len(".vtt")]

    parts = base.split("-")
    if len(parts) > 1:
        parts = parts[1:]

    words = " ".join(parts).split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words).strip()
