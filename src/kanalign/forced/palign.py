"""Parse Julius phoneme alignment and regroup it into hiragana spans."""

import logging
import re

from kanalign.forced.grammar import SILENCE_BEGIN, SILENCE_END
from kanalign.types import (
    AlignmentResult,
    NoAlignmentResultError,
    TimedKana,
    TimedPhoneme,
    Transcription,
)

logger = logging.getLogger(__name__)

BEGIN_MARKER = "=== begin forced alignment ==="
END_MARKER = "=== end forced alignment ==="

FRAMES_PER_SECOND = 100  # Julius reports 10ms frames

# e.g. "[    0    30]  -5.000000  silB"
_SEGMENT_RE = re.compile(r"\[\s*(\d+)\s+(\d+)\]\s+([-+\d.eE]+)\s+(\S+)")


def parse_alignment_output(output: str) -> list[TimedPhoneme]:
    """Extract timed phonemes from Julius' ``-palign`` output.

    Only lines inside the forced-alignment block are considered; headers
    and score summaries in between are skipped.
    """
    segments = []
    in_block = False
    for line in output.splitlines():
        if BEGIN_MARKER in line:
            in_block = True
            continue
        if END_MARKER in line:
            in_block = False
            continue
        if not in_block:
            continue

        match = _SEGMENT_RE.search(line)
        if match is None:
            continue
        start_frame, end_frame, score, label = match.groups()
        segments.append(TimedPhoneme(
            label=label,
            start=int(start_frame) / FRAMES_PER_SECOND,
            end=int(end_frame) / FRAMES_PER_SECOND,
            score=float(score),
        ))
    return segments


def phonemes_to_hiragana(
    transcription: Transcription,
    segments: list[TimedPhoneme],
) -> AlignmentResult:
    """Group timed phonemes back into the transcription's hiragana units.

    Each unit takes as many segments as it has phonemes. When the
    segments run out before the units do, the aligned prefix is returned
    with ``truncated=True``.

    Raises:
        NoAlignmentResultError: if no segments remain after dropping the
            silences.
    """
    phonemes = [s for s in segments if s.label not in (SILENCE_BEGIN, SILENCE_END)]
    if not phonemes:
        raise NoAlignmentResultError("No alignment result found")

    result = []
    index = 0
    truncated = False
    for unit in transcription.units:
        count = len(unit.phonemes)
        if index + count > len(phonemes):
            logger.warning(
                f"Phoneme count mismatch: {unit.char!r} needs {count} phonemes, "
                f"{len(phonemes) - index} left"
            )
            truncated = True
            break

        if count == 0:
            # unresolved long-vowel mark: zero-length span where it sits
            at = result[-1].end if result else phonemes[index].start
            result.append(TimedKana(unit.char, (), at, at, 0.0))
            continue

        taken = phonemes[index:index + count]
        start = taken[0].start
        end = taken[-1].end
        result.append(TimedKana(
            char=unit.char,
            phonemes=tuple(p.label for p in taken),
            start=start,
            end=end,
            duration=round(end - start, 4),
        ))
        index += count

    return AlignmentResult(segments=tuple(result), truncated=truncated)
