"""kanalign forced — hiragana forced alignment through Julius."""

import logging
import tempfile
from dataclasses import replace
from pathlib import Path

from kanalign.audio import get_duration, prepare_audio
from kanalign.forced.align import Aligner, get_aligner
from kanalign.forced.grammar import build_grammar
from kanalign.forced.kana import hiragana_to_phonemes
from kanalign.forced.palign import parse_alignment_output, phonemes_to_hiragana
from kanalign.types import AlignmentResult

logger = logging.getLogger(__name__)


def process(
    audio: Path | bytes,
    text: str,
    aligner: str | Aligner = "julius",
    **aligner_kwargs,
) -> AlignmentResult:
    """Align hiragana text against speech and time each hiragana unit.

    Args:
        audio: Audio file path, or the bytes of a WAV file.
        text: Hiragana text spoken in ``audio``.
        aligner: Backend name for ``get_aligner`` or a ready Aligner.
        **aligner_kwargs: Passed to the backend when ``aligner`` is a name.

    Returns:
        AlignmentResult with one TimedKana per aligned unit. Characters
        the phoneme table does not cover are listed in
        ``unknown_characters``; ``truncated`` marks a partial alignment.

    Raises:
        ValueError: if ``text`` yields no phonemes.
        NoAlignmentResultError: if the recognizer aligned nothing.
        JuliusError: if the recognizer failed.
    """
    transcription, unknown = hiragana_to_phonemes(text)
    for u in unknown:
        logger.warning(str(u))

    phonemes = transcription.phonemes
    if not phonemes:
        raise ValueError(f"No phonemes to align in {text!r}")
    logger.info(f"Text: {len(transcription.units)} units, {len(phonemes)} phonemes")

    grammar = build_grammar(phonemes)
    logger.debug(f"Dict:\n{grammar.dict_text}")
    logger.debug(f"DFA:\n{grammar.dfa_text}")

    engine = aligner if isinstance(aligner, Aligner) else get_aligner(aligner, **aligner_kwargs)

    if not engine.needs_audio:
        logger.info(f"Aligner: {engine.name} (audio not read)")
        report = engine.process(grammar, None if isinstance(audio, bytes) else Path(audio))
    else:
        with tempfile.TemporaryDirectory(prefix="kanalign-audio-") as tmp:
            audio_path = prepare_audio(audio, Path(tmp))
            logger.info(f"Audio: {get_duration(audio_path):.2f}s, aligner: {engine.name}")
            report = engine.process(grammar, audio_path)

    segments = parse_alignment_output(report)
    logger.info(f"Recognizer returned {len(segments)} timed phonemes")

    result = phonemes_to_hiragana(transcription, segments)
    if result.truncated:
        logger.warning(
            f"Alignment truncated: {len(result.segments)} of "
            f"{len(transcription.units)} units aligned"
        )
    return replace(result, unknown_characters=tuple(unknown))
