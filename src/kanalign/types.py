"""Core data types for kanalign."""

from dataclasses import dataclass


@dataclass(frozen=True)
class KanaUnit:
    """One tokenization step: 1-2 hiragana codepoints and their phonemes."""
    char: str                    # surface text, e.g. "か" or "きゃ"
    phonemes: tuple[str, ...]    # may be empty for an unresolved "ー"


@dataclass(frozen=True)
class UnknownCharacter:
    """A non-blank character the phoneme table does not cover."""
    char: str
    position: int    # codepoint offset in the input text

    def __str__(self) -> str:
        return f"Unknown character: {self.char!r} at {self.position}"


@dataclass(frozen=True)
class Transcription:
    """Hiragana text converted to phonemes, unit by unit."""
    units: tuple[KanaUnit, ...] = ()

    @property
    def phonemes(self) -> tuple[str, ...]:
        """Flat phoneme sequence, in unit order."""
        return tuple(p for unit in self.units for p in unit.phonemes)


@dataclass(frozen=True)
class Grammar:
    """Julius word dictionary and DFA for one phoneme sequence."""
    dict_text: str
    dfa_text: str

    @property
    def word_count(self) -> int:
        return len(self.dict_text.splitlines())


@dataclass(frozen=True)
class TimedPhoneme:
    """A phoneme as reported by the recognizer."""
    label: str
    start: float     # seconds
    end: float       # seconds
    score: float = 0.0


@dataclass(frozen=True)
class TimedKana:
    """A hiragana unit with timing recovered from its phonemes."""
    char: str
    phonemes: tuple[str, ...]
    start: float        # first phoneme start (seconds)
    end: float          # last phoneme end (seconds)
    duration: float

    def to_dict(self) -> dict:
        return {
            "char": self.char,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "phonemes": list(self.phonemes),
        }


@dataclass(frozen=True)
class AlignmentResult:
    """Output of the alignment pipeline.

    ``truncated`` is set when the recognizer reported fewer phonemes than
    the text needs; ``segments`` then holds only the fully aligned prefix.
    """
    segments: tuple[TimedKana, ...] = ()
    truncated: bool = False
    unknown_characters: tuple[UnknownCharacter, ...] = ()

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "segments": [s.to_dict() for s in self.segments],
            "truncated": self.truncated,
            "unknown_characters": [
                {"char": u.char, "position": u.position}
                for u in self.unknown_characters
            ],
        }


class AlignmentError(RuntimeError):
    """Base class for failures of a single alignment request."""


class NoAlignmentResultError(AlignmentError):
    """The recognizer report holds no phonemes besides the silences."""


class JuliusError(AlignmentError):
    """Julius could not be run or exited with an error."""


class ArtifactDesyncError(ValueError):
    """The DFA and the word dictionary describe different word counts."""
