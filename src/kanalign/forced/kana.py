"""Hiragana to phoneme conversion using Julius' Japanese phone set."""

from types import MappingProxyType
from typing import NamedTuple

from kanalign.types import KanaUnit, Transcription, UnknownCharacter

LONG_VOWEL_MARK = "ー"

VOWELS = frozenset({"a", "i", "u", "e", "o"})

_TABLE: dict[str, tuple[str, ...]] = {}

# Plain vowels
for kana, vowel in zip("あいうえお", "aiueo"):
    _TABLE[kana] = (vowel,)

# Full consonant rows, columns in a-i-u-e-o order.
# Irregular columns (し, ち, つ, ふ, じ, ぢ, づ) carry their own onset.
_ROWS = {
    "k": "かきくけこ",
    "s": "さしすせそ",
    "t": "たちつてと",
    "n": "なにぬねの",
    "h": "はひふへほ",
    "m": "まみむめも",
    "r": "らりるれろ",
    "g": "がぎぐげご",
    "z": "ざじずぜぞ",
    "d": "だぢづでど",
    "b": "ばびぶべぼ",
    "p": "ぱぴぷぺぽ",
}
_IRREGULAR = {
    "し": ("sh", "i"),
    "ち": ("ch", "i"),
    "つ": ("ts", "u"),
    "ふ": ("f", "u"),
    "じ": ("j", "i"),
    "ぢ": ("j", "i"),
    "づ": ("z", "u"),
}
for onset, row in _ROWS.items():
    for kana, vowel in zip(row, "aiueo"):
        _TABLE[kana] = _IRREGULAR.get(kana, (onset, vowel))

_TABLE.update({
    "や": ("y", "a"), "ゆ": ("y", "u"), "よ": ("y", "o"),
    "わ": ("w", "a"), "を": ("o",), "ゐ": ("i",), "ゑ": ("e",),
    "ん": ("N",),
    "っ": ("q",),
    LONG_VOWEL_MARK: (),  # resolved against the preceding vowel by the scanner
})

# Palatalized (yoon) forms
_YOON_ONSETS = {
    "き": "ky", "し": "sh", "ち": "ch", "に": "ny", "ひ": "hy", "み": "my",
    "り": "ry", "ぎ": "gy", "じ": "j", "ぢ": "j", "び": "by", "ぴ": "py",
}
for kana, onset in _YOON_ONSETS.items():
    for small, vowel in zip("ゃゅょ", "auo"):
        _TABLE[kana + small] = (onset, vowel)

# Loanword spellings
_TABLE.update({
    "ふぁ": ("f", "a"), "ふぃ": ("f", "i"), "ふぇ": ("f", "e"), "ふぉ": ("f", "o"),
    "てぃ": ("t", "i"), "でぃ": ("d", "i"), "でゅ": ("dy", "u"),
})

HIRAGANA_TO_PHONEMES = MappingProxyType(_TABLE)


class ScanStep(NamedTuple):
    """Result of consuming one position of the input."""
    unit: KanaUnit | None
    advance: int
    last_vowel: str | None
    unknown: UnknownCharacter | None = None


def next_last_vowel(last_vowel: str | None, phonemes: tuple[str, ...]) -> str | None:
    """Return the long-vowel context after emitting ``phonemes``."""
    if not phonemes:
        return last_vowel
    return phonemes[-1] if phonemes[-1] in VOWELS else None


def scan_step(text: str, pos: int, last_vowel: str | None) -> ScanStep:
    """Consume the longest match at ``pos``.

    Two-codepoint entries win over single ones. A long-vowel mark repeats
    ``last_vowel`` when there is one; otherwise it maps to no phonemes.
    Unmapped non-blank characters are reported and skipped, blanks are
    skipped silently.
    """
    pair = text[pos:pos + 2]
    if len(pair) == 2 and pair in HIRAGANA_TO_PHONEMES:
        phonemes = HIRAGANA_TO_PHONEMES[pair]
        return ScanStep(KanaUnit(pair, phonemes), 2, next_last_vowel(last_vowel, phonemes))

    char = text[pos]
    if char == LONG_VOWEL_MARK and last_vowel in VOWELS:
        return ScanStep(KanaUnit(char, (last_vowel,)), 1, last_vowel)

    if char in HIRAGANA_TO_PHONEMES:
        phonemes = HIRAGANA_TO_PHONEMES[char]
        return ScanStep(KanaUnit(char, phonemes), 1, next_last_vowel(last_vowel, phonemes))

    if char.strip():
        return ScanStep(None, 1, last_vowel, UnknownCharacter(char, pos))
    return ScanStep(None, 1, last_vowel)


def hiragana_to_phonemes(text: str) -> tuple[Transcription, list[UnknownCharacter]]:
    """Convert hiragana text to phoneme units.

    Returns:
        (transcription, unknown_characters). Unknown characters are left
        out of the transcription; reporting them is up to the caller.
    """
    units: list[KanaUnit] = []
    unknown: list[UnknownCharacter] = []
    last_vowel = None
    pos = 0
    while pos < len(text):
        step = scan_step(text, pos, last_vowel)
        if step.unit is not None:
            units.append(step.unit)
        if step.unknown is not None:
            unknown.append(step.unknown)
        last_vowel = step.last_vowel
        pos += step.advance
    return Transcription(units=tuple(units)), unknown
