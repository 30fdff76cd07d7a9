"""Julius grammar generation for phoneme-level forced alignment.

Every phoneme becomes its own word, bracketed by the ``silB``/``silE``
silences, and the DFA is a single chain through those words. With no
branches to choose from, the decoder can only return the given sequence,
so the recognition pass reduces to recovering its timing.
"""

import logging

from kanalign.types import ArtifactDesyncError, Grammar

logger = logging.getLogger(__name__)

SILENCE_BEGIN = "silB"
SILENCE_END = "silE"


def generate_dict(phonemes: list[str] | tuple[str, ...]) -> str:
    """Build the ``.dict`` word list: ``<index>\\t[w_<index>]\\t<phoneme>``."""
    words = [SILENCE_BEGIN, *phonemes, SILENCE_END]
    return "".join(f"{i}\t[w_{i}]\t{word}\n" for i, word in enumerate(words))


def generate_dfa(num_words: int) -> str:
    """Build the ``.dfa`` for a linear chain of ``num_words`` categories.

    Julius walks the DFA from the end of the utterance, so state 0 accepts
    the last category (``silE``) and the chain counts down to ``silB``.
    A final accepting state closes the chain.

    Args:
        num_words: Line count of the matching ``.dict``, silences included.
    """
    if num_words < 2:
        raise ValueError(
            f"A forced-alignment DFA needs at least the two silence words, got {num_words}"
        )
    last = num_words - 1
    lines = []
    for state in range(num_words):
        is_start = 1 if state == 0 else 0
        lines.append(f"{state} {last - state} {state + 1} 0 {is_start}\n")
    lines.append(f"{num_words} -1 -1 1 0\n")
    return "".join(lines)


def build_grammar(phonemes: list[str] | tuple[str, ...]) -> Grammar:
    """Generate a matching dict/DFA pair for ``phonemes``."""
    dict_text = generate_dict(phonemes)
    grammar = Grammar(
        dict_text=dict_text,
        dfa_text=generate_dfa(len(dict_text.splitlines())),
    )
    logger.debug(f"Grammar for {len(phonemes)} phonemes ({grammar.word_count} words)")
    return grammar


def check_grammar(grammar: Grammar) -> None:
    """Raise ArtifactDesyncError unless the DFA chains exactly the dict's words."""
    words = grammar.word_count
    dfa_lines = grammar.dfa_text.splitlines()
    if len(dfa_lines) != words + 1:
        raise ArtifactDesyncError(
            f"DFA has {len(dfa_lines)} states but dict has {words} words "
            f"(expected {words + 1} states)"
        )
    # state 0 must accept the highest category, i.e. the dict's last word
    try:
        first_category = int(dfa_lines[0].split()[1])
    except (IndexError, ValueError) as e:
        raise ArtifactDesyncError(f"Malformed DFA line: {dfa_lines[0]!r}") from e
    if first_category != words - 1:
        raise ArtifactDesyncError(
            f"DFA starts at category {first_category} but dict ends at word {words - 1}"
        )
