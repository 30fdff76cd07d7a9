"""Tests for Julius dict/DFA generation."""

import pytest

from kanalign.forced.grammar import (
    build_grammar,
    check_grammar,
    generate_dfa,
    generate_dict,
)
from kanalign.types import ArtifactDesyncError, Grammar


def test_dict_brackets_phonemes_with_silences():
    assert generate_dict(["t", "o", "o"]) == (
        "0\t[w_0]\tsilB\n"
        "1\t[w_1]\tt\n"
        "2\t[w_2]\to\n"
        "3\t[w_3]\to\n"
        "4\t[w_4]\tsilE\n"
    )


def test_dict_line_count():
    phonemes = ["k", "o", "N", "n", "i", "ch", "i", "h", "a"]
    assert len(generate_dict(phonemes).splitlines()) == len(phonemes) + 2


def test_dfa_linear_chain():
    assert generate_dfa(4) == (
        "0 3 1 0 1\n"
        "1 2 2 0 0\n"
        "2 1 3 0 0\n"
        "3 0 4 0 0\n"
        "4 -1 -1 1 0\n"
    )


def test_dfa_line_count_and_single_start():
    n = 7
    lines = generate_dfa(n + 2).splitlines()
    assert len(lines) == n + 3
    starts = [line for line in lines if line.split()[4] == "1"]
    assert starts == [lines[0]]
    assert lines[0].startswith("0 ")


def test_dfa_final_state_has_no_transition():
    last = generate_dfa(3).splitlines()[-1].split()
    assert last == ["3", "-1", "-1", "1", "0"]


@pytest.mark.parametrize("num_words", [0, 1, -3])
def test_dfa_rejects_too_few_words(num_words):
    with pytest.raises(ValueError, match="two silence words"):
        generate_dfa(num_words)


def test_build_grammar_is_consistent():
    grammar = build_grammar(("a", "k", "a"))
    assert grammar.word_count == 5
    assert len(grammar.dfa_text.splitlines()) == 6
    check_grammar(grammar)


def test_build_grammar_deterministic():
    assert build_grammar(["a"]) == build_grammar(["a"])


def test_check_grammar_state_count_mismatch():
    grammar = Grammar(dict_text=generate_dict(["a", "i"]), dfa_text=generate_dfa(3))
    with pytest.raises(ArtifactDesyncError, match="states"):
        check_grammar(grammar)


def test_check_grammar_category_mismatch():
    # right number of lines, chain built for a different word count
    dfa = generate_dfa(5).splitlines()
    dfa[0] = "0 9 1 0 1"
    grammar = Grammar(dict_text=generate_dict(["a", "i", "u"]), dfa_text="\n".join(dfa) + "\n")
    with pytest.raises(ArtifactDesyncError, match="category 9"):
        check_grammar(grammar)


@pytest.mark.parametrize("dfa_text", ["x\n" * 4, "0\n" * 4])
def test_check_grammar_malformed_dfa_line(dfa_text):
    grammar = Grammar(dict_text=generate_dict(["a"]), dfa_text=dfa_text)
    with pytest.raises(ArtifactDesyncError, match="Malformed DFA line"):
        check_grammar(grammar)
