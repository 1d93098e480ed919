"""Unit tests for DistractorSelector and answer labels."""

import random
from collections import Counter

import pytest

from staffmaster.distractors import DistractorSelector
from staffmaster.labels import letter_index_for_label, letter_label
from staffmaster.quiz_models import ConfigurationError


@pytest.mark.parametrize("correct", range(7))
def test_select_returns_four_distinct_indices_with_correct(correct: int) -> None:
    selector = DistractorSelector(rng=random.Random(correct))
    for _ in range(1000):
        options = selector.select(correct)
        assert len(options) == 4
        assert len(set(options)) == 4
        assert correct in options
        assert all(0 <= index <= 6 for index in options)


def test_correct_answer_position_is_not_fixed() -> None:
    selector = DistractorSelector(rng=random.Random(99))
    positions = Counter(selector.select(3).index(3) for _ in range(2000))
    assert set(positions) == {0, 1, 2, 3}
    assert min(positions.values()) > 350


def test_every_letter_can_be_a_distractor() -> None:
    selector = DistractorSelector(rng=random.Random(7))
    seen = set()
    for _ in range(500):
        seen.update(selector.select(0))
    assert seen == set(range(7))


def test_select_rejects_out_of_range_index() -> None:
    with pytest.raises(ConfigurationError):
        DistractorSelector().select(7)


def test_select_rejects_bool_index() -> None:
    with pytest.raises(ConfigurationError):
        DistractorSelector().select(True)


def test_options_for_pairs_indices_with_spanish_labels() -> None:
    selector = DistractorSelector(rng=random.Random(1))
    options = selector.options_for(4, language="es")
    assert len(options) == 4
    assert {option.label for option in options if option.letter_index == 4} == {"Sol"}
    assert all(option.label == letter_label(option.letter_index, "es") for option in options)


def test_letter_labels() -> None:
    assert letter_label(0) == "C"
    assert letter_label(6, "es") == "Si"
    assert letter_index_for_label("sol", "es") == 4
    assert letter_index_for_label("b") == 6
    assert letter_index_for_label("H") is None


def test_unknown_language_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        letter_label(0, "fr")
