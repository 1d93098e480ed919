"""DistractorSelector: builds the shuffled multiple-choice options."""

import random

from staffmaster.labels import letter_label
from staffmaster.quiz_models import (
    DEGREES_PER_OCTAVE,
    OPTION_COUNT,
    AnswerOption,
    check_letter_index,
)


class DistractorSelector:
    """
    Chooses OPTION_COUNT distinct letter indices, one of them correct.

    Random letters are drawn until enough distinct ones are collected, then
    the whole set is shuffled so the correct answer has no fixed position.
    With four picks out of seven letters the loop always finishes.
    """

    def __init__(self, rng: random.Random | None = None, option_count: int = OPTION_COUNT) -> None:
        if not 1 <= option_count <= DEGREES_PER_OCTAVE:
            raise ValueError(f"option_count must be in 1..{DEGREES_PER_OCTAVE}, got {option_count}.")
        self.rng = rng or random.Random()
        self.option_count = option_count

    def select(self, correct_letter_index: int) -> list[int]:
        """Return the option letter indices in display order."""
        chosen = [check_letter_index(correct_letter_index)]
        while len(chosen) < self.option_count:
            candidate = self.rng.randrange(DEGREES_PER_OCTAVE)
            if candidate not in chosen:
                chosen.append(candidate)

        self.rng.shuffle(chosen)
        return chosen

    def options_for(self, correct_letter_index: int, language: str = "en") -> tuple[AnswerOption, ...]:
        """Like select(), with each index paired with its label in *language*."""
        return tuple(
            AnswerOption(letter_index=index, label=letter_label(index, language))
            for index in self.select(correct_letter_index)
        )
