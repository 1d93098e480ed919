"""QuestionGenerator: draws the note for each round."""

import random

from staffmaster.note_catalog import NoteRangeCatalog
from staffmaster.quiz_models import MIXED_CLEF, Clef, GameConfig, Question, parse_clef

#: Clefs a "mixed" game draws from.
CONCRETE_CLEFS: tuple[Clef, ...] = (Clef.TREBLE, Clef.BASS, Clef.ALTO)


class QuestionGenerator:
    """
    Picks a clef and a note uniformly at random for each question.

    Draws are independent: the same note may come up twice in a row.
    """

    def __init__(
        self,
        catalog: NoteRangeCatalog | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Args:
            catalog: Source of note ranges. Defaults to the built-in tables.
            rng:     Random source; pass a seeded instance for repeatable games.
        """
        self.catalog = catalog or NoteRangeCatalog()
        self.rng = rng or random.Random()

    def resolve_clef(self, clef: Clef | str) -> Clef:
        """Turn the "mixed" selector into a concrete clef; pass others through."""
        if clef == MIXED_CLEF:
            return self.rng.choice(CONCRETE_CLEFS)
        return parse_clef(clef)

    def generate(self, config: GameConfig) -> Question:
        clef = self.resolve_clef(config.clef)
        pitch = self.rng.choice(self.catalog.range_for(clef, config.difficulty))
        return Question(pitch=pitch, clef=clef, correct_letter_index=pitch.letter_index)
