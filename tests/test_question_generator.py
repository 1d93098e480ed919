"""Unit tests for QuestionGenerator."""

import random

from staffmaster.note_catalog import NoteRangeCatalog
from staffmaster.question_generator import CONCRETE_CLEFS, QuestionGenerator
from staffmaster.quiz_models import MIXED_CLEF, Clef, Difficulty, GameConfig, Pitch


class _FirstChoiceRng(random.Random):
    """Always picks the first element, so draws are predictable."""

    def choice(self, seq):  # type: ignore[override]
        return seq[0]


def test_generate_uses_configured_clef_and_range() -> None:
    generator = QuestionGenerator(rng=random.Random(3))
    config = GameConfig.create(clef="bass", difficulty="easy")
    allowed = set(NoteRangeCatalog().range_for(Clef.BASS, Difficulty.EASY))
    for _ in range(200):
        question = generator.generate(config)
        assert question.clef is Clef.BASS
        assert question.pitch in allowed


def test_correct_letter_index_matches_pitch_letter() -> None:
    generator = QuestionGenerator(rng=random.Random(5))
    config = GameConfig.create(clef="alto", difficulty="hard")
    for _ in range(200):
        question = generator.generate(config)
        assert question.correct_letter_index == question.pitch.letter_index


def test_e4_on_easy_treble_expects_letter_index_two() -> None:
    generator = QuestionGenerator(rng=_FirstChoiceRng())
    question = generator.generate(GameConfig.create(clef="treble", difficulty="easy"))
    assert question.pitch == Pitch("E", 4)
    assert question.correct_letter_index == 2


def test_mixed_resolves_to_a_concrete_clef() -> None:
    generator = QuestionGenerator(rng=random.Random(11))
    config = GameConfig.create(clef=MIXED_CLEF, difficulty="easy")
    seen = {generator.generate(config).clef for _ in range(300)}
    assert seen == set(CONCRETE_CLEFS)


def test_mixed_question_pitch_belongs_to_the_drawn_clef() -> None:
    catalog = NoteRangeCatalog()
    generator = QuestionGenerator(rng=random.Random(13))
    config = GameConfig.create(clef=MIXED_CLEF, difficulty="hard")
    for _ in range(200):
        question = generator.generate(config)
        assert question.pitch in catalog.range_for(question.clef, Difficulty.HARD)


def test_same_seed_gives_same_questions() -> None:
    config = GameConfig.create(clef=MIXED_CLEF, difficulty="hard")
    first = QuestionGenerator(rng=random.Random(42))
    second = QuestionGenerator(rng=random.Random(42))
    assert [first.generate(config) for _ in range(20)] == [second.generate(config) for _ in range(20)]


def test_every_note_in_range_is_eventually_drawn() -> None:
    generator = QuestionGenerator(rng=random.Random(17))
    config = GameConfig.create(clef="treble", difficulty="easy")
    drawn = {generator.generate(config).pitch for _ in range(500)}
    assert drawn == set(NoteRangeCatalog().range_for(Clef.TREBLE, Difficulty.EASY))
