"""Data models, constants and errors shared by the quiz engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

# ── Letter names ────────────────────────────────────────────────────────────

#: Natural letter names in scale order (index 0 = C).
LETTERS: Final[tuple[str, ...]] = ("C", "D", "E", "F", "G", "A", "B")
DEGREES_PER_OCTAVE = 7

# ── Game constants ──────────────────────────────────────────────────────────

TOTAL_QUESTIONS = 12
OPTION_COUNT = 4
FEEDBACK_DELAY_MS = 1500

MIXED_CLEF: Final[str] = "mixed"

SUPPORTED_LANGUAGES: Final[tuple[str, ...]] = ("en", "es")

_PITCH_PATTERN = re.compile(r"^([A-Ga-g])(-?\d+)$")


# ── Errors ──────────────────────────────────────────────────────────────────

class QuizError(Exception):
    """Base class for quiz engine errors."""


class ConfigurationError(QuizError, ValueError):
    """An invalid clef, difficulty, language, letter index or note was supplied."""


class StaleAnswerIgnored(QuizError):
    """An answer arrived while no question was waiting for one."""


# ── Enumerations ────────────────────────────────────────────────────────────

class Clef(str, Enum):
    TREBLE = "treble"
    BASS = "bass"
    ALTO = "alto"


class Difficulty(str, Enum):
    EASY = "easy"
    HARD = "hard"


class RoundState(Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    RESOLVED = "resolved"
    GAME_OVER = "game_over"


#: Countdown window per difficulty, in milliseconds.
COUNTDOWN_MS: Final[dict[Difficulty, int]] = {
    Difficulty.EASY: 7000,
    Difficulty.HARD: 5000,
}


def parse_clef(value: Clef | str) -> Clef:
    """Return the concrete Clef for *value*; "mixed" is not a concrete clef."""
    if isinstance(value, Clef):
        return value
    try:
        return Clef(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown clef '{value}'. Use treble, bass or alto.") from None


def parse_clef_choice(value: Clef | str) -> Clef | str:
    """Like parse_clef, but also accepts the "mixed" selector."""
    if isinstance(value, str) and value.strip().lower() == MIXED_CLEF:
        return MIXED_CLEF
    return parse_clef(value)


def parse_difficulty(value: Difficulty | str) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown difficulty '{value}'. Use easy or hard.") from None


def check_letter_index(index: int) -> int:
    """Raise ConfigurationError unless *index* is a letter index (0-6)."""
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < DEGREES_PER_OCTAVE:
        raise ConfigurationError(f"Letter index must be an integer in 0..6, got {index!r}.")
    return index


def check_language(language: str) -> str:
    normalized = str(language).strip().lower()
    if normalized not in SUPPORTED_LANGUAGES:
        supported = ", ".join(SUPPORTED_LANGUAGES)
        raise ConfigurationError(f"Unsupported language '{language}'. Use one of: {supported}.")
    return normalized


# ── Value types ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Pitch:
    """
    A natural note in scientific pitch notation.

    Attributes:
        letter: One of C, D, E, F, G, A, B.
        octave: Scientific octave number (C4 is middle C).
    """

    letter: str
    octave: int

    def __post_init__(self) -> None:
        if self.letter not in LETTERS:
            raise ConfigurationError(f"Unknown note letter '{self.letter}'.")

    @classmethod
    def parse(cls, text: str) -> "Pitch":
        """Build a Pitch from text such as "E4" or "c5"."""
        match = _PITCH_PATTERN.match(text.strip())
        if not match:
            raise ConfigurationError(f"Invalid note '{text}'. Use a letter and an octave, e.g. E4.")
        return cls(letter=match.group(1).upper(), octave=int(match.group(2)))

    @property
    def letter_index(self) -> int:
        """Position of the letter within the octave (C=0 ... B=6)."""
        return LETTERS.index(self.letter)

    @property
    def scale_degree(self) -> int:
        """Absolute diatonic height: octave * 7 + letter index."""
        return self.octave * DEGREES_PER_OCTAVE + self.letter_index

    def __str__(self) -> str:
        return f"{self.letter}{self.octave}"


@dataclass(frozen=True)
class Question:
    """The note shown in one round and the answer it expects."""

    pitch: Pitch
    clef: Clef
    correct_letter_index: int


@dataclass(frozen=True)
class AnswerOption:
    letter_index: int
    label: str


@dataclass(frozen=True)
class GameConfig:
    """
    Settings chosen before a game starts.

    Attributes:
        clef:       A concrete Clef, or MIXED_CLEF to draw one per question.
        difficulty: Selects the note range and countdown window.
        language:   Language code used for answer labels.
    """

    clef: Clef | str = Clef.TREBLE
    difficulty: Difficulty = Difficulty.EASY
    language: str = "en"

    def __post_init__(self) -> None:
        # Plain strings from callers are normalised in place; the instance stays frozen.
        object.__setattr__(self, "clef", parse_clef_choice(self.clef))
        object.__setattr__(self, "difficulty", parse_difficulty(self.difficulty))
        object.__setattr__(self, "language", check_language(self.language))

    @classmethod
    def create(
        cls,
        clef: Clef | str = Clef.TREBLE,
        difficulty: Difficulty | str = Difficulty.EASY,
        language: str = "en",
    ) -> "GameConfig":
        """Build a GameConfig from plain values such as CLI choices."""
        return cls(clef=clef, difficulty=difficulty, language=language)  # type: ignore[arg-type]

    @property
    def clef_name(self) -> str:
        return self.clef.value if isinstance(self.clef, Clef) else self.clef

    @property
    def countdown_ms(self) -> int:
        return COUNTDOWN_MS[self.difficulty]


@dataclass(frozen=True)
class Countdown:
    """
    The answer window of the current round.

    Only the clock's scheduled timeout ends a round; these helpers exist
    for drawing a shrinking indicator.
    """

    started_at_ms: float
    duration_ms: int

    @property
    def deadline_ms(self) -> float:
        return self.started_at_ms + self.duration_ms

    def remaining_ms(self, now_ms: float) -> float:
        return max(0.0, min(float(self.duration_ms), self.deadline_ms - now_ms))

    def fraction_remaining(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 0.0
        return self.remaining_ms(now_ms) / self.duration_ms


@dataclass(frozen=True)
class RoundResult:
    """
    Outcome of one resolved round.

    Attributes:
        question:     The question that was asked.
        options:      The four choices that were offered.
        chosen_index: Letter index the player picked, or None on timeout.
        correct:      True when chosen_index matched the question.
        timed_out:    True when the countdown ran out before an answer.
    """

    question: Question
    options: tuple[AnswerOption, ...]
    chosen_index: int | None
    correct: bool
    timed_out: bool = False


@dataclass(frozen=True)
class GameSummary:
    correct_count: int
    questions_asked: int
