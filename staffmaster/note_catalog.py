"""NoteRangeCatalog: the notes each clef may ask about at each difficulty."""

from collections.abc import Iterator

from staffmaster.quiz_models import (
    LETTERS,
    Clef,
    ConfigurationError,
    Difficulty,
    Pitch,
    parse_clef,
    parse_difficulty,
)


def pitch_span(low: str, high: str) -> tuple[Pitch, ...]:
    """
    Every natural note from *low* to *high* inclusive, in ascending order.

    Args:
        low:  Lowest note, e.g. "E4".
        high: Highest note, e.g. "F5".
    """
    start = Pitch.parse(low).scale_degree
    stop = Pitch.parse(high).scale_degree
    if stop < start:
        raise ConfigurationError(f"Empty note span {low}..{high}.")
    return tuple(
        Pitch(letter=LETTERS[degree % len(LETTERS)], octave=degree // len(LETTERS))
        for degree in range(start, stop + 1)
    )


class NoteRangeCatalog:
    """
    Static note tables per (clef, difficulty).

    Easy ranges stay on or between the five staff lines. Hard ranges reach
    roughly a third past the staff in both directions, so they include notes
    on up to two ledger lines.

        Clef     Easy        Hard
        treble   E4 .. F5    A3 .. C6
        bass     G2 .. A3    C2 .. E4
        alto     F3 .. G4    C3 .. C5
    """

    RANGES: dict[tuple[Clef, Difficulty], tuple[Pitch, ...]] = {
        (Clef.TREBLE, Difficulty.EASY): pitch_span("E4", "F5"),
        (Clef.TREBLE, Difficulty.HARD): pitch_span("A3", "C6"),
        (Clef.BASS, Difficulty.EASY): pitch_span("G2", "A3"),
        (Clef.BASS, Difficulty.HARD): pitch_span("C2", "E4"),
        (Clef.ALTO, Difficulty.EASY): pitch_span("F3", "G4"),
        (Clef.ALTO, Difficulty.HARD): pitch_span("C3", "C5"),
    }

    def range_for(self, clef: Clef | str, difficulty: Difficulty | str) -> tuple[Pitch, ...]:
        """
        Return the ordered notes for a concrete clef and difficulty.

        Raises:
            ConfigurationError: If the clef or difficulty is not recognised.
                The "mixed" selector must be resolved before calling this.
        """
        key = (parse_clef(clef), parse_difficulty(difficulty))
        try:
            return self.RANGES[key]
        except KeyError:
            raise ConfigurationError(f"No note range for {key[0].value}/{key[1].value}.") from None

    def all_ranges(self) -> Iterator[tuple[Clef, Difficulty, tuple[Pitch, ...]]]:
        for (clef, difficulty), pitches in self.RANGES.items():
            yield clef, difficulty, pitches
