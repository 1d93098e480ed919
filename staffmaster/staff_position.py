"""StaffPositionMapper: places a note on a five-line staff for a given clef."""

from dataclasses import dataclass

from staffmaster.quiz_models import Clef, Pitch, parse_clef

# ── Staff geometry ──────────────────────────────────────────────────────────
# Vertical coordinates grow downwards, as in SVG.

STAFF_LINE_OFFSETS: tuple[int, ...] = (80, 100, 120, 140, 160)  # top → bottom
STAFF_TOP = STAFF_LINE_OFFSETS[0]
STAFF_BOTTOM = STAFF_LINE_OFFSETS[-1]
STAFF_CENTER = STAFF_LINE_OFFSETS[2]

#: Distance between adjacent scale degrees (a line and the next space).
STEP_UNIT = 10
LINE_SPACING = STEP_UNIT * 2

STEM_UP = "up"
STEM_DOWN = "down"


@dataclass(frozen=True)
class StaffPosition:
    """
    Where a note head sits on the staff and what it needs drawn around it.

    Attributes:
        line_offset:    Vertical coordinate of the note head centre.
        ledger_above:   Ledger lines needed above the top staff line.
        ledger_below:   Ledger lines needed below the bottom staff line.
        stem_direction: "up" for notes below the middle line, else "down".
    """

    line_offset: int
    ledger_above: int
    ledger_below: int
    stem_direction: str

    @property
    def on_line(self) -> bool:
        """True when the note head is centred on a line rather than a space."""
        return (self.line_offset - STAFF_TOP) % LINE_SPACING == 0

    @property
    def staff_step(self) -> int:
        """Diatonic steps above the bottom line (negative below it)."""
        return (STAFF_BOTTOM - self.line_offset) // STEP_UNIT

    @property
    def ledger_line_offsets(self) -> tuple[int, ...]:
        """Coordinates of each ledger line, nearest the staff first."""
        above = tuple(STAFF_TOP - LINE_SPACING * n for n in range(1, self.ledger_above + 1))
        below = tuple(STAFF_BOTTOM + LINE_SPACING * n for n in range(1, self.ledger_below + 1))
        return above + below


class StaffPositionMapper:
    """
    Maps a pitch to a staff coordinate with a single formula per clef.

    Each clef pins one reference pitch to a known line:

        treble  E4 on the bottom line  (y = 160)
        bass    G2 on the bottom line  (y = 160)
        alto    C4 on the middle line  (y = 120)

    Every other note is counted in scale degrees from that reference, one
    STEP_UNIT per degree, upwards being smaller y:

        y = ref_y - (degree(pitch) - degree(ref)) * STEP_UNIT

    Ledger lines are counted one per full line spacing beyond the outer
    lines, rounding toward the staff, so a note in the space just outside
    the staff needs none.
    """

    REFERENCES: dict[Clef, tuple[Pitch, int]] = {
        Clef.TREBLE: (Pitch("E", 4), STAFF_BOTTOM),
        Clef.BASS: (Pitch("G", 2), STAFF_BOTTOM),
        Clef.ALTO: (Pitch("C", 4), STAFF_CENTER),
    }

    def line_offset(self, pitch: Pitch, clef: Clef | str) -> int:
        reference, reference_offset = self.REFERENCES[parse_clef(clef)]
        return reference_offset - (pitch.scale_degree - reference.scale_degree) * STEP_UNIT

    def position_for(self, pitch: Pitch, clef: Clef | str) -> StaffPosition:
        """Return the full placement descriptor for *pitch* on *clef*'s staff."""
        offset = self.line_offset(pitch, clef)
        return StaffPosition(
            line_offset=offset,
            ledger_above=max(0, (STAFF_TOP - offset) // LINE_SPACING),
            ledger_below=max(0, (offset - STAFF_BOTTOM) // LINE_SPACING),
            stem_direction=STEM_UP if offset > STAFF_CENTER else STEM_DOWN,
        )
