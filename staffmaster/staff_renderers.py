"""Renderer implementations that draw the question note on a staff."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

import click

from staffmaster.quiz_models import Clef, Pitch, parse_clef
from staffmaster.staff_position import (
    STAFF_BOTTOM,
    STAFF_LINE_OFFSETS,
    STAFF_TOP,
    STEM_UP,
    STEP_UNIT,
    StaffPosition,
)

#: Staff line each clef sign is centred on (G4, F3 and C4 lines).
CLEF_SIGN_OFFSETS: dict[Clef, tuple[str, int]] = {
    Clef.TREBLE: ("G", 140),
    Clef.BASS: ("F", 100),
    Clef.ALTO: ("C", 120),
}


class StaffRenderer(ABC):
    """Abstract staff renderer, called once per question."""

    @abstractmethod
    def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
        """Show *pitch* on *clef*'s staff at *position*."""


class NullRenderer(StaffRenderer):
    """Draws nothing."""

    def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
        pass


class TextStaffRenderer(StaffRenderer):
    """
    Draw the staff as text, one row per scale degree.

    Staff lines span the full width, ledger lines are short dashes around
    the note head ``O``, and the stem is drawn with ``|`` for three line
    spacings on the side matching its direction.
    """

    WIDTH = 30
    NOTE_COLUMN = 18
    LEDGER_HALF_WIDTH = 3
    STEM_STEPS = 6

    def __init__(self, echo: Callable[[str], Any] = click.echo) -> None:
        self.echo = echo

    def draw(self, clef: Clef | str, position: StaffPosition) -> str:
        clef = parse_clef(clef)
        offset = position.line_offset
        stem_column = self.NOTE_COLUMN + 1 if position.stem_direction == STEM_UP else self.NOTE_COLUMN - 1
        stem_sign = -1 if position.stem_direction == STEM_UP else 1
        stem_rows = {offset + stem_sign * STEP_UNIT * n for n in range(1, self.STEM_STEPS + 1)}

        top = min([STAFF_TOP, offset, *stem_rows])
        bottom = max([STAFF_BOTTOM, offset, *stem_rows])
        ledgers = set(position.ledger_line_offsets)
        sign, sign_offset = CLEF_SIGN_OFFSETS[clef]

        rows: list[str] = []
        for y in range(top, bottom + 1, STEP_UNIT):
            if y in STAFF_LINE_OFFSETS:
                row = ["-"] * self.WIDTH
            else:
                row = [" "] * self.WIDTH
                if y in ledgers:
                    start = self.NOTE_COLUMN - self.LEDGER_HALF_WIDTH
                    row[start : start + 2 * self.LEDGER_HALF_WIDTH + 1] = "-" * (2 * self.LEDGER_HALF_WIDTH + 1)
            if y == sign_offset:
                row[2] = sign
            if y in stem_rows:
                row[stem_column] = "|"
            if y == offset:
                row[self.NOTE_COLUMN] = "O"
            rows.append("".join(row).rstrip())
        return "\n".join(rows)

    def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
        self.echo(self.draw(clef, position))


class VerovioStaffRenderer(StaffRenderer):
    """
    Engrave the note with music21 + verovio and write one SVG per question.

    The note is a single quarter note in a 1/4 bar so no rests are needed;
    its stem direction comes from the StaffPosition.
    """

    _SCALE: int = 60
    _PAGE_MARGIN: int = 40

    def __init__(self, output_dir: str | Path | None = None) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.rendered = 0
        self.last_svg: str | None = None
        self.last_path: Path | None = None

    def build_musicxml(self, pitch: Pitch, clef: Clef | str, position: StaffPosition) -> bytes:
        from music21 import clef as m21_clef
        from music21 import meter, note, stream
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        clef_classes = {
            Clef.TREBLE: m21_clef.TrebleClef,
            Clef.BASS: m21_clef.BassClef,
            Clef.ALTO: m21_clef.AltoClef,
        }
        question_note = note.Note(str(pitch), quarterLength=1.0)
        question_note.stemDirection = position.stem_direction

        measure = stream.Measure(number=1)
        measure.append(clef_classes[parse_clef(clef)]())
        measure.append(meter.TimeSignature("1/4"))
        measure.append(question_note)

        part = stream.Part()
        part.append(measure)
        score = stream.Score()
        score.insert(0, part)
        return cast(bytes, GeneralObjectExporter(score).parse())

    def engrave(self, pitch: Pitch, clef: Clef | str, position: StaffPosition) -> str:
        """
        Return an SVG drawing of *pitch* on *clef*'s staff.

        Raises:
            ValueError: If verovio cannot load the generated MusicXML.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
                "adjustPageWidth": True,
                "header": "none",
                "footer": "none",
                "font": "Leipzig",
            }
        )

        musicxml = self.build_musicxml(pitch, clef, position)
        loaded: bool = tk.loadData(musicxml.decode("utf-8"))
        if not loaded:
            raise ValueError(f"verovio could not load the MusicXML for {pitch}.")
        return self._render_page_svg(tk, 1)

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        """Render one page, accepting both keyword and positional verovio bindings."""
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            try:
                return cast(str, toolkit.renderToSVG(page_no, False))
            except TypeError:
                return cast(str, toolkit.renderToSVG(page_no))

    def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
        """
        Engrave the note and, when an output directory is set, save it as
        ``question-NN.svg``.

        Raises:
            OSError: If the SVG file cannot be written.
        """
        self.rendered += 1
        self.last_svg = self.engrave(pitch, clef, position)
        if self.output_dir is None:
            return

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.last_path = self.output_dir / f"question-{self.rendered:02d}.svg"
        with open(self.last_path, "w", encoding="utf-8") as fh:
            fh.write(self.last_svg)


class CompositeRenderer(StaffRenderer):
    """Forward each question to several renderers in order."""

    def __init__(self, renderers: list[StaffRenderer]) -> None:
        self.renderers = renderers

    def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
        for renderer in self.renderers:
            renderer.render(pitch, clef, position)
