"""Unit tests for the staff renderers."""

import pytest

from staffmaster.quiz_models import Clef, Pitch
from staffmaster.staff_position import StaffPosition, StaffPositionMapper
from staffmaster.staff_renderers import CompositeRenderer, NullRenderer, StaffRenderer, TextStaffRenderer, VerovioStaffRenderer

LEDGER_WITH_NOTE = " " * 15 + "---O---"


def _draw(note: str, clef: Clef) -> list[str]:
    position = StaffPositionMapper().position_for(Pitch.parse(note), clef)
    return TextStaffRenderer(echo=lambda _: None).draw(clef, position).split("\n")


def test_text_renderer_draws_five_staff_lines() -> None:
    rows = _draw("B4", Clef.TREBLE)
    assert sum(1 for row in rows if row.startswith("--") and len(row) == TextStaffRenderer.WIDTH) == 5


def test_e4_head_sits_on_bottom_line_with_stem_up() -> None:
    rows = _draw("E4", Clef.TREBLE)
    assert len(rows) == 9
    assert rows[-1][TextStaffRenderer.NOTE_COLUMN] == "O"
    assert set(rows[-1]) == {"-", "O"}
    assert rows[-2][TextStaffRenderer.NOTE_COLUMN + 1] == "|"


def test_stem_down_is_drawn_left_of_head() -> None:
    rows = _draw("D5", Clef.TREBLE)
    head_row = next(i for i, row in enumerate(rows) if "O" in row)
    assert rows[head_row + 1][TextStaffRenderer.NOTE_COLUMN - 1] == "|"


def test_ledger_line_below_treble_for_middle_c() -> None:
    rows = _draw("C4", Clef.TREBLE)
    assert rows[-1] == LEDGER_WITH_NOTE


def test_two_ledger_lines_above_treble_for_c6() -> None:
    rows = _draw("C6", Clef.TREBLE)
    assert rows[0] == LEDGER_WITH_NOTE
    assert set(rows[2].strip()) == {"-", "|"}
    assert len(rows) == 13


@pytest.mark.parametrize(("clef", "sign"), [(Clef.TREBLE, "G"), (Clef.BASS, "F"), (Clef.ALTO, "C")])
def test_clef_sign_is_drawn_on_its_line(clef: Clef, sign: str) -> None:
    mapper = StaffPositionMapper()
    position = mapper.position_for(Pitch("C", 4), clef)
    drawing = TextStaffRenderer().draw(clef, position)
    assert any(row[2:3] == sign for row in drawing.split("\n"))


def test_text_renderer_echoes_drawing() -> None:
    lines: list[str] = []
    renderer = TextStaffRenderer(echo=lines.append)
    pitch = Pitch("G", 4)
    position = StaffPositionMapper().position_for(pitch, Clef.TREBLE)
    renderer.render(pitch, Clef.TREBLE, position)
    assert lines == [renderer.draw(Clef.TREBLE, position)]


def test_composite_renderer_forwards_in_order() -> None:
    calls: list[str] = []

    class _Named(StaffRenderer):
        def __init__(self, name: str) -> None:
            self.name = name

        def render(self, pitch: Pitch, clef: Clef, position: StaffPosition) -> None:
            calls.append(f"{self.name}:{pitch}:{clef.value}")

    pitch = Pitch("A", 3)
    position = StaffPositionMapper().position_for(pitch, Clef.BASS)
    CompositeRenderer([_Named("a"), NullRenderer(), _Named("b")]).render(pitch, Clef.BASS, position)
    assert calls == ["a:A3:bass", "b:A3:bass"]


@pytest.mark.integration
def test_verovio_renderer_writes_numbered_svg(tmp_path) -> None:
    pytest.importorskip("music21")
    pytest.importorskip("verovio")
    renderer = VerovioStaffRenderer(output_dir=tmp_path)
    pitch = Pitch("C", 4)
    position = StaffPositionMapper().position_for(pitch, Clef.ALTO)

    renderer.render(pitch, Clef.ALTO, position)
    renderer.render(pitch, Clef.ALTO, position)

    assert renderer.rendered == 2
    assert renderer.last_path == tmp_path / "question-02.svg"
    assert (tmp_path / "question-01.svg").read_text(encoding="utf-8").lstrip().startswith("<svg")


@pytest.mark.integration
def test_musicxml_carries_clef_and_stem() -> None:
    pytest.importorskip("music21")
    pitch = Pitch("F", 5)
    position = StaffPositionMapper().position_for(pitch, Clef.TREBLE)
    musicxml = VerovioStaffRenderer().build_musicxml(pitch, Clef.TREBLE, position).decode("utf-8")
    assert "<sign>G</sign>" in musicxml
    assert "<stem>down</stem>" in musicxml
    assert "<step>F</step>" in musicxml
