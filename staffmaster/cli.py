"""Staff Master CLI entry point."""

import asyncio
import random
import sys
import threading
from collections.abc import Callable
from typing import IO

import click

from staffmaster import __version__
from staffmaster.audio_signal import AudioSignal, SilentAudio, ToneAudio
from staffmaster.clock import AsyncioClock
from staffmaster.distractors import DistractorSelector
from staffmaster.labels import clef_label, letter_index_for_label, letter_label
from staffmaster.logging_utils import configure_logging
from staffmaster.note_catalog import NoteRangeCatalog
from staffmaster.question_generator import QuestionGenerator
from staffmaster.quiz_models import (
    MIXED_CLEF,
    SUPPORTED_LANGUAGES,
    AnswerOption,
    Clef,
    ConfigurationError,
    Countdown,
    Difficulty,
    GameConfig,
    GameSummary,
    Pitch,
    Question,
    RoundResult,
    RoundState,
)
from staffmaster.round_machine import RoundStateMachine
from staffmaster.staff_position import StaffPositionMapper
from staffmaster.staff_renderers import (
    CompositeRenderer,
    StaffRenderer,
    TextStaffRenderer,
    VerovioStaffRenderer,
)

CLEF_CHOICES = [clef.value for clef in Clef]
DIFFICULTY_CHOICES = [difficulty.value for difficulty in Difficulty]
QUIT_WORDS = {"q", "quit", "exit"}


def _parse_answer(text: str, options: tuple[AnswerOption, ...], language: str) -> int | None:
    """Map typed input (an option number or a label) to a letter index."""
    cleaned = text.strip()
    if cleaned.isdigit():
        number = int(cleaned)
        if 1 <= number <= len(options):
            return options[number - 1].letter_index
        return None
    index = letter_index_for_label(cleaned, language)
    if index is None or index not in {option.letter_index for option in options}:
        return None
    return index


def _read_lines(
    loop: asyncio.AbstractEventLoop,
    handler: Callable[[str | None], None],
    stream: IO[str],
) -> None:
    """Forward each input line to the event loop; None marks end of input."""
    try:
        for line in stream:
            loop.call_soon_threadsafe(handler, line)
        loop.call_soon_threadsafe(handler, None)
    except RuntimeError:
        # The loop closed while this thread was still waiting for input.
        return


class _Console:
    """Prints game progress and routes typed answers into the engine."""

    def __init__(self, engine: RoundStateMachine, config: GameConfig) -> None:
        self.engine = engine
        self.config = config

    def show_question(self, question: Question, options: tuple[AnswerOption, ...], countdown: Countdown) -> None:
        score = self.engine.score
        number = score.questions_asked + 1
        clef = clef_label(question.clef, self.config.language)
        seconds = countdown.duration_ms / 1000
        choices = "   ".join(f"{i}) {option.label}" for i, option in enumerate(options, start=1))
        click.echo(f"Question {number}/{score.total_questions}  |  {clef} clef  |  {seconds:g}s")
        click.echo(f"  {choices}")
        click.echo("> ", nl=False)

    def show_result(self, result: RoundResult) -> None:
        answer = letter_label(result.question.correct_letter_index, self.config.language)
        if result.correct:
            click.secho(f"\n  Correct! {result.question.pitch} is {answer}.", fg="green")
        elif result.chosen_index is None:
            click.secho(f"\n  Time's up! {result.question.pitch} is {answer}.", fg="red")
        else:
            chosen = letter_label(result.chosen_index, self.config.language)
            click.secho(f"\n  Wrong: you chose {chosen}, {result.question.pitch} is {answer}.", fg="red")
        score = self.engine.score
        click.echo(f"  Score: {score.correct_count}/{score.questions_asked}")
        click.echo()

    def handle_line(self, line: str) -> None:
        index = _parse_answer(line, self.engine.current_options, self.config.language)
        if index is None:
            if self.engine.state is RoundState.AWAITING_ANSWER:
                click.echo("  Type an option number (1-4) or a note name, or q to quit.")
                click.echo("> ", nl=False)
            return
        # Lines typed during the feedback pause are dropped by the engine.
        self.engine.submit_answer(index)


async def _run_game(
    config: GameConfig,
    *,
    rng: random.Random,
    renderer: StaffRenderer,
    audio: AudioSignal,
    stdin: IO[str],
) -> GameSummary | None:
    """Play one game on the running loop; None means the player quit."""
    loop = asyncio.get_running_loop()
    finished: asyncio.Future[GameSummary | None] = loop.create_future()

    def finish(result: GameSummary | None) -> None:
        if not finished.done():
            finished.set_result(result)

    def fail(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
        if not finished.done():
            finished.set_exception(context.get("exception") or RuntimeError(context["message"]))

    engine = RoundStateMachine(
        AsyncioClock(loop),
        generator=QuestionGenerator(rng=rng),
        selector=DistractorSelector(rng=rng),
        renderer=renderer,
        audio=audio,
    )
    console = _Console(engine, config)
    engine.on_question_presented(console.show_question)
    engine.on_round_resolved(console.show_result)
    engine.on_game_over(finish)

    def on_line(line: str | None) -> None:
        if line is None or line.strip().lower() in QUIT_WORDS:
            engine.reset()
            finish(None)
            return
        console.handle_line(line)

    loop.set_exception_handler(fail)
    threading.Thread(target=_read_lines, args=(loop, on_line, stdin), daemon=True).start()
    try:
        engine.start_game(config)
        return await finished
    finally:
        engine.reset()


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="staffmaster")
def main() -> None:
    """Staff Master — name the note on the staff before time runs out."""


# ── play subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.option(
    "--clef",
    type=click.Choice([*CLEF_CHOICES, MIXED_CLEF], case_sensitive=False),
    default=Clef.TREBLE.value,
    show_default=True,
    help="Staff to read. 'mixed' picks a clef at random for every question.",
)
@click.option(
    "--difficulty",
    type=click.Choice(DIFFICULTY_CHOICES, case_sensitive=False),
    default=Difficulty.EASY.value,
    show_default=True,
    help="easy: notes on the staff, 7 s per question. hard: ledger lines too, 5 s.",
)
@click.option(
    "--language",
    type=click.Choice(list(SUPPORTED_LANGUAGES), case_sensitive=False),
    default="en",
    show_default=True,
    help="Answer labels: en (C D E ...) or es (Do Re Mi ...).",
)
@click.option("--mute", is_flag=True, help="Do not play note or feedback sounds.")
@click.option(
    "--svg-dir",
    default=None,
    metavar="DIR",
    type=click.Path(file_okay=False),
    help="Also engrave each question as question-NN.svg in DIR (music21 + verovio).",
)
@click.option("--seed", type=int, default=None, help="Random seed for a repeatable game.")
@click.option("--verbose", "-v", is_flag=True, help="Log engine events to stderr.")
def play(
    clef: str,
    difficulty: str,
    language: str,
    mute: bool,
    svg_dir: str | None,
    seed: int | None,
    verbose: bool,
) -> None:
    """
    Play a 12-question game in the terminal.

    Answer with the option number or the note name and press Enter.
    A question left unanswered when the time runs out counts as wrong.

    \b
    Examples:
      staffmaster play
      staffmaster play --clef mixed --difficulty hard
      staffmaster play --clef alto --language es --svg-dir notes/
    """
    configure_logging(verbose)
    config = GameConfig.create(clef=clef, difficulty=difficulty, language=language)

    renderers: list[StaffRenderer] = [TextStaffRenderer()]
    if svg_dir is not None:
        renderers.append(VerovioStaffRenderer(svg_dir))
    audio: AudioSignal = SilentAudio() if mute else ToneAudio()

    click.echo(f"staffmaster v{__version__}")
    click.echo(f"  Clef       : {clef_label(config.clef_name, config.language)}")
    click.echo(f"  Difficulty : {config.difficulty.value}  |  {config.countdown_ms // 1000} s per question")
    click.echo()

    try:
        summary = asyncio.run(
            _run_game(
                config,
                rng=random.Random(seed),
                renderer=CompositeRenderer(renderers),
                audio=audio,
                stdin=click.get_text_stream("stdin"),
            )
        )
    except OSError as exc:
        click.echo(f"  ERROR: Could not write SVG file — {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not engrave note — {exc}", err=True)
        sys.exit(1)

    if summary is None:
        click.echo("\nGame abandoned.")
        return
    click.echo(f"Game over!  Final score: {summary.correct_count}/{summary.questions_asked}")
    if isinstance(audio, ToneAudio):
        audio.wait()


# ── engrave subcommand ─────────────────────────────────────────────────────────

@main.command()
@click.argument("note")
@click.option(
    "--clef",
    type=click.Choice(CLEF_CHOICES, case_sensitive=False),
    default=Clef.TREBLE.value,
    show_default=True,
)
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Write an SVG engraving (music21 + verovio) instead of the text staff.",
)
def engrave(note: str, clef: str, output: str | None) -> None:
    """
    Show where NOTE sits on a staff, e.g. E4 or c6.

    \b
    Examples:
      staffmaster engrave E4
      staffmaster engrave C4 --clef alto
      staffmaster engrave A3 --clef treble -o a3.svg
    """
    try:
        pitch = Pitch.parse(note)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc), param_hint="NOTE") from exc

    position = StaffPositionMapper().position_for(pitch, clef)
    click.echo(
        f"{pitch} on {clef} staff: offset={position.line_offset}  "
        f"ledger_above={position.ledger_above}  ledger_below={position.ledger_below}  "
        f"stem={position.stem_direction}"
    )

    if output is None:
        click.echo(TextStaffRenderer().draw(clef, position))
        return

    try:
        svg = VerovioStaffRenderer().engrave(pitch, clef, position)
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(svg)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write SVG file — {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not engrave note — {exc}", err=True)
        sys.exit(1)
    click.echo(f"Done!  Open '{output}' in any browser.")


# ── ranges subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.option("--clef", type=click.Choice(CLEF_CHOICES, case_sensitive=False), default=None)
@click.option("--difficulty", type=click.Choice(DIFFICULTY_CHOICES, case_sensitive=False), default=None)
def ranges(clef: str | None, difficulty: str | None) -> None:
    """List the notes each clef and difficulty can ask about."""
    mapper = StaffPositionMapper()
    for range_clef, range_difficulty, pitches in NoteRangeCatalog().all_ranges():
        if clef is not None and range_clef.value != clef.lower():
            continue
        if difficulty is not None and range_difficulty.value != difficulty.lower():
            continue
        click.echo(f"{range_clef.value} / {range_difficulty.value}  ({pitches[0]} .. {pitches[-1]})")
        for pitch in pitches:
            position = mapper.position_for(pitch, range_clef)
            ledgers = position.ledger_above or position.ledger_below
            where = "line " if position.on_line else "space"
            click.echo(f"  {str(pitch):<4} {where}  offset={position.line_offset:<4} ledger lines={ledgers}")
        click.echo()


# ── sound-test subcommand ──────────────────────────────────────────────────────

@main.command("sound-test")
def sound_test() -> None:
    """Play a short A major chord to check that audio works."""
    audio = ToneAudio()
    audio.sound_test()
    if not audio.available:
        click.echo("  ERROR: No audio output device is available.", err=True)
        sys.exit(1)
    audio.wait()
    click.echo("Sound is working.")
