"""RoundStateMachine: drives a game from the first question to the final score."""

from __future__ import annotations

import logging
from collections.abc import Callable

from staffmaster.audio_signal import AudioSignal, SilentAudio
from staffmaster.clock import Clock, TimerHandle
from staffmaster.distractors import DistractorSelector
from staffmaster.logging_utils import log_event
from staffmaster.question_generator import QuestionGenerator
from staffmaster.quiz_models import (
    FEEDBACK_DELAY_MS,
    AnswerOption,
    Countdown,
    GameConfig,
    GameSummary,
    Question,
    RoundResult,
    RoundState,
    StaleAnswerIgnored,
    check_letter_index,
)
from staffmaster.score_tracker import ScoreTracker
from staffmaster.staff_position import StaffPositionMapper
from staffmaster.staff_renderers import NullRenderer, StaffRenderer

logger = logging.getLogger(__name__)

QuestionListener = Callable[[Question, tuple[AnswerOption, ...], Countdown], None]
RoundListener = Callable[[RoundResult], None]
GameOverListener = Callable[[GameSummary], None]


class RoundStateMachine:
    """
    Runs one game of TOTAL_QUESTIONS timed rounds.

    State flow
    ----------
        IDLE ──start_game──▶ AWAITING_ANSWER
        AWAITING_ANSWER ──submit_answer / countdown expiry──▶ RESOLVED
        RESOLVED ──feedback delay──▶ AWAITING_ANSWER  (questions left)
                                 └─▶ GAME_OVER        (all answered)
        any ──reset──▶ IDLE

    A countdown that runs out is scored exactly like a wrong answer.

    At most one timer is live at a time: the countdown while awaiting an
    answer, the feedback delay while resolved. Every transition cancels the
    live timer before scheduling the next one, so a timer from an earlier
    round can never act on a later one. Answers that arrive outside
    AWAITING_ANSWER are ignored, whatever the UI still shows.
    """

    def __init__(
        self,
        clock: Clock,
        *,
        generator: QuestionGenerator | None = None,
        selector: DistractorSelector | None = None,
        mapper: StaffPositionMapper | None = None,
        renderer: StaffRenderer | None = None,
        audio: AudioSignal | None = None,
        score: ScoreTracker | None = None,
        feedback_delay_ms: int = FEEDBACK_DELAY_MS,
    ) -> None:
        self.clock = clock
        self.generator = generator or QuestionGenerator()
        self.selector = selector or DistractorSelector()
        self.mapper = mapper or StaffPositionMapper()
        self.renderer = renderer or NullRenderer()
        self.audio = audio or SilentAudio()
        self.feedback_delay_ms = feedback_delay_ms

        self._score = score or ScoreTracker()
        self._state = RoundState.IDLE
        self._config: GameConfig | None = None
        self._question: Question | None = None
        self._options: tuple[AnswerOption, ...] = ()
        self._countdown: Countdown | None = None
        self._timer: TimerHandle | None = None
        self._round_number = 0

        self._question_listeners: list[QuestionListener] = []
        self._round_listeners: list[RoundListener] = []
        self._game_over_listeners: list[GameOverListener] = []

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def config(self) -> GameConfig | None:
        return self._config

    @property
    def current_question(self) -> Question | None:
        return self._question

    @property
    def current_options(self) -> tuple[AnswerOption, ...]:
        return self._options

    @property
    def countdown(self) -> Countdown | None:
        """Answer window of the live round, or None when no answer is awaited."""
        return self._countdown if self._state is RoundState.AWAITING_ANSWER else None

    @property
    def score(self) -> ScoreTracker:
        return self._score

    # ------------------------------------------------------------------
    # Notification hooks
    # ------------------------------------------------------------------

    def on_question_presented(self, callback: QuestionListener) -> None:
        self._question_listeners.append(callback)

    def on_round_resolved(self, callback: RoundListener) -> None:
        self._round_listeners.append(callback)

    def on_game_over(self, callback: GameOverListener) -> None:
        self._game_over_listeners.append(callback)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, duration_ms: float, callback: Callable[[], None]) -> None:
        self._cancel_timer()
        self._timer = self.clock.after(duration_ms, callback)

    def _present_question(self) -> None:
        if self._config is None:
            raise RuntimeError("No game has been started.")
        question = self.generator.generate(self._config)
        position = self.mapper.position_for(question.pitch, question.clef)
        options = self.selector.options_for(question.correct_letter_index, self._config.language)

        self._round_number += 1
        self._question = question
        self._options = options
        self._state = RoundState.AWAITING_ANSWER

        self.renderer.render(question.pitch, question.clef, position)
        self.audio.play_question_tone(question.pitch)

        round_number = self._round_number
        duration_ms = self._config.countdown_ms
        self._countdown = Countdown(started_at_ms=self.clock.now_ms(), duration_ms=duration_ms)
        self._schedule(duration_ms, lambda: self._on_timeout(round_number))

        log_event(
            logger,
            "question_presented",
            logging.DEBUG,
            round=round_number,
            pitch=str(question.pitch),
            clef=question.clef.value,
            line_offset=position.line_offset,
        )
        for listener in list(self._question_listeners):
            listener(question, options, self._countdown)

    def _require_awaiting(self, round_number: int) -> Question:
        if self._state is not RoundState.AWAITING_ANSWER or self._question is None:
            raise StaleAnswerIgnored(f"No question is waiting for an answer (state {self._state.value}).")
        if round_number != self._round_number:
            raise StaleAnswerIgnored(f"Round {round_number} is over; round {self._round_number} is live.")
        return self._question

    def _resolve(self, question: Question, chosen_index: int | None) -> None:
        self._cancel_timer()
        correct = chosen_index is not None and chosen_index == question.correct_letter_index
        self._score.record_outcome(correct)
        self._state = RoundState.RESOLVED

        result = RoundResult(
            question=question,
            options=self._options,
            chosen_index=chosen_index,
            correct=correct,
            timed_out=chosen_index is None,
        )
        log_event(
            logger,
            "round_resolved",
            logging.DEBUG,
            round=self._round_number,
            correct=correct,
            timed_out=result.timed_out,
            score=self._score.correct_count,
        )
        self.audio.play_feedback(correct)
        # Scheduled before listeners run; a listener that raises leaves the advance in place.
        self._schedule(self.feedback_delay_ms, self._advance)
        for listener in list(self._round_listeners):
            listener(result)

    def _on_timeout(self, round_number: int) -> None:
        try:
            question = self._require_awaiting(round_number)
        except StaleAnswerIgnored as exc:
            log_event(logger, "stale_timeout_ignored", logging.DEBUG, reason=str(exc))
            return
        self._resolve(question, None)

    def _advance(self) -> None:
        self._timer = None
        if self._state is not RoundState.RESOLVED:
            return
        if self._score.is_complete():
            self._finish()
        else:
            self._present_question()

    def _finish(self) -> None:
        self._cancel_timer()
        self._state = RoundState.GAME_OVER
        self._question = None
        self._options = ()
        self._countdown = None
        summary = self._score.summary()
        log_event(
            logger,
            "game_over",
            correct_count=summary.correct_count,
            questions_asked=summary.questions_asked,
        )
        for listener in list(self._game_over_listeners):
            listener(summary)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_game(self, config: GameConfig) -> None:
        """
        Reset the score and present the first question.

        A game already in progress is abandoned first.
        """
        self.reset()
        self._config = config
        self._score.reset()
        log_event(logger, "game_started", clef=config.clef_name, difficulty=config.difficulty.value)
        self._present_question()

    def submit_answer(self, letter_index: int) -> bool:
        """
        Answer the live question.

        Returns:
            True if the answer resolved the round, False if it was ignored
            because no question was waiting (for example a late click).

        Raises:
            ConfigurationError: If *letter_index* is not in 0..6.
        """
        check_letter_index(letter_index)
        try:
            question = self._require_awaiting(self._round_number)
        except StaleAnswerIgnored as exc:
            log_event(logger, "stale_answer_ignored", logging.DEBUG, letter_index=letter_index, reason=str(exc))
            return False
        self._resolve(question, letter_index)
        return True

    def reset(self) -> None:
        """Abandon any game in progress and return to IDLE."""
        self._cancel_timer()
        if self._state is not RoundState.IDLE:
            log_event(logger, "game_reset", logging.DEBUG, previous_state=self._state.value)
        self._state = RoundState.IDLE
        self._question = None
        self._options = ()
        self._countdown = None
