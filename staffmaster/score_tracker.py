"""ScoreTracker: running score for one game."""

from staffmaster.quiz_models import TOTAL_QUESTIONS, GameSummary


class ScoreTracker:
    """Counts correct answers and resolved questions."""

    def __init__(self, total_questions: int = TOTAL_QUESTIONS) -> None:
        if total_questions < 1:
            raise ValueError(f"total_questions must be positive, got {total_questions}.")
        self.total_questions = total_questions
        self.correct_count = 0
        self.questions_asked = 0

    def reset(self) -> None:
        self.correct_count = 0
        self.questions_asked = 0

    def record_outcome(self, correct: bool) -> None:
        """
        Count one resolved question.

        Raises:
            RuntimeError: If every question has already been counted.
        """
        if self.is_complete():
            raise RuntimeError("All questions have already been recorded.")
        self.questions_asked += 1
        if correct:
            self.correct_count += 1

    def is_complete(self) -> bool:
        return self.questions_asked >= self.total_questions

    def summary(self) -> GameSummary:
        return GameSummary(correct_count=self.correct_count, questions_asked=self.questions_asked)
