"""
Core data models for the timed quiz.
"""
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class QuestionRecord:
    """One question/answer pair parsed from the quiz file."""
    question: str
    answer: str


class AnswerOutcome(Enum):
    """Terminal states of a single presented question."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    TIMED_OUT = "timed_out"


@dataclass
class QuizSettings:
    """Configuration settings for a quiz run."""
    quiz_file: str = "quiz.tsv"
    time_limit_seconds: int = 4
    shuffle: bool = True
    delimiter: str = ","


@dataclass
class RunResult:
    """Score accumulated over one quiz run."""
    correct_count: int = 0
    total_count: int = 0

    def summary_line(self) -> str:
        return f"Score: {self.correct_count} / {self.total_count}"
