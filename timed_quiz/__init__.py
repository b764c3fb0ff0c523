"""
Terminal timed quiz: load question/answer pairs, shuffle them and race
each answer against a fixed time limit.
"""
from .models import QuestionRecord, RunResult, AnswerOutcome, QuizSettings

__version__ = "0.1.0"

__all__ = ["QuestionRecord", "RunResult", "AnswerOutcome", "QuizSettings", "__version__"]
