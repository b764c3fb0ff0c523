"""
Exception hierarchy for the timed quiz.
"""
from typing import Optional


class TimedQuizError(Exception):
    """Base exception for all timed quiz errors."""
    pass


class QuizLoadError(TimedQuizError):
    """Raised when the quiz file cannot be turned into a question set."""
    pass


class QuizFileNotFoundError(QuizLoadError):
    """Raised when the quiz file does not exist."""
    pass


class QuizFileReadError(QuizLoadError):
    """Raised when the quiz file exists but cannot be read as text."""
    pass


class QuizParseError(QuizLoadError):
    """Raised when a line of the quiz file is not a valid record."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


class AnswerInputError(TimedQuizError):
    """Raised when reading the user's answer fails for a reason other than timeout."""
    pass


class ConfigError(TimedQuizError):
    """Raised when configuration values are missing or out of range."""
    pass
