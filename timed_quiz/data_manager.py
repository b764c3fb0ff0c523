"""
Data manager for quiz file loading and record validation.
"""
import logging
import os
from typing import Dict, List, Optional
from pathlib import Path

from .models import QuestionRecord
from .errors import QuizFileNotFoundError, QuizFileReadError, QuizParseError


class DataManager:
    """Loads and validates delimited quiz files."""

    def __init__(self, delimiter: str = ","):
        """
        Initialize DataManager.

        Args:
            delimiter: Single character separating question from answer
        """
        if len(delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")

        self.delimiter = delimiter
        self.logger = logging.getLogger(__name__)
        self._last_source: Optional[str] = None
        self._last_record_count = 0

    def load_quiz_file(self, file_path) -> List[QuestionRecord]:
        """
        Read a quiz file and parse it into question records.

        Args:
            file_path: Path to the quiz file

        Returns:
            List of QuestionRecord objects in file order

        Raises:
            QuizFileNotFoundError: If the file does not exist
            QuizFileReadError: If the file cannot be read as UTF-8 text
            QuizParseError: If any line is not a valid record
        """
        path = Path(file_path)

        if not path.exists():
            self.logger.error(f"Quiz file not found: {path}")
            raise QuizFileNotFoundError(f"Quiz file not found: {path}")

        if path.is_dir():
            self.logger.error(f"Quiz path is a directory: {path}")
            raise QuizFileReadError(f"Quiz path is a directory, not a file: {path}")

        if not os.access(path, os.R_OK):
            self.logger.error(f"Permission denied reading quiz file: {path}")
            raise QuizFileReadError(f"Permission denied: cannot read {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError as e:
            self.logger.error(f"Quiz file {path} is not valid UTF-8: {e}")
            raise QuizFileReadError(f"Quiz file {path} is not valid UTF-8 text") from e
        except OSError as e:
            self.logger.error(f"Failed to read quiz file {path}: {e}")
            raise QuizFileReadError(f"Failed to read quiz file {path}: {e}") from e

        return self.parse_quiz_text(text, source=str(path))

    def parse_quiz_text(self, text: str, source: str = "<string>") -> List[QuestionRecord]:
        """
        Parse quiz file content into question records.

        Every non-blank line must hold exactly one delimiter. Blank lines,
        including a trailing one, are skipped. Surrounding whitespace is
        trimmed from both fields.

        Args:
            text: Full content of a quiz file
            source: Name used in log and error messages

        Returns:
            List of QuestionRecord objects in file order

        Raises:
            QuizParseError: If a line is malformed or no records are found
        """
        records = []

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            records.append(self._parse_line(line, line_number, source))

        if not records:
            self.logger.error(f"No questions found in {source}")
            raise QuizParseError(f"{source}: quiz file contains no questions")

        self._last_source = source
        self._last_record_count = len(records)
        self.logger.info(f"Loaded {len(records)} questions from {source}")

        return records

    def _parse_line(self, line: str, line_number: int, source: str) -> QuestionRecord:
        """Split a single line into a QuestionRecord."""
        field_count = line.count(self.delimiter) + 1

        if field_count < 2:
            self.logger.error(f"{source}:{line_number}: missing '{self.delimiter}' separator")
            raise QuizParseError(
                f"{source}, line {line_number}: expected 'question{self.delimiter}answer', "
                f"found no '{self.delimiter}' separator",
                line_number
            )

        if field_count > 2:
            self.logger.error(f"{source}:{line_number}: {field_count} fields, expected 2")
            raise QuizParseError(
                f"{source}, line {line_number}: expected 2 fields, found {field_count}; "
                f"'{self.delimiter}' may only appear once per line",
                line_number
            )

        question, answer = (part.strip() for part in line.split(self.delimiter))

        if not question:
            self.logger.error(f"{source}:{line_number}: empty question")
            raise QuizParseError(f"{source}, line {line_number}: question is empty", line_number)
        if not answer:
            self.logger.error(f"{source}:{line_number}: empty answer")
            raise QuizParseError(f"{source}, line {line_number}: answer is empty", line_number)

        return QuestionRecord(question=question, answer=answer)

    def get_loading_summary(self) -> Dict[str, any]:
        """
        Get a summary of the last successful load.

        Returns:
            Dictionary with the source name and record count
        """
        return {
            'source': self._last_source,
            'record_count': self._last_record_count,
            'delimiter': self.delimiter
        }
