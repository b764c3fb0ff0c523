"""
Quiz engine core logic for the timed quiz.
Handles question ordering, answer checking and the timed answer listener.
"""
import random
import asyncio
import logging
import threading
import time
from typing import List, Optional, TextIO

from .models import QuestionRecord, QuizSettings, AnswerOutcome
from .errors import AnswerInputError

# Set up logger for listener operations
logger = logging.getLogger(__name__)


class ListenerLifecycleLogger:
    """Structured logging for answer listener lifecycle events."""

    @staticmethod
    def log_listener_start(question_number: int, thread_name: str) -> None:
        """Log listener thread start."""
        logger.debug(
            f"Listener lifecycle: STARTED - Question {question_number}, Thread {thread_name}",
            extra={
                'event_type': 'listener_started',
                'question_number': question_number,
                'thread_name': thread_name,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_answer_delivered(question_number: int, wait_duration: float) -> None:
        """Log an answer handed to the runner before the deadline."""
        logger.debug(
            f"Listener lifecycle: DELIVERED - Question {question_number}, after {wait_duration:.3f}s",
            extra={
                'event_type': 'listener_delivered',
                'question_number': question_number,
                'wait_duration': wait_duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_listener_abandoned(question_number: int, time_limit: float) -> None:
        """Log a listener left behind when the deadline expired."""
        logger.info(
            f"Listener lifecycle: ABANDONED - Question {question_number}, no answer within {time_limit}s",
            extra={
                'event_type': 'listener_abandoned',
                'question_number': question_number,
                'time_limit': time_limit,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_late_answer_discarded(question_number: int, reason: str) -> None:
        """Log an answer that arrived after the runner stopped waiting."""
        logger.debug(
            f"Listener lifecycle: DISCARDED - Question {question_number}: {reason}",
            extra={
                'event_type': 'listener_late_answer_discarded',
                'question_number': question_number,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_listener_error(question_number: int, error_message: str) -> None:
        """Log a failed read on the input stream."""
        logger.error(
            f"Listener lifecycle: ERROR - Question {question_number}: {error_message}",
            extra={
                'event_type': 'listener_error',
                'question_number': question_number,
                'error_message': error_message,
                'timestamp': time.time()
            }
        )


class AnswerListener:
    """
    Reads one line of input on a background thread and hands it to the
    event loop through a one-shot future.

    The listener is never cancelled. If the runner stops waiting first, the
    thread is left blocked in ``readline()`` and whatever it eventually reads
    is dropped.
    """

    def __init__(
        self,
        input_stream: TextIO,
        loop: asyncio.AbstractEventLoop,
        question_number: int = 1
    ):
        """
        Initialize the listener.

        Args:
            input_stream: Stream to read the answer line from
            loop: Event loop the runner is waiting on
            question_number: 1-based position of the question, for logging
        """
        self._stream = input_stream
        self._loop = loop
        self._question_number = question_number
        self._future: asyncio.Future = loop.create_future()
        self._thread: Optional[threading.Thread] = None
        self._started_at = 0.0
        self._abandoned = False

    def start(self) -> None:
        """Spawn the reader thread."""
        if self._thread is not None:
            raise RuntimeError("Answer listener can only be started once")

        self._started_at = time.monotonic()
        self._thread = threading.Thread(
            target=self._read_line,
            name=f"answer-listener-{self._question_number}",
            daemon=True
        )
        self._thread.start()
        ListenerLifecycleLogger.log_listener_start(self._question_number, self._thread.name)

    def _read_line(self) -> None:
        """Perform the single blocking read. Runs on the listener thread."""
        try:
            line = self._stream.readline()
        except (OSError, ValueError) as e:
            # ValueError covers reads from a closed stream
            self._deliver(None, AnswerInputError(f"Failed to read answer: {e}"))
            return

        if not line:
            self._deliver(None, AnswerInputError("Input stream closed before an answer was given"))
            return

        self._deliver(line, None)

    def _deliver(self, line: Optional[str], error: Optional[Exception]) -> None:
        """Schedule completion of the future on the event loop thread."""
        try:
            self._loop.call_soon_threadsafe(self._complete, line, error)
        except RuntimeError:
            # Loop already closed: the quiz has finished without us
            ListenerLifecycleLogger.log_late_answer_discarded(
                self._question_number, "event loop closed"
            )

    def _complete(self, line: Optional[str], error: Optional[Exception]) -> None:
        if self._future.done():
            ListenerLifecycleLogger.log_late_answer_discarded(
                self._question_number, "deadline already passed"
            )
            return

        if error is not None:
            ListenerLifecycleLogger.log_listener_error(self._question_number, str(error))
            self._future.set_exception(error)
        else:
            ListenerLifecycleLogger.log_answer_delivered(
                self._question_number, time.monotonic() - self._started_at
            )
            self._future.set_result(line)

    async def wait_for_answer(self, time_limit: float) -> Optional[str]:
        """
        Wait for the listener's line until the deadline.

        Args:
            time_limit: Seconds to wait

        Returns:
            The raw line read, or None if the deadline passed first

        Raises:
            AnswerInputError: If the read itself failed
        """
        try:
            return await asyncio.wait_for(self._future, timeout=time_limit)
        except asyncio.TimeoutError:
            self._abandoned = True
            ListenerLifecycleLogger.log_listener_abandoned(self._question_number, time_limit)
            return None

    @property
    def is_abandoned(self) -> bool:
        """Check if the runner gave up waiting on this listener."""
        return self._abandoned

    @property
    def thread(self) -> Optional[threading.Thread]:
        """The reader thread, once started."""
        return self._thread


class QuizEngine:
    """Core quiz engine that handles question ordering and answer checking."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize the quiz engine.

        Args:
            rng: Random source used for shuffling. Defaults to a generator
                seeded from system entropy.
        """
        self._rng = rng if rng is not None else random.Random()

    def select_questions(self, questions: List[QuestionRecord], settings: QuizSettings) -> List[QuestionRecord]:
        """
        Order questions based on quiz settings.

        Args:
            questions: Loaded question records
            settings: Quiz configuration settings

        Returns:
            New list of records, shuffled if the settings ask for it
        """
        if settings.shuffle:
            return self.shuffle_questions(questions)
        return list(questions)

    def shuffle_questions(self, questions: List[QuestionRecord]) -> List[QuestionRecord]:
        """
        Shuffle questions randomly.

        Args:
            questions: List of questions to shuffle

        Returns:
            New list with questions in random order
        """
        shuffled = list(questions)
        self._rng.shuffle(shuffled)
        return shuffled

    @staticmethod
    def check_answer(response: str, expected: str) -> AnswerOutcome:
        """
        Compare a typed response against the expected answer.

        Surrounding whitespace is ignored; the comparison is otherwise exact
        and case-sensitive.
        """
        if response.strip() == expected:
            return AnswerOutcome.CORRECT
        return AnswerOutcome.INCORRECT
