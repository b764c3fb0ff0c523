"""
Quiz runner for the timed quiz.
Presents questions one at a time, races each answer against the time limit
and accumulates the score.
"""
import asyncio
import logging
import sys
from typing import List, Optional, TextIO

from .models import QuestionRecord, RunResult, AnswerOutcome
from .quiz_engine import AnswerListener, QuizEngine

TIMEOUT_NOTICE = "Time's up!"


class QuizRunner:
    """
    Runs a question set against a single player on a terminal.

    Each question is written and flushed to the output stream, then a fresh
    AnswerListener waits for one line of input. The run stops at the first
    question that is not answered in time; the score still counts every
    question in the set.
    """

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        quiz_engine: Optional[QuizEngine] = None
    ):
        """
        Initialize the quiz runner.

        Args:
            input_stream: Where answers are read from (defaults to stdin)
            output_stream: Where questions and notices go (defaults to stdout)
            quiz_engine: Engine used for answer checking
        """
        self.logger = logging.getLogger(__name__)
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output_stream = output_stream if output_stream is not None else sys.stdout
        self.quiz_engine = quiz_engine if quiz_engine is not None else QuizEngine()

    def _emit(self, text: str) -> None:
        self.output_stream.write(text + "\n")
        self.output_stream.flush()

    async def ask(self, record: QuestionRecord, time_limit: float, question_number: int = 1) -> AnswerOutcome:
        """
        Present one question and wait for its answer.

        Args:
            record: Question to present
            time_limit: Seconds allowed for the answer
            question_number: 1-based position, for logging

        Returns:
            The outcome of the question

        Raises:
            AnswerInputError: If reading the answer fails
        """
        self._emit(record.question)

        loop = asyncio.get_running_loop()
        listener = AnswerListener(self.input_stream, loop, question_number)
        listener.start()

        response = await listener.wait_for_answer(time_limit)
        if response is None:
            self._emit(f"\n    {TIMEOUT_NOTICE}")
            outcome = AnswerOutcome.TIMED_OUT
        else:
            outcome = self.quiz_engine.check_answer(response, record.answer)

        self.logger.info(
            f"Question {question_number}: {outcome.value}",
            extra={
                'event_type': 'question_outcome',
                'question_number': question_number,
                'outcome': outcome.value
            }
        )
        return outcome

    async def run(self, questions: List[QuestionRecord], time_limit: float) -> RunResult:
        """
        Run the quiz until the questions run out or one times out.

        Args:
            questions: Records to present, in presentation order
            time_limit: Seconds allowed per question

        Returns:
            RunResult with correct answers and the full question count

        Raises:
            ValueError: If time_limit is not positive
            AnswerInputError: If reading an answer fails
        """
        if time_limit <= 0:
            raise ValueError(f"Time limit must be positive, got {time_limit}")

        result = RunResult(correct_count=0, total_count=len(questions))
        self.logger.info(f"Starting quiz with {len(questions)} questions, {time_limit}s per question")

        for number, record in enumerate(questions, start=1):
            outcome = await self.ask(record, time_limit, number)

            if outcome is AnswerOutcome.TIMED_OUT:
                self.logger.info(f"Quiz stopped at question {number} after timeout")
                break
            if outcome is AnswerOutcome.CORRECT:
                result.correct_count += 1

        self.logger.info(
            f"Quiz finished: {result.summary_line()}",
            extra={
                'event_type': 'run_finished',
                'correct_count': result.correct_count,
                'total_count': result.total_count
            }
        )
        return result


def run_quiz(
    questions: List[QuestionRecord],
    time_limit: float,
    input_stream: Optional[TextIO] = None,
    output_stream: Optional[TextIO] = None,
    quiz_engine: Optional[QuizEngine] = None
) -> RunResult:
    """Run a quiz to completion on a new event loop."""
    runner = QuizRunner(input_stream, output_stream, quiz_engine)
    return asyncio.run(runner.run(questions, time_limit))
