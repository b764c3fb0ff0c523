"""
Command line entry point for the timed quiz.
"""
import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Any

from .config_manager import ConfigManager
from .data_manager import DataManager
from .errors import TimedQuizError, ConfigError
from .quiz_engine import QuizEngine
from .quiz_runner import run_quiz

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="timed-quiz",
        description="Answer each question before the timer runs out."
    )
    parser.add_argument(
        "--quiz-file",
        help=f"question file, one 'question,answer' per line (default: {ConfigManager.DEFAULT_QUIZ_FILE})"
    )
    parser.add_argument(
        "--time-limit",
        type=int,
        metavar="SECONDS",
        help=f"seconds allowed per question (default: {ConfigManager.DEFAULT_TIME_LIMIT})"
    )
    parser.add_argument(
        "--no-shuffle",
        action="store_true",
        help="present questions in file order"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"optional JSON config file (default: {DEFAULT_CONFIG_PATH})"
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ConfigManager:
    """
    Layer configuration sources: defaults, config file, environment, flags.

    Raises:
        ConfigError: If any source holds an invalid value
    """
    config = ConfigManager()
    config.load_config_file(args.config)
    config.load_environment()
    config.apply_overrides(
        quiz_file=args.quiz_file,
        time_limit=args.time_limit,
        shuffle=False if args.no_shuffle else None
    )

    validation = config.validate_settings()
    if not validation['valid']:
        raise ConfigError("Invalid configuration: " + "; ".join(validation['issues']))
    return config


def setup_logging_from_config(log_config: Dict[str, Any]) -> None:
    """Set up logging based on configuration."""
    level_name = str(log_config.get('level', ConfigManager.DEFAULT_LOG_LEVEL)).upper()
    log_level = getattr(logging, level_name, None)
    if not isinstance(log_level, int):
        raise ConfigError(f"Unknown logging level: {level_name}")

    log_directory = Path(log_config.get('log_directory', ConfigManager.DEFAULT_LOG_DIRECTORY))
    try:
        log_directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Cannot create log directory {log_directory}: {e}") from e

    # main() prints fatal errors itself; the terminal only gets critical log records
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.CRITICAL)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            console_handler,
            logging.FileHandler(log_directory / "quiz.log", encoding='utf-8')
        ]
    )


def run(
    args: argparse.Namespace,
    input_stream: Optional[TextIO] = None,
    output_stream: Optional[TextIO] = None,
    rng: Optional[random.Random] = None
) -> int:
    """
    Load, order and run the quiz, then print the score.

    Returns:
        Process exit status

    Raises:
        TimedQuizError: On configuration, load or input failures
    """
    output_stream = output_stream if output_stream is not None else sys.stdout

    config = build_config(args)
    setup_logging_from_config(config.get_logging_settings())
    logger.info(config.get_settings_summary())

    settings = config.get_quiz_settings()
    data_manager = DataManager(settings.delimiter)
    questions = data_manager.load_quiz_file(settings.quiz_file)
    summary = data_manager.get_loading_summary()
    logger.info(
        f"Quiz loaded: {summary['record_count']} questions from {summary['source']}",
        extra={'event_type': 'quiz_loaded', **summary}
    )

    quiz_engine = QuizEngine(rng)
    ordered = quiz_engine.select_questions(questions, settings)

    result = run_quiz(
        ordered,
        settings.time_limit_seconds,
        input_stream=input_stream,
        output_stream=output_stream,
        quiz_engine=quiz_engine
    )

    output_stream.write(result.summary_line() + "\n")
    output_stream.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return run(args)
    except KeyboardInterrupt:
        print("\n👋 Quiz stopped by user", file=sys.stderr)
        return 130
    except TimedQuizError as e:
        logger.info(f"Quiz aborted: {e}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
