"""
Configuration manager for timed quiz settings and parameters.
"""
import json
import logging
import os
from typing import Optional, Dict, Any
from pathlib import Path

from .models import QuizSettings
from .errors import ConfigError


class ConfigManager:
    """Manages quiz configuration from defaults, config file, environment and CLI."""

    # Default configuration values
    DEFAULT_QUIZ_FILE = "quiz.tsv"
    DEFAULT_TIME_LIMIT = 4
    DEFAULT_SHUFFLE = True
    DEFAULT_DELIMITER = ","
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_LOG_DIRECTORY = "./logs/"

    # Validation limits
    MIN_TIME_LIMIT = 1
    MAX_TIME_LIMIT = 300  # 5 minutes

    TIME_LIMIT_ENV_VAR = "TIMED_QUIZ_TIME_LIMIT"

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = QuizSettings(
            quiz_file=self.DEFAULT_QUIZ_FILE,
            time_limit_seconds=self.DEFAULT_TIME_LIMIT,
            shuffle=self.DEFAULT_SHUFFLE,
            delimiter=self.DEFAULT_DELIMITER
        )
        self._logging_config: Dict[str, Any] = {}

    def load_config_file(self, config_path) -> bool:
        """
        Load settings from a JSON config file if it exists.

        Expected structure (every key optional):
        {
            "quiz": {"file": str, "time_limit_seconds": int, "shuffle": bool},
            "logging": {"level": str, "log_directory": str}
        }

        Args:
            config_path: Path to the JSON config file

        Returns:
            True if a file was loaded, False if it does not exist

        Raises:
            ConfigError: If the file is unreadable, not JSON, or holds invalid values
        """
        path = Path(config_path)
        if not path.exists():
            self.logger.debug(f"No config file at {path}, using defaults")
            return False

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

        quiz_config = config.get('quiz', {})
        if not isinstance(quiz_config, dict):
            raise ConfigError(f"'quiz' section in {path} must be an object")

        self.apply_overrides(
            quiz_file=quiz_config.get('file'),
            time_limit=quiz_config.get('time_limit_seconds'),
            shuffle=quiz_config.get('shuffle')
        )

        logging_config = config.get('logging', {})
        if not isinstance(logging_config, dict):
            raise ConfigError(f"'logging' section in {path} must be an object")
        self._logging_config = dict(logging_config)

        self.logger.info(f"Loaded configuration from {path}")
        return True

    def load_environment(self) -> None:
        """
        Apply overrides from environment variables.

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        raw_limit = os.getenv(self.TIME_LIMIT_ENV_VAR)
        if raw_limit is None or not raw_limit.strip():
            return

        try:
            limit = int(raw_limit)
        except ValueError:
            raise ConfigError(
                f"{self.TIME_LIMIT_ENV_VAR} must be an integer number of seconds, got {raw_limit!r}"
            )
        self.apply_overrides(time_limit=limit)

    def apply_overrides(
        self,
        quiz_file: Optional[str] = None,
        time_limit: Optional[int] = None,
        shuffle: Optional[bool] = None
    ) -> None:
        """
        Apply the given non-None values through the validating setters.

        Raises:
            ConfigError: On the first value a setter rejects
        """
        updates = [
            (self.set_quiz_file, quiz_file),
            (self.set_time_limit, time_limit),
            (self.set_shuffle, shuffle),
        ]
        for setter, value in updates:
            if value is None:
                continue
            result = setter(value)
            if not result['success']:
                raise ConfigError(result['error'])

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            QuizSettings object with current configuration
        """
        return QuizSettings(
            quiz_file=self._settings.quiz_file,
            time_limit_seconds=self._settings.time_limit_seconds,
            shuffle=self._settings.shuffle,
            delimiter=self._settings.delimiter
        )

    def set_time_limit(self, seconds: int) -> Dict[str, any]:
        """
        Set the time allowed per question.

        Args:
            seconds: Time limit in whole seconds

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        # bool is an int subclass; reject it explicitly
        if not isinstance(seconds, int) or isinstance(seconds, bool):
            error_msg = f"Time limit must be an integer, got {type(seconds).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: expected a number of seconds, got {type(seconds).__name__}"
            }

        if seconds < self.MIN_TIME_LIMIT:
            error_msg = f"Time limit must be at least {self.MIN_TIME_LIMIT} second"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Time limit too short: minimum is {self.MIN_TIME_LIMIT} second"
            }

        if seconds > self.MAX_TIME_LIMIT:
            error_msg = f"Time limit cannot exceed {self.MAX_TIME_LIMIT} seconds"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Time limit too long: maximum is {self.MAX_TIME_LIMIT} seconds"
            }

        self._settings.time_limit_seconds = seconds
        self.logger.info(f"Time limit set to {seconds} seconds")
        return {
            'success': True,
            'message': f"Time limit set to {seconds} seconds",
            'user_message': f"Time limit set to {seconds} seconds"
        }

    def get_time_limit(self) -> int:
        """Get current time limit in seconds."""
        return self._settings.time_limit_seconds

    def set_quiz_file(self, quiz_file: str) -> Dict[str, any]:
        """
        Set the path of the quiz file.

        Args:
            quiz_file: Path to the delimited quiz file

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(quiz_file, str):
            error_msg = f"Quiz file must be a string, got {type(quiz_file).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: expected a path string, got {type(quiz_file).__name__}"
            }

        if not quiz_file.strip():
            error_msg = "Quiz file path cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "Quiz file path cannot be empty"
            }

        self._settings.quiz_file = quiz_file
        self.logger.info(f"Quiz file set to {quiz_file}")
        return {
            'success': True,
            'message': f"Quiz file set to {quiz_file}",
            'user_message': f"Quiz file set to {quiz_file}"
        }

    def get_quiz_file(self) -> str:
        """Get current quiz file path."""
        return self._settings.quiz_file

    def set_shuffle(self, shuffle: bool) -> Dict[str, any]:
        """
        Set whether questions are shuffled before the run.

        Args:
            shuffle: True for random order, False for file order

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(shuffle, bool):
            error_msg = f"Shuffle must be a boolean, got {type(shuffle).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: expected true/false, got {type(shuffle).__name__}"
            }

        self._settings.shuffle = shuffle
        order_type = "random" if shuffle else "file"
        self.logger.info(f"Question order set to {order_type}")
        return {
            'success': True,
            'message': f"Question order set to {order_type}",
            'user_message': f"Questions will be presented in {order_type} order"
        }

    def get_shuffle(self) -> bool:
        """Get current shuffle setting."""
        return self._settings.shuffle

    def get_logging_settings(self) -> Dict[str, Any]:
        """
        Get logging configuration with defaults filled in.

        Returns:
            Dictionary with 'level' and 'log_directory'
        """
        return {
            'level': self._logging_config.get('level', self.DEFAULT_LOG_LEVEL),
            'log_directory': self._logging_config.get('log_directory', self.DEFAULT_LOG_DIRECTORY)
        }

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        limit = self._settings.time_limit_seconds
        if (not isinstance(limit, int) or isinstance(limit, bool) or
                limit < self.MIN_TIME_LIMIT or limit > self.MAX_TIME_LIMIT):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid time limit: {limit}")

        if not isinstance(self._settings.shuffle, bool):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid shuffle setting: {self._settings.shuffle}")

        if not isinstance(self._settings.quiz_file, str) or not self._settings.quiz_file.strip():
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid quiz file: {self._settings.quiz_file}")

        if not isinstance(self._settings.delimiter, str) or len(self._settings.delimiter) != 1:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid delimiter: {self._settings.delimiter!r}")

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        order_str = "random" if self._settings.shuffle else "file order"
        return (
            f"Quiz Settings:\n"
            f"• Quiz File: {self._settings.quiz_file}\n"
            f"• Order: {order_str}\n"
            f"• Time Limit: {self._settings.time_limit_seconds} seconds"
        )
