"""
End-to-end tests for the timed quiz command line.
Covers loading, ordering, the timed run and exit statuses together.
"""
import io
import json
import logging
import os
import random
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from timed_quiz import cli
from timed_quiz.config_manager import ConfigManager
from timed_quiz.errors import QuizParseError, QuizFileNotFoundError, ConfigError
from tests.test_fixtures import TestFixtures, BlockingInputStream


class CliTestCase(unittest.TestCase):
    """Shared setup: temp directory, clean environment, no log files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.missing_config = str(Path(self.temp_dir) / "no-config.json")

        env = {k: v for k, v in os.environ.items() if k != ConfigManager.TIME_LIMIT_ENV_VAR}
        self.env_patcher = patch.dict(os.environ, env, clear=True)
        self.env_patcher.start()

        self.logging_patcher = patch.object(cli, 'setup_logging_from_config')
        self.mock_setup_logging = self.logging_patcher.start()

    def tearDown(self):
        self.logging_patcher.stop()
        self.env_patcher.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _args(self, *extra):
        return cli.parse_args(["--config", self.missing_config, *extra])


class TestEndToEnd(CliTestCase):
    """Complete quiz runs through cli.run."""

    def test_two_correct_answers_in_file_order(self):
        """Test the canonical two-question scenario scores 2 / 2."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "2+2=?,4\nCapital of France?,Paris\n")
        output = io.StringIO()

        status = cli.run(
            self._args("--quiz-file", str(path), "--no-shuffle"),
            input_stream=io.StringIO("4\nParis\n"),
            output_stream=output
        )

        self.assertEqual(status, 0)
        self.assertEqual(
            output.getvalue().splitlines(),
            ["2+2=?", "Capital of France?", "Score: 2 / 2"]
        )

    def test_shuffled_run_with_seeded_source(self):
        """Test a seeded shuffle is answered in its own order."""
        path = TestFixtures.write_quiz_file(self.temp_dir, TestFixtures.create_valid_quiz_text())
        answers = {"2+2=?": "4", "Capital of France?": "Paris", "Largest planet?": "Jupiter"}

        # Predict the order the seeded engine will produce
        from timed_quiz.quiz_engine import QuizEngine
        from timed_quiz.data_manager import DataManager
        records = DataManager().load_quiz_file(path)
        order = QuizEngine(random.Random(3)).shuffle_questions(records)
        typed = "".join(answers[r.question] + "\n" for r in order)

        output = io.StringIO()
        status = cli.run(
            self._args("--quiz-file", str(path)),
            input_stream=io.StringIO(typed),
            output_stream=output,
            rng=random.Random(3)
        )

        self.assertEqual(status, 0)
        lines = output.getvalue().splitlines()
        self.assertEqual(lines[:-1], [r.question for r in order])
        self.assertEqual(lines[-1], "Score: 3 / 3")

    def test_timeout_prints_partial_score(self):
        """Test a silent user ends the quiz with a valid score line."""
        path = TestFixtures.write_quiz_file(self.temp_dir, TestFixtures.create_valid_quiz_text())
        output = io.StringIO()
        stream = BlockingInputStream()

        try:
            status = cli.run(
                self._args("--quiz-file", str(path), "--no-shuffle", "--time-limit", "1"),
                input_stream=stream,
                output_stream=output
            )
        finally:
            stream.release()

        self.assertEqual(status, 0)
        lines = [line.strip() for line in output.getvalue().splitlines() if line.strip()]
        self.assertEqual(lines, ["2+2=?", "Time's up!", "Score: 0 / 3"])

    def test_malformed_file_aborts_before_any_question(self):
        """Test a record without a delimiter stops the program up front."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "2+2=?,4\njustaquestion\n")
        output = io.StringIO()

        with self.assertRaises(QuizParseError):
            cli.run(
                self._args("--quiz-file", str(path)),
                input_stream=io.StringIO("4\n"),
                output_stream=output
            )

        self.assertEqual(output.getvalue(), "")

    def test_missing_file_aborts(self):
        """Test a missing quiz file is reported."""
        with self.assertRaises(QuizFileNotFoundError):
            cli.run(
                self._args("--quiz-file", str(Path(self.temp_dir) / "absent.tsv")),
                input_stream=io.StringIO(""),
                output_stream=io.StringIO()
            )

    def test_config_file_and_flags_are_layered(self):
        """Test flags override the config file."""
        config_path = Path(self.temp_dir) / "config.json"
        config_path.write_text(json.dumps({
            "quiz": {"file": "from-config.tsv", "time_limit_seconds": 9, "shuffle": False}
        }), encoding='utf-8')

        args = cli.parse_args(["--config", str(config_path), "--time-limit", "2"])
        config = cli.build_config(args)

        settings = config.get_quiz_settings()
        self.assertEqual(settings.quiz_file, "from-config.tsv")
        self.assertEqual(settings.time_limit_seconds, 2)
        self.assertFalse(settings.shuffle)

    def test_environment_overrides_config_file(self):
        """Test the environment sits between the file and the flags."""
        with patch.dict(os.environ, {ConfigManager.TIME_LIMIT_ENV_VAR: "6"}):
            config = cli.build_config(self._args())
            self.assertEqual(config.get_time_limit(), 6)

            config = cli.build_config(self._args("--time-limit", "3"))
            self.assertEqual(config.get_time_limit(), 3)

    def test_invalid_time_limit_flag(self):
        """Test an out-of-range flag is a configuration error."""
        with self.assertRaises(ConfigError):
            cli.build_config(self._args("--time-limit", "0"))

    def test_build_config_rejects_failed_validation(self):
        """Test settings that fail validation stop the program."""
        failed = {'valid': False, 'issues': ["Invalid delimiter: ',,'", "Invalid time limit: 0"]}

        with patch.object(ConfigManager, 'validate_settings', return_value=failed) as mock_validate:
            with self.assertRaises(ConfigError) as context:
                cli.build_config(self._args())

        mock_validate.assert_called_once()
        self.assertIn("Invalid delimiter: ',,'; Invalid time limit: 0", str(context.exception))

    def test_loading_summary_is_logged(self):
        """Test the loaded file and question count are logged."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "2+2=?,4\nCapital of France?,Paris\n")

        with self.assertLogs('timed_quiz.cli', level='INFO') as logs:
            cli.run(
                self._args("--quiz-file", str(path), "--no-shuffle"),
                input_stream=io.StringIO("4\nParis\n"),
                output_stream=io.StringIO()
            )

        self.assertTrue(any(
            f"Quiz loaded: 2 questions from {path}" in line for line in logs.output
        ))


class TestMainExitStatus(CliTestCase):
    """Exit statuses and diagnostics from cli.main."""

    def test_success_exit_status(self):
        """Test a completed quiz exits 0 and prints the score."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "2+2=?,4\n")

        with patch('sys.stdin', io.StringIO("4\n")), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            status = cli.main(["--config", self.missing_config, "--quiz-file", str(path)])

        self.assertEqual(status, 0)
        self.assertTrue(stdout.getvalue().endswith("Score: 1 / 1\n"))

    def test_malformed_file_exit_status(self):
        """Test a parse failure exits 1 with a diagnostic and no question."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "justaquestion\n")

        with patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO) as stderr:
            status = cli.main(["--config", self.missing_config, "--quiz-file", str(path)])

        self.assertEqual(status, 1)
        self.assertEqual(stdout.getvalue(), "")
        self.assertIn("line 1", stderr.getvalue())

    def test_missing_file_exit_status(self):
        """Test a missing quiz file exits 1."""
        with patch('sys.stdout', new_callable=io.StringIO), \
                patch('sys.stderr', new_callable=io.StringIO) as stderr:
            status = cli.main([
                "--config", self.missing_config,
                "--quiz-file", str(Path(self.temp_dir) / "absent.tsv")
            ])

        self.assertEqual(status, 1)
        self.assertIn("not found", stderr.getvalue())

    def test_input_error_exit_status(self):
        """Test running out of input exits 1 without a score line."""
        path = TestFixtures.write_quiz_file(self.temp_dir, "2+2=?,4\nCapital of France?,Paris\n")

        with patch('sys.stdin', io.StringIO("4\n")), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO):
            status = cli.main([
                "--config", self.missing_config, "--quiz-file", str(path), "--no-shuffle"
            ])

        self.assertEqual(status, 1)
        self.assertNotIn("Score:", stdout.getvalue())

    def test_keyboard_interrupt_exit_status(self):
        """Test Ctrl-C exits 130."""
        with patch.object(cli, 'run', side_effect=KeyboardInterrupt), \
                patch('sys.stderr', new_callable=io.StringIO):
            status = cli.main(["--config", self.missing_config])

        self.assertEqual(status, 130)


class TestLoggingSetup(unittest.TestCase):
    """Test cases for logging configuration."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level
        self.root.handlers = []

    def tearDown(self):
        for handler in self.root.handlers:
            handler.close()
        self.root.handlers = self.saved_handlers
        self.root.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_log_file_created(self):
        """Test the log directory and file are set up."""
        log_dir = Path(self.temp_dir) / "logs"
        cli.setup_logging_from_config({'level': 'debug', 'log_directory': str(log_dir)})

        logging.getLogger("timed_quiz.test").info("hello")
        for handler in self.root.handlers:
            handler.flush()

        self.assertEqual(self.root.level, logging.DEBUG)
        self.assertIn("hello", (log_dir / "quiz.log").read_text(encoding='utf-8'))

    def test_console_handler_only_critical(self):
        """Test the terminal handler is limited to critical records."""
        cli.setup_logging_from_config({'level': 'INFO', 'log_directory': self.temp_dir})

        stream_handlers = [
            h for h in self.root.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.CRITICAL)

    def test_fatal_error_reported_once_on_stderr(self):
        """Test a load failure shows one diagnostic on stderr and goes to the log file."""
        log_dir = Path(self.temp_dir) / "logs"
        config_path = Path(self.temp_dir) / "config.json"
        config_path.write_text(json.dumps({
            "logging": {"level": "INFO", "log_directory": str(log_dir)}
        }), encoding='utf-8')
        quiz_path = TestFixtures.write_quiz_file(self.temp_dir, "justaquestion\n", name="bad.tsv")

        env = {k: v for k, v in os.environ.items() if k != ConfigManager.TIME_LIMIT_ENV_VAR}
        with patch.dict(os.environ, env, clear=True), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO) as stderr:
            status = cli.main(["--config", str(config_path), "--quiz-file", str(quiz_path)])

        for handler in self.root.handlers:
            handler.flush()

        self.assertEqual(status, 1)
        self.assertEqual(stdout.getvalue(), "")
        self.assertEqual(stderr.getvalue().count("line 1"), 1)
        self.assertNotIn(" - ERROR - ", stderr.getvalue())
        self.assertIn("missing ',' separator", (log_dir / "quiz.log").read_text(encoding='utf-8'))

    def test_unknown_level_rejected(self):
        """Test an unknown level name is a configuration error."""
        with self.assertRaises(ConfigError):
            cli.setup_logging_from_config({'level': 'CHATTY', 'log_directory': self.temp_dir})


if __name__ == '__main__':
    unittest.main()
