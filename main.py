#!/usr/bin/env python3
"""
Timed Quiz - Main Entry Point

Reads question/answer pairs from quiz.tsv (one 'question,answer' per line),
shuffles them and asks each one with a time limit.

Usage:
    python main.py [--quiz-file PATH] [--time-limit SECONDS] [--no-shuffle] [--config PATH]

Configuration:
    1. Optional config.json in the working directory (see config.example.json)
    2. TIMED_QUIZ_TIME_LIMIT environment variable
    3. Command line flags, which take precedence

Environment Variables:
    TIMED_QUIZ_TIME_LIMIT: Seconds allowed per question (overrides config.json)
"""
import sys

from timed_quiz.cli import main

if __name__ == "__main__":
    sys.exit(main())
