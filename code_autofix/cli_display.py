import logging
import os
from datetime import datetime


class TokenTracker:
    """Global tracker for token usage across all LLM calls."""

    def __init__(self):
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.call_count = 0

    def record(self, prompt_tokens: int, completion_tokens: int):
        self.total_prompt_tokens += prompt_tokens
        self.total_completion_tokens += completion_tokens
        self.call_count += 1

    @property
    def total_tokens(self):
        return self.total_prompt_tokens + self.total_completion_tokens


# Global singleton
token_tracker = TokenTracker()


def setup_logger(log_dir: str | None = None) -> logging.Logger:
    """Return the package logger.

    When *log_dir* is given, a DEBUG file handler writing
    ``autofix_<timestamp>.log`` is attached (once per directory).
    """
    logger = logging.getLogger("code_autofix")
    logger.setLevel(logging.DEBUG)
    if not log_dir:
        return logger

    target = os.path.abspath(log_dir)
    for handler in logger.handlers:
        if getattr(handler, "_autofix_log_dir", None) == target:
            return logger

    os.makedirs(target, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(target, f"autofix_{timestamp}.log")

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s"
    ))
    fh._autofix_log_dir = target
    logger.addHandler(fh)

    return logger


# Global logger instance; the CLI attaches the file handler
log = setup_logger()
