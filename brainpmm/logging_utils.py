"""Logging utilities for brainpmm simulations.

Console output is split by what the runner is reporting: per-tick pressure
summaries, distillation loss, capacity expansions, runner lifecycle notes and
listener failures. Each category has its own colour and a text tag, so a live
run stays readable with or without colour.

``Config.LOG_LEVEL`` filters the helpers. At the default ``INFO`` everything
prints. ``WARNING`` or ``ERROR`` keeps only failures, for example when a host
wants a quiet terminal while ``BRAINPMM_VERBOSE`` stays on.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # [Tick N] pressure/slots/action/mood summary
    YELLOW = "\033[93m"    # [Distill] loss breakdown in training mode
    RED = "\033[91m"       # [Listener] failures
    GREEN = "\033[92m"     # [Expansion] capacity doubled
    CYAN = "\033[96m"      # [Runner] loop start, mode and period

    BOLD = "\033[1m"
    RESET = "\033[0m"


LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


def level_enabled(level: str) -> bool:
    """True if ``level`` passes ``Config.LOG_LEVEL`` (unknown names mean INFO)."""
    threshold = LEVELS.get(str(Config.LOG_LEVEL).strip().upper(), LEVELS["INFO"])
    return LEVELS[level] >= threshold


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes unless BRAINPMM_NO_COLOR is set."""
    if os.getenv("BRAINPMM_NO_COLOR"):
        return text

    prefix = Color.BOLD.value + color.value if bold else color.value
    return f"{prefix}{text}{Color.RESET.value}"


def _emit(level: str, tag: str, color: Color, message: str, bold: bool = False) -> None:
    if level_enabled(level):
        print(colored(f"{tag} {message}", color, bold=bold))


def log_deterministic(message: str) -> None:
    """Per-tick summary line (blue, INFO)."""
    _emit("INFO", LOG_TAG_DETERMINISTIC, Color.BLUE, message)


def log_training(message: str) -> None:
    """Distillation loss line (yellow, INFO)."""
    _emit("INFO", LOG_TAG_TRAINING, Color.YELLOW, message)


def log_error(message: str) -> None:
    """Failure that the run survives (bold red, ERROR)."""
    _emit("ERROR", LOG_TAG_ERROR, Color.RED, message, bold=True)


def log_success(message: str) -> None:
    _emit("INFO", LOG_TAG_SUCCESS, Color.GREEN, message)


def log_info(message: str) -> None:
    _emit("INFO", LOG_TAG_INFO, Color.CYAN, message)


# Markers for message categories (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_TRAINING = "[T]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"
