"""
Unified logging for the pipeline.
==================================
Emoji-prefixed messages over stdlib logging. One stream handler is
attached at the root of each logger tree (`pipeline`, `generators`, ...)
so child loggers share it.
"""
import logging
from enum import Enum

PHASE_COUNT = 30


class LogLevel(Enum):
    """Emoji prefix per message kind."""
    PHASE = "🚀"
    STEP = "📋"
    SUCCESS = "✅"
    WARNING = "⚠️"
    ERROR = "❌"
    DEBUG = "🔍"
    INFO = "ℹ️"
    SAVE = "💾"
    CRITICAL = "🛑"


# QA issue severity -> (logging level, prefix)
SEVERITY_LEVELS = {
    "critical": (logging.ERROR, LogLevel.CRITICAL),
    "high": (logging.WARNING, LogLevel.WARNING),
    "medium": (logging.INFO, LogLevel.INFO),
    "low": (logging.DEBUG, LogLevel.DEBUG),
}


class PipelineLogger:
    """Logger for pipeline operations, shared by orchestrator, gate and adapters."""

    def __init__(self, name: str = "pipeline", verbose: bool = True):
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._attach_root_handler()
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    def _attach_root_handler(self):
        root = logging.getLogger(self.logger.name.split(".", 1)[0])
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            root.addHandler(handler)

    def child(self, suffix: str) -> "PipelineLogger":
        return PipelineLogger(f"{self.logger.name}.{suffix}", verbose=self.verbose)

    def _log(self, level: int, prefix: LogLevel, message: str):
        self.logger.log(level, f"{prefix.value} {message}")

    def phase(self, number: int, name: str):
        """Log the start of a numbered phase."""
        self._log(logging.INFO, LogLevel.PHASE, f"[PHASE {number}/{PHASE_COUNT}] {name}")

    def step(self, message: str):
        self._log(logging.INFO, LogLevel.STEP, message)

    def success(self, message: str):
        self._log(logging.INFO, LogLevel.SUCCESS, message)

    def warning(self, message: str):
        self._log(logging.WARNING, LogLevel.WARNING, message)

    def error(self, message: str):
        self._log(logging.ERROR, LogLevel.ERROR, message)

    def debug(self, message: str):
        if self.verbose:
            self._log(logging.DEBUG, LogLevel.DEBUG, message)

    def info(self, message: str):
        self._log(logging.INFO, LogLevel.INFO, message)

    def save(self, path: str):
        self._log(logging.INFO, LogLevel.SAVE, f"Saved: {path}")

    def issue(self, severity: str, category: str, description: str):
        """Log a QA issue at the level its severity maps to."""
        level, prefix = SEVERITY_LEVELS.get(severity, (logging.INFO, LogLevel.INFO))
        if level == logging.DEBUG and not self.verbose:
            return
        self._log(level, prefix, f"[{severity.upper()}] {category}: {description}")
