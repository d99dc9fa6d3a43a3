"""
Structured logging configuration for the Nine-Card Golf engine.

Provides:
- JSONFormatter for production (machine-readable logs)
- Human-readable formatter for development
- Contextual logging (game_id, hand, player_id)
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

# Context variable for the session currently dispatching
game_id_var: ContextVar[Optional[str]] = ContextVar("game_id", default=None)

# Record attributes copied into structured output when present
CONTEXT_FIELDS = ("game_id", "hand", "player_id", "intent", "phase")


class JSONFormatter(logging.Formatter):
    """
    Format logs as JSON for production log aggregation.

    One JSON object per line, with match context attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        game_id = game_id_var.get()
        if game_id:
            log_data["game_id"] = game_id

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        # Add source location for errors
        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Includes colors and match context for easy debugging.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with colors and context.

        Args:
            record: Log record to format.

        Returns:
            Formatted log string.
        """
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        context_parts = []
        game_id = game_id_var.get() or getattr(record, "game_id", None)
        if game_id:
            context_parts.append(f"game={game_id[:8]}")

        hand = getattr(record, "hand", None)
        if hand is not None:
            context_parts.append(f"hand={hand}")

        player_id = getattr(record, "player_id", None)
        if player_id is not None:
            context_parts.append(f"seat={player_id}")

        context = f" [{', '.join(context_parts)}]" if context_parts else ""

        output = f"{timestamp} {color}{record.levelname:8}{reset} {record.name}{context} - {record.getMessage()}"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        environment: Environment name (production uses JSON, else human-readable).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)

    if environment == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={level}, environment={environment}",
        extra={"level": level, "environment": environment},
    )


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that automatically includes match context.

    Usage:
        logger = ContextLogger(logging.getLogger(__name__))
        logger.with_context(game_id="abc", hand=2).info("Hand dealt")
    """

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def with_context(self, **kwargs) -> "ContextLogger":
        """
        Create a new logger with additional context.

        Args:
            **kwargs: Context key-value pairs to add.

        Returns:
            New ContextLogger with combined context.
        """
        new_extra = {**self.extra, **kwargs}
        return ContextLogger(self.logger, new_extra)

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__).

    Returns:
        ContextLogger instance.
    """
    return ContextLogger(logging.getLogger(name))
