"""
Aura Engine Structured Logging
Loguru wrapper that attaches structured extras to engine messages.

The engine never adds or removes loguru sinks on its own: messages go to
whatever sinks the host application configured. The package is disabled in
loguru on import; call ``logger.enable("aura_engine")`` or configure_logging()
to see its output.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from aura_engine.config import config


def configure_logging(level: Optional[str] = None) -> int:
    """
    Opt-in stderr sink for engine messages (scripts and debugging).

    Args:
        level: Minimum level (default from AURA_LOG_LEVEL)

    Returns:
        Loguru sink id, for ``logger.remove(sink_id)``
    """
    logger.enable("aura_engine")
    return logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
        level=level or config.LOG_LEVEL,
        filter="aura_engine",
    )


class StructuredLogger:
    """Structured logger for the aura detection pipeline."""

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        logger.bind(**(extra or {})).info(message)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        logger.bind(**(extra or {})).warning(message)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        logger.bind(**(extra or {})).error(message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        logger.bind(**(extra or {})).debug(message)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
