"""
Logging Configuration

Centralized logging using loguru with structured output.
"""

import sys
from loguru import logger

from config import get_settings
from core.log_buffer import LogBuffer, install_log_buffer

settings = get_settings().logging

# Remove default handler
logger.remove()

# Add console handler with custom format
logger.add(
    sys.stderr,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
    level=settings.level,
    colorize=True,
)

# Add file handler for persistent logs
if settings.file_path:
    logger.add(
        settings.file_path,
        rotation=settings.rotation,
        retention=settings.retention,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        level=settings.level,
        delay=True,
    )

# Recent entries for the log viewer
log_buffer = LogBuffer(maxsize=settings.buffer_size)
install_log_buffer(log_buffer, level=settings.level)


def get_logger(name: str):
    """Get a logger with a specific name for component identification."""
    return logger.bind(name=name)


# Pre-configured loggers for different components
insights_logger = get_logger("insights")
llm_logger = get_logger("llm")
ai_logger = get_logger("ai")
