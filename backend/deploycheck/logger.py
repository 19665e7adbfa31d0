"""
Logging configuration.
"""
import logging
import sys

from deploycheck.config import settings

# Create logger
logger = logging.getLogger("deploycheck")
logger.setLevel(settings.LOG_LEVEL)

# Console handler (stderr keeps the report on stdout clean)
console_handler = logging.StreamHandler(sys.stderr)
console_handler.setLevel(settings.LOG_LEVEL)

# Formatter
formatter = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
console_handler.setFormatter(formatter)

# Add handler
if not logger.handlers:
    logger.addHandler(console_handler)
