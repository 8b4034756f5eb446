"""Utility modules for the Accessibility Engine."""

from .constants import *
from .logger import get_logger, setup_logging, log_exception, LogCapture
