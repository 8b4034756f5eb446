"""Haptic feedback adapter for hosts without a vibration motor."""

from typing import Sequence

from ..utils.logger import get_logger

logger = get_logger(__name__)


class LoggingHapticFeedback:
    """Records pulses in the log instead of vibrating."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def pulse(self, pattern: Sequence[int]) -> None:
        if self.enabled:
            logger.debug(f"Haptic pulse: {list(pattern)} ms")
