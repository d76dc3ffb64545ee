"""
Fixed-delay throttle between requests to the same remote service.
"""

import logging
import time

logger = logging.getLogger(__name__)


class Throttle:
    """
    Sleeps a fixed delay each time wait() is called.

    The sleep function is injectable so tests can record the delays
    instead of actually sleeping.
    """

    def __init__(self, delay, sleep=time.sleep):
        if delay < 0:
            raise ValueError(f"Throttle delay must be >= 0, got {delay}")
        self.delay = delay
        self._sleep = sleep
        self.waits = 0

    def wait(self):
        self.waits += 1
        if self.delay:
            logger.debug(f"Throttling for {self.delay}s")
            self._sleep(self.delay)
