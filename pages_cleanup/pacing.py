"""Fixed-delay pacing between API calls."""

import time
import typing as t

# Seconds
PAGE_DELAY    = 0.5   # between deployment listing pages
DELETE_DELAY  = 0.5   # between individual deployment deletes
SWEEP_DELAY   = 1.0   # between outer delete sweeps
BACKOFF_START = 1.0   # first retry wait; doubles on every further failure


class Pacer:
    """Wraps the sleep call so tests can record delays instead of waiting."""

    def __init__(self, sleep: t.Callable[[float], None] = time.sleep):
        self._sleep = sleep

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)
