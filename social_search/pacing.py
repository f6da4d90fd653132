"""Random delays between automated browser actions"""
import random
from typing import Optional


def random_delay_seconds(max_delay: int, rng: Optional[random.Random] = None) -> int:
    """Uniform random integer in [0, max_delay)."""
    if max_delay < 1:
        raise ValueError(f"max_delay must be at least 1, got {max_delay}")
    return (rng or random).randrange(max_delay)


class Pacer:
    """Carries the configured maximum delay so callers don't hard-code it."""

    def __init__(self, max_delay: int, rng: Optional[random.Random] = None):
        if max_delay < 1:
            raise ValueError(f"max_delay must be at least 1, got {max_delay}")
        self.max_delay = max_delay
        self._rng = rng

    def next_delay(self, max_delay: Optional[int] = None) -> int:
        return random_delay_seconds(self.max_delay if max_delay is None else max_delay, self._rng)
