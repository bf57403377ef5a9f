import itertools
import secrets
from typing import Optional

SEED_BITS = 31


class FreeRunningCounter:
    """Process-wide counter feeding the sequence field of free-running IDs.

    The counter starts from a random seed and is advanced with a single
    fetch-and-increment per call. ``next()`` on an ``itertools.count`` runs
    without releasing the GIL, so concurrent callers never observe the same
    value. No other state is shared, so no lock is taken.

    Attributes:
        seed: The first value handed out.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = secrets.randbits(SEED_BITS) if seed is None else seed
        self._count = itertools.count(self.seed)

    def next(self) -> int:
        return next(self._count)

    def __repr__(self) -> str:
        return f"FreeRunningCounter(seed={self.seed})"


# Shared by every free-running generator in the process.
default_counter = FreeRunningCounter()
