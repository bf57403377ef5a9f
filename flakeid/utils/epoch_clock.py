"""
Epoch Clock Module

Converts between wall-clock instants and the timestamp field of an identifier.
A timestamp field counts elapsed time units (seconds or milliseconds) since a
custom epoch rather than the Unix epoch, which keeps the field narrow enough
to leave room for region, machine and sequence bits.

One clock is built per (epoch, unit) pair and shared by reference across every
generator that packs timestamps against that epoch.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Callable

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

UNITS_PER_SECOND = {"s": 1, "ms": 1000}


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class EpochClock:
    """Clock counting whole time units since a custom epoch.

    Attributes:
        epoch: The reference instant (UTC aware).
        unit: "s" for seconds or "ms" for milliseconds.
    """

    def __init__(
        self,
        epoch: datetime,
        unit: str = "ms",
        time_source: Callable[[], float] = time.time,
    ):
        """Initializes a new epoch clock.

        Args:
            epoch: The reference instant. Naive datetimes are taken as UTC.
            unit: The time unit of the timestamp field, "s" or "ms".
            time_source: Callable returning seconds since the Unix epoch.

        Raises:
            ValueError: If the unit is not supported.
        """
        if unit not in UNITS_PER_SECOND:
            raise ValueError(f"Unit must be one of {sorted(UNITS_PER_SECOND)}")

        self.epoch = _as_utc(epoch)
        self.unit = unit
        self.time_source = time_source
        self._per_second = UNITS_PER_SECOND[unit]
        # Epoch offset from the Unix epoch, in the clock's unit.
        self._offset = self._units_since_unix(self.epoch)

    @classmethod
    def from_unix_millis(
        cls, epoch_ms: int, unit: str = "ms", time_source: Callable[[], float] = time.time
    ) -> "EpochClock":
        epoch = UNIX_EPOCH + timedelta(milliseconds=epoch_ms)
        return cls(epoch, unit=unit, time_source=time_source)

    def _units_since_unix(self, dt: datetime) -> int:
        delta = _as_utc(dt) - UNIX_EPOCH
        # Integer arithmetic on microseconds avoids float rounding at ms edges.
        micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
        return (micros * self._per_second) // 1_000_000

    def with_unit(self, unit: str) -> "EpochClock":
        """Returns a clock on the same epoch and time source with another unit."""
        if unit == self.unit:
            return self
        return EpochClock(self.epoch, unit=unit, time_source=self.time_source)

    def now(self) -> int:
        """Returns the current time as elapsed units since the epoch."""
        return int(self.time_source() * self._per_second) - self._offset

    def from_datetime(self, dt: datetime) -> int:
        return self._units_since_unix(dt) - self._offset

    def to_datetime(self, value: int) -> datetime:
        micros = (value + self._offset) * (1_000_000 // self._per_second)
        return UNIX_EPOCH + timedelta(microseconds=micros)

    def __repr__(self) -> str:
        return f"EpochClock(epoch={self.epoch.isoformat()!r}, unit={self.unit!r})"
