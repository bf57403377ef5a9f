"""
Free-Running ID Generator Module

Builds identifiers from caller overrides, the current time and the shared
free-running counter. There is no per-generator state and no lock: the
timestamp field is whatever the clock (or the caller) says, and the sequence
field is the next counter value masked to the field width.

Uniqueness is statistical. Two calls that share a timestamp, a region/machine
pair and a masked counter value produce the same identifier; this can happen
once the counter wraps within one time unit. Callers that need strict
ordering use the monotonic SnowflakeIDGenerator instead.
"""

from datetime import datetime
from typing import Optional, Union

from flakeid.utils.counter import FreeRunningCounter, default_counter
from flakeid.utils.epoch_clock import EpochClock
from flakeid.utils.layout import FieldLayout, PrecisionLayout

TIMESTAMP_FIELD = "timestamp"
SEQUENCE_FIELD = "sequence"


class FreeRunningGenerator:
    """Generator for layouts that do not require strict issuance order.

    Attributes:
        layout: The layout identifiers are packed with.
        clock: Clock on the layout's epoch, converted to the layout's unit
            per call.
        counter: Counter supplying default sequence values.
        defaults: Field values used when a call does not override them.
    """

    def __init__(
        self,
        layout: Union[FieldLayout, PrecisionLayout],
        clock: EpochClock,
        counter: Optional[FreeRunningCounter] = None,
        defaults: Optional[dict[str, int]] = None,
    ):
        """Initializes a new free-running generator.

        Args:
            layout: The layout identifiers are packed with.
            clock: Clock on the layout's epoch.
            counter: Counter for default sequence values; the process-wide
                counter when omitted.
            defaults: {field: value} pairs used when a call does not
                override them, e.g. the configured region and machine.

        Raises:
            OutOfRangeError: If a default does not fit in its field.
        """
        self.defaults = dict(defaults or {})
        layout.validate(**self.defaults)

        self.layout = layout
        self.clock = clock
        self.counter = counter or default_counter

    def generate_id(self, **overrides) -> int:
        """Generates a new identifier.

        Args:
            **overrides: Field values to use instead of the defaults. The
                timestamp may be given as units since the epoch or as a
                datetime. Fields left out default to 0, except timestamp
                (now) and sequence (next counter value).

        Returns:
            The identifier as a signed 64-bit integer.

        Raises:
            OutOfRangeError: If an override does not fit in its field.
        """
        values = dict(self.defaults)
        values.update(
            (name, value) for name, value in overrides.items() if value is not None
        )
        layout = self.layout.resolve(values)
        clock = self.clock.with_unit(layout.unit)

        timestamp = values.get(TIMESTAMP_FIELD)
        if timestamp is None:
            values[TIMESTAMP_FIELD] = clock.now()
        elif isinstance(timestamp, datetime):
            values[TIMESTAMP_FIELD] = clock.from_datetime(timestamp)

        if SEQUENCE_FIELD not in values:
            values[SEQUENCE_FIELD] = self.counter.next() & layout[SEQUENCE_FIELD].mask

        return layout.pack(**values)
