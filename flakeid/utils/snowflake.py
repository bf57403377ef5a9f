"""
Snowflake ID Generator Module

A Python implementation of Twitter's Snowflake algorithm for generating unique,
distributed, and time-ordered 64-bit identifiers. Each generator instance keeps
its own (last timestamp, sequence) pair and issues strictly increasing IDs.

Algorithm Overview:
    The default layout packs 64 bits as follows:

    |1 bit   |         41 bits          | 5 bits      | 5 bits | 12 bits  |
    |reserved|        timestamp         | data_center | worker | sequence |
    | 0      | milliseconds since epoch | 0-31        | 0-31   | 0-4095   |

    - Reserved: Always 0 (positive number)
    - Timestamp: 41 bits = ~69 years of milliseconds from the custom epoch
    - Data center / worker: 1024 distinct origins, assigned externally
    - Sequence: 4096 IDs per millisecond per origin

    Any layout declaring timestamp, data_center, worker and sequence fields can
    be used instead; the packing itself is done by the layout.

Issuance Rules (all under the instance lock):
    1. Read the clock in the layout's time unit.
    2. Earlier than the last issued timestamp: raise ClockRollbackError.
    3. Same time unit: advance the sequence; if it wraps to 0 the sequence
       space is exhausted and the generator spins until the clock moves on.
    4. Later time unit: restart the sequence at 0.
    5. Remember the timestamp and pack.

Thread Safety:
    - Uses threading.Lock() for atomic ID generation
    - The critical section covers clock read, comparison, update and packing
    - Instances are not coordinated with each other; run one per
      (data_center, worker) pair

Clock Considerations:
    - A clock that moves backward is a configuration fault; the generator
      refuses to issue rather than risk a duplicate or decreasing ID
    - Exhausting the sequence costs at most one time unit of latency
    - State is not persisted; uniqueness across restarts relies on the clock
      having moved forward
"""

import threading
from typing import Optional

from flakeid.core.exceptions import ClockRollbackError
from flakeid.services.logger import setup_logger
from flakeid.utils.epoch_clock import EpochClock
from flakeid.utils.layout import FieldLayout
from flakeid.utils.variants import SNOWFLAKE_LAYOUT, snowflake_clock

logger = setup_logger()


class SnowflakeIDGenerator:
    """A thread-safe, monotonic Snowflake ID generator.

    Attributes:
        data_center_id: The data center this generator issues for.
        worker_id: The worker this generator issues for.
        layout: The layout identifiers are packed with.
        clock: The epoch clock timestamps are read from.
    """

    def __init__(
        self,
        data_center_id: int,
        worker_id: int,
        clock: Optional[EpochClock] = None,
        layout: FieldLayout = SNOWFLAKE_LAYOUT,
    ):
        """Initializes a new Snowflake ID generator instance.

        Args:
            data_center_id: Data center identifier, must fit its field.
            worker_id: Worker identifier, must fit its field.
            clock: Epoch clock; defaults to the configured Snowflake epoch.
            layout: Layout with timestamp, data_center, worker and sequence
                fields.

        Raises:
            OutOfRangeError: If data_center_id or worker_id does not fit.
        """
        layout.validate(data_center=data_center_id, worker=worker_id)

        self.data_center_id = data_center_id
        self.worker_id = worker_id
        self.layout = layout
        self.clock = (clock or snowflake_clock).with_unit(layout.unit)
        self.sequence_mask = layout["sequence"].mask
        self.sequence = 0
        self.last_timestamp = -1
        self.lock = threading.Lock()

    def _wait_for_next_tick(self, last_timestamp: int) -> int:
        """Spins until the clock moves past the last issued time unit.

        Args:
            last_timestamp: The timestamp of the last generated ID.

        Returns:
            The next timestamp.
        """
        timestamp = self.clock.now()
        while timestamp <= last_timestamp:
            timestamp = self.clock.now()
        return timestamp

    def generate_id(self) -> int:
        """Generates a new unique Snowflake ID.

        Returns:
            A signed 64-bit ID, greater than every ID this instance issued
            before.

        Raises:
            ClockRollbackError: If the system clock moved backward.
        """
        with self.lock:
            timestamp = self.clock.now()

            if timestamp < self.last_timestamp:
                logger.error(
                    "Clock moved backward by %s %s on generator %s/%s",
                    self.last_timestamp - timestamp,
                    self.clock.unit,
                    self.data_center_id,
                    self.worker_id,
                )
                raise ClockRollbackError(self.last_timestamp, timestamp)

            if timestamp == self.last_timestamp:
                self.sequence = (self.sequence + 1) & self.sequence_mask
                if self.sequence == 0:
                    logger.debug(
                        "Sequence exhausted at %s, waiting for next tick", timestamp
                    )
                    timestamp = self._wait_for_next_tick(self.last_timestamp)
            else:
                self.sequence = 0

            self.last_timestamp = timestamp

            return self.layout.pack(
                timestamp=timestamp,
                data_center=self.data_center_id,
                worker=self.worker_id,
                sequence=self.sequence,
            )
