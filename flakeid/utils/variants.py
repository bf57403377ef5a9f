"""
Identifier Variants

Named layouts and their epoch clocks. Every variant is one instance of the
generic codec in utils.layout, so adding a variant means declaring its fields
here rather than writing another packer.

    snowflake  |1 reserved|41 timestamp (ms)|5 data_center|5 worker|12 sequence|
    catkin     |1 reserved|41 timestamp (ms)|4 region|5 machine|13 sequence|
    peony      |1 reserved|40 timestamp (ms)|3 region|10 machine|10 sequence|
    jasmine    |1 reserved|2 region|10 machine|1 precision|30 timestamp (s) |20 sequence|
                                             |1 precision|40 timestamp (ms)|10 sequence|
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from flakeid.core.config import settings
from flakeid.core.exceptions import UnknownVariantError
from flakeid.utils.epoch_clock import EpochClock
from flakeid.utils.layout import FieldLayout, PrecisionLayout

CUSTOM_EPOCH = datetime(2017, 1, 1, tzinfo=timezone.utc)

SNOWFLAKE_LAYOUT = FieldLayout(
    "snowflake",
    [
        ("reserved", 1),
        ("timestamp", 41),
        ("data_center", 5),
        ("worker", 5),
        ("sequence", 12),
    ],
)

CATKIN_LAYOUT = FieldLayout(
    "catkin",
    [
        ("reserved", 1),
        ("timestamp", 41),
        ("region", 4),
        ("machine", 5),
        ("sequence", 13),
    ],
)

PEONY_LAYOUT = FieldLayout(
    "peony",
    [
        ("reserved", 1),
        ("timestamp", 40),
        ("region", 3),
        ("machine", 10),
        ("sequence", 10),
    ],
)

JASMINE_LAYOUT = PrecisionLayout(
    "jasmine",
    {
        0: FieldLayout(
            "jasmine-seconds",
            [
                ("reserved", 1),
                ("region", 2),
                ("machine", 10),
                ("precision", 1),
                ("timestamp", 30),
                ("sequence", 20),
            ],
            unit="s",
        ),
        1: FieldLayout(
            "jasmine-milliseconds",
            [
                ("reserved", 1),
                ("region", 2),
                ("machine", 10),
                ("precision", 1),
                ("timestamp", 40),
                ("sequence", 10),
            ],
            unit="ms",
        ),
    },
)

snowflake_clock = EpochClock.from_unix_millis(settings.SNOWFLAKE_EPOCH)
custom_clock = EpochClock(CUSTOM_EPOCH)


@dataclass(frozen=True)
class Variant:
    """A named identifier layout bound to the clock its timestamps count on."""

    name: str
    layout: Union[FieldLayout, PrecisionLayout]
    clock: EpochClock

    def unpack(self, identifier: int) -> dict[str, int]:
        return self.layout.unpack(identifier)

    def creation_time(self, fields: dict[str, int]) -> datetime:
        """Converts an unpacked timestamp field to a UTC datetime."""
        unit = self.layout.resolve(fields).unit
        return self.clock.with_unit(unit).to_datetime(fields["timestamp"])


VARIANTS = {
    "snowflake": Variant("snowflake", SNOWFLAKE_LAYOUT, snowflake_clock),
    "catkin": Variant("catkin", CATKIN_LAYOUT, custom_clock),
    "peony": Variant("peony", PEONY_LAYOUT, custom_clock),
    "jasmine": Variant("jasmine", JASMINE_LAYOUT, custom_clock),
}


def get_variant(name: str) -> Variant:
    """Looks up a registered variant by name.

    Raises:
        UnknownVariantError: If no variant has that name.
    """
    try:
        return VARIANTS[name]
    except KeyError:
        raise UnknownVariantError(name) from None
