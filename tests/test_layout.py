import pytest

from flakeid.core.exceptions import OutOfRangeError
from flakeid.utils.layout import FieldLayout
from flakeid.utils.variants import (
    CATKIN_LAYOUT,
    JASMINE_LAYOUT,
    PEONY_LAYOUT,
    SNOWFLAKE_LAYOUT,
)


def test_shifts_follow_declared_widths():
    assert SNOWFLAKE_LAYOUT["sequence"].shift == 0
    assert SNOWFLAKE_LAYOUT["worker"].shift == 12
    assert SNOWFLAKE_LAYOUT["data_center"].shift == 17
    assert SNOWFLAKE_LAYOUT["timestamp"].shift == 22
    assert SNOWFLAKE_LAYOUT["reserved"].shift == 63
    assert SNOWFLAKE_LAYOUT.total_bits == 64


def test_pack_all_zero_fields():
    assert (
        SNOWFLAKE_LAYOUT.pack(
            reserved=0, timestamp=0, data_center=0, worker=0, sequence=0
        )
        == 0
    )


def test_pack_rejects_sequence_wider_than_field():
    with pytest.raises(OutOfRangeError) as exc_info:
        SNOWFLAKE_LAYOUT.pack(timestamp=1, sequence=4096)

    assert exc_info.value.field == "sequence"
    assert exc_info.value.value == 4096
    assert exc_info.value.bits == 12
    assert "sequence" in str(exc_info.value)


def test_pack_rejects_negative_values():
    with pytest.raises(OutOfRangeError) as exc_info:
        CATKIN_LAYOUT.pack(region=-1)

    assert exc_info.value.field == "region"


def test_pack_rejects_unknown_field():
    with pytest.raises(ValueError) as exc_info:
        CATKIN_LAYOUT.pack(worker=1)

    assert not isinstance(exc_info.value, OutOfRangeError)


def test_layout_wider_than_64_bits_is_rejected():
    with pytest.raises(ValueError):
        FieldLayout("too-wide", [("timestamp", 50), ("sequence", 15)])


def test_narrow_layout_leaves_high_bits_zero():
    layout = FieldLayout("narrow", [("high", 4), ("low", 4)])

    assert layout.pack(high=15, low=15) == 255
    assert layout.unpack(255) == {"high": 15, "low": 15}


def test_catkin_reference_identifier_unpacks():
    assert CATKIN_LAYOUT.unpack(36671638107855309) == {
        "reserved": 0,
        "timestamp": 8743199851,
        "region": 0,
        "machine": 0,
        "sequence": 6605,
    }


def test_catkin_full_size_fields():
    packed = CATKIN_LAYOUT.pack(
        reserved=0, timestamp=219902320000, region=5, machine=31, sequence=1023
    )

    assert packed == 922337180386845695


def test_reserved_bit_produces_negative_identifier():
    fields = {
        "reserved": 1,
        "timestamp": 8679772108,
        "region": 5,
        "machine": 31,
        "sequence": 1023,
    }

    packed = CATKIN_LAYOUT.pack(**fields)

    assert packed == -9186966433981537281
    assert CATKIN_LAYOUT.unpack(packed) == fields


def test_peony_reference_identifiers():
    assert PEONY_LAYOUT.pack(timestamp=8679772108, sequence=32) == 72811205743345696
    assert (
        PEONY_LAYOUT.pack(
            reserved=1, timestamp=8679772108, region=5, machine=256, sequence=1023
        )
        == -9150560831105924097
    )


@pytest.mark.parametrize(
    "layout",
    [SNOWFLAKE_LAYOUT, CATKIN_LAYOUT, PEONY_LAYOUT],
    ids=lambda layout: layout.name,
)
def test_unpack_inverts_pack_at_field_limits(layout):
    maxed = {field.name: field.max_value for field in layout.fields}
    alternating = {
        field.name: field.max_value if index % 2 else 0
        for index, field in enumerate(layout.fields)
    }

    assert layout.unpack(layout.pack(**maxed)) == maxed
    assert layout.pack(**maxed) == -1
    assert layout.unpack(layout.pack(**alternating)) == alternating


def test_unpack_accepts_unsigned_bit_pattern():
    assert CATKIN_LAYOUT.unpack((1 << 64) - 1) == CATKIN_LAYOUT.unpack(-1)


class TestPrecisionLayout:
    def test_seconds_reference_identifier(self):
        fields = JASMINE_LAYOUT.unpack(4611695116789851300)

        assert fields == {
            "reserved": 0,
            "region": 2,
            "machine": 0,
            "precision": 0,
            "timestamp": 8676874,
            "sequence": 631972,
        }
        assert JASMINE_LAYOUT.pack(**fields) == 4611695116789851300

    def test_precision_selects_widths(self):
        seconds = JASMINE_LAYOUT.layout_for(0)
        millis = JASMINE_LAYOUT.layout_for(1)

        assert (seconds["timestamp"].bits, seconds["sequence"].bits) == (30, 20)
        assert (millis["timestamp"].bits, millis["sequence"].bits) == (40, 10)
        assert seconds["timestamp"].shift == 20
        assert millis["timestamp"].shift == 10
        assert seconds.unit == "s"
        assert millis.unit == "ms"

    def test_milliseconds_round_trip(self):
        fields = {
            "reserved": 1,
            "region": 3,
            "machine": 1023,
            "precision": 1,
            "timestamp": (1 << 40) - 1,
            "sequence": 1023,
        }

        packed = JASMINE_LAYOUT.pack(**fields)

        assert packed < 0
        assert JASMINE_LAYOUT.unpack(packed) == fields

    def test_sequence_limit_depends_on_precision(self):
        JASMINE_LAYOUT.pack(precision=0, sequence=1024)

        with pytest.raises(OutOfRangeError) as exc_info:
            JASMINE_LAYOUT.pack(precision=1, sequence=1024)

        assert exc_info.value.bits == 10

    def test_timestamp_limit_depends_on_precision(self):
        JASMINE_LAYOUT.pack(precision=1, timestamp=1 << 30)

        with pytest.raises(OutOfRangeError) as exc_info:
            JASMINE_LAYOUT.pack(precision=0, timestamp=1 << 30)

        assert exc_info.value.field == "timestamp"
        assert exc_info.value.bits == 30

    def test_invalid_precision_is_rejected(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            JASMINE_LAYOUT.pack(precision=2)

        assert exc_info.value.field == "precision"
