"""
Bit-Layout Codec Module

Packs named field values into a single 64-bit identifier and unpacks an
identifier back into its fields, for a declared partition of the 64 bits.

Layout Overview:
    Fields are declared most-significant first. Each field's shift is the sum
    of the widths of the fields declared after it, so a Twitter-style layout

    |1 bit   |     41 bits      | 5 bits      | 5 bits | 12 bits  |
    |reserved|    timestamp     | data_center | worker | sequence |

    is declared as ("reserved", 1), ("timestamp", 41), ("data_center", 5),
    ("worker", 5), ("sequence", 12). Widths may add up to less than 64, in
    which case the unused high bits are always zero.

Packing:
    - Every value is range checked before any bit is written, so a failed
      pack never yields a partially built identifier.
    - Each value contributes (value & mask) << shift.
    - When bit 63 ends up set the result is read back as a negative signed
      64-bit integer, which is how the identifier travels as text and JSON.

Unpacking:
    - (identifier >> shift) & mask per field. Python's arithmetic shift on
      negative integers keeps this exact for identifiers with bit 63 set.

Precision Layouts:
    Some identifiers carry a 1-bit precision flag that chooses between a
    seconds layout (30-bit timestamp, 20-bit sequence) and a milliseconds
    layout (40-bit timestamp, 10-bit sequence). PrecisionLayout re-derives the
    concrete FieldLayout from the flag before touching those bits.
"""

from dataclasses import dataclass

from flakeid.core.exceptions import OutOfRangeError
from flakeid.utils.codec import to_signed64, to_unsigned64

MAX_BITS = 64


@dataclass(frozen=True)
class Field:
    """A named, fixed-width slice of a packed identifier."""

    name: str
    bits: int
    shift: int

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    @property
    def max_value(self) -> int:
        return self.mask


class FieldLayout:
    """A fixed partition of a 64-bit identifier into named fields.

    Attributes:
        name: Human-readable name of the layout.
        fields: The fields, most significant first.
        unit: Time unit of the timestamp field ("s" or "ms").
    """

    def __init__(self, name: str, fields: list[tuple[str, int]], unit: str = "ms"):
        """Initializes a layout from (name, bits) pairs, most significant first.

        Raises:
            ValueError: If a width is not positive, a name repeats, or the
                widths add up to more than 64 bits.
        """
        total = sum(bits for _, bits in fields)
        if total > MAX_BITS:
            raise ValueError(f"Layout '{name}' needs {total} bits, max is {MAX_BITS}")

        names = [field_name for field_name, _ in fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Layout '{name}' declares a field twice: {names}")

        shift = 0
        declared = []
        for field_name, bits in reversed(fields):
            if bits <= 0:
                raise ValueError(f"Field '{field_name}' must be at least 1 bit wide")
            declared.append(Field(field_name, bits, shift))
            shift += bits

        self.name = name
        self.unit = unit
        self.fields = tuple(reversed(declared))
        self._by_name = {field.name: field for field in self.fields}

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    @property
    def total_bits(self) -> int:
        return sum(field.bits for field in self.fields)

    def __getitem__(self, name: str) -> Field:
        return self._by_name[name]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def resolve(self, values: dict) -> "FieldLayout":
        """Returns the concrete layout used for the given field values."""
        return self

    def validate(self, **values: int) -> None:
        """Checks every given value against its field width.

        Raises:
            ValueError: If a value names a field the layout does not declare.
            OutOfRangeError: If a value does not fit in its field.
        """
        unknown = set(values) - set(self._by_name)
        if unknown:
            raise ValueError(
                f"Unknown fields for layout '{self.name}': {sorted(unknown)}"
            )

        for field in self.fields:
            value = values.get(field.name, 0)
            if not 0 <= value <= field.max_value:
                raise OutOfRangeError(field.name, value, field.bits)

    def pack(self, **values: int) -> int:
        """Packs field values into a signed 64-bit identifier.

        Fields left out are packed as 0.

        Returns:
            The identifier as a signed 64-bit integer.

        Raises:
            ValueError: If a value names a field the layout does not declare.
            OutOfRangeError: If a value does not fit in its field.
        """
        self.validate(**values)

        packed = 0
        for field in self.fields:
            packed |= (values.get(field.name, 0) & field.mask) << field.shift

        return to_signed64(packed)

    def unpack(self, identifier: int) -> dict[str, int]:
        """Unpacks an identifier into a {field name: value} mapping."""
        identifier = to_unsigned64(identifier)
        return {
            field.name: (identifier >> field.shift) & field.mask
            for field in self.fields
        }

    def __repr__(self) -> str:
        widths = ", ".join(f"{field.name}:{field.bits}" for field in self.fields)
        return f"FieldLayout({self.name!r}, [{widths}], unit={self.unit!r})"


class PrecisionLayout:
    """A layout whose timestamp/sequence split is chosen by a precision bit.

    Both concrete layouts must place the precision field at the same bit, so
    the flag can be read before the rest of the identifier is interpreted.
    """

    PRECISION_FIELD = "precision"

    def __init__(self, name: str, layouts: dict[int, FieldLayout]):
        positions = {
            (layout[self.PRECISION_FIELD].shift, layout[self.PRECISION_FIELD].bits)
            for layout in layouts.values()
        }
        if len(positions) != 1:
            raise ValueError(
                f"Layout '{name}' places the precision field differently per precision"
            )

        self.name = name
        self.layouts = dict(layouts)
        self._precision_field = next(iter(layouts.values()))[self.PRECISION_FIELD]

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.layouts[min(self.layouts)].field_names

    def __contains__(self, name: str) -> bool:
        return name in self.layouts[min(self.layouts)]

    def layout_for(self, precision: int) -> FieldLayout:
        """Returns the concrete layout for a precision value.

        Raises:
            OutOfRangeError: If the precision value has no layout.
        """
        layout = self.layouts.get(precision)
        if layout is None:
            raise OutOfRangeError(
                self.PRECISION_FIELD, precision, self._precision_field.bits
            )
        return layout

    def resolve(self, values: dict) -> FieldLayout:
        return self.layout_for(values.get(self.PRECISION_FIELD, 0))

    def validate(self, **values: int) -> None:
        self.resolve(values).validate(**values)

    def pack(self, **values: int) -> int:
        return self.resolve(values).pack(**values)

    def unpack(self, identifier: int) -> dict[str, int]:
        field = self._precision_field
        precision = (to_unsigned64(identifier) >> field.shift) & field.mask
        return self.layout_for(precision).unpack(identifier)

    def __repr__(self) -> str:
        return f"PrecisionLayout({self.name!r}, {self.layouts!r})"
