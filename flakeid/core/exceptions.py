class OutOfRangeError(ValueError):
    """Raised when a field value does not fit in its declared bit width."""

    def __init__(self, field: str, value: int, bits: int):
        self.field = field
        self.value = value
        self.bits = bits
        self.max_value = (1 << bits) - 1
        super().__init__(
            f"The '{field}' value must be between 0 and {self.max_value}"
            f" (it must fit in {bits} bits), got {value}."
        )


class ClockRollbackError(RuntimeError):
    """Raised when the system clock moved backward since the last issued ID."""

    def __init__(self, last_timestamp: int, timestamp: int):
        self.last_timestamp = last_timestamp
        self.timestamp = timestamp
        self.rollback = last_timestamp - timestamp
        super().__init__(
            f"Clock moved backward by {self.rollback} time units."
            " Refusing to generate ID."
        )


class IdFormatError(ValueError):
    """Raised when a string is not a valid signed 64-bit decimal identifier."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"'{value}' is not a valid identifier string.")


class UnknownVariantError(LookupError):
    """Raised when an identifier variant name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown identifier variant: '{name}'")
