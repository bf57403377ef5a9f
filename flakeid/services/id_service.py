"""
Identifier Service Module

The layer between the HTTP routes and the identifier engine. Routes call the
functions here with raw request values; the functions pick the generator for
the requested variant, run it, and shape the result into response models.

Generators:
    - snowflake: one process-wide monotonic SnowflakeIDGenerator configured
      with DATA_CENTER_ID and WORKER_ID. IDs from it strictly increase.
    - catkin, peony, jasmine: FreeRunningGenerator instances sharing the
      process-wide counter, with REGION_ID and MACHINE_ID as default origin.

Error Handling:
    Engine errors propagate unchanged (OutOfRangeError, IdFormatError,
    ClockRollbackError, UnknownVariantError); routes translate them into HTTP
    errors. Nothing here substitutes a default for an invalid input.
"""

from typing import Optional

from flakeid.core.config import settings
from flakeid.core.exceptions import UnknownVariantError
from flakeid.schema import DecodedID, GenerateOverrides, IDResponse
from flakeid.services.logger import setup_logger
from flakeid.utils.codec import format_id, parse_id
from flakeid.utils.free_running import FreeRunningGenerator
from flakeid.utils.snowflake import SnowflakeIDGenerator
from flakeid.utils.variants import VARIANTS, get_variant

logger = setup_logger()

MONOTONIC_VARIANT = "snowflake"

snowflake_generator = SnowflakeIDGenerator(
    settings.DATA_CENTER_ID,
    settings.WORKER_ID,
    clock=VARIANTS[MONOTONIC_VARIANT].clock,
    layout=VARIANTS[MONOTONIC_VARIANT].layout,
)

free_running_generators = {
    name: FreeRunningGenerator(
        variant.layout,
        variant.clock,
        defaults={"region": settings.REGION_ID, "machine": settings.MACHINE_ID},
    )
    for name, variant in VARIANTS.items()
    if name != MONOTONIC_VARIANT
}


def generate_identifier(
    variant_name: str, overrides: Optional[GenerateOverrides] = None
) -> IDResponse:
    """Generate a new identifier of the given variant.

    Args:
        variant_name (str): Name of a registered variant.
        overrides (Optional[GenerateOverrides]): Field overrides. Ignored by
            the monotonic snowflake variant, which owns all of its fields.

    Returns:
        IDResponse: The identifier as decimal text.

    Raises:
        UnknownVariantError: If the variant is not registered.
        OutOfRangeError: If an override does not fit in its field.
        ValueError: If an override names a field the variant does not have.
        ClockRollbackError: If the system clock moved backward.
    """
    if variant_name == MONOTONIC_VARIANT:
        identifier = snowflake_generator.generate_id()
    else:
        generator = free_running_generators.get(variant_name)
        if generator is None:
            raise UnknownVariantError(variant_name)

        values = overrides.model_dump(exclude_none=True) if overrides else {}
        identifier = generator.generate_id(**values)

    logger.debug("Generated %s ID %s", variant_name, identifier)
    return IDResponse(id=format_id(identifier))


def decode_identifier(variant_name: str, raw_id: str) -> DecodedID:
    """Decode an identifier into its named fields.

    Args:
        variant_name (str): Name of a registered variant.
        raw_id (str): The identifier as signed decimal text.

    Returns:
        DecodedID: The field breakdown and the encoded creation time.

    Raises:
        UnknownVariantError: If the variant is not registered.
        IdFormatError: If raw_id is not a signed 64-bit decimal literal.
    """
    variant = get_variant(variant_name)
    identifier = parse_id(raw_id)
    fields = variant.unpack(identifier)

    return DecodedID(
        id=format_id(identifier),
        variant=variant.name,
        fields=fields,
        creation_time=variant.creation_time(fields),
    )
