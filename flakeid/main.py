"""
FastAPI Identifier Service

A small HTTP service exposing the identifier engine: generate new 64-bit
identifiers for a named variant, and decode identifiers back into their
fields.

Key Features:
    - Monotonic Snowflake ID generation (strictly increasing per process)
    - Free-running catkin, peony and jasmine IDs with optional field overrides
    - Field breakdown and creation time for any identifier
    - CORS middleware support for cross-origin requests
    - Comprehensive error handling and logging

Architecture:
    - FastAPI for the web framework and automatic API documentation
    - pydantic-settings for data center, worker, region and machine IDs
    - services.id_service between routes and the engine in utils

Error Mapping:
    - 400: malformed identifier text, field value out of range, unknown field
    - 404: unknown variant
    - 503: system clock moved backward; retry once the clock is sane
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, HTTPException, Path, Query, status
from fastapi.middleware.cors import CORSMiddleware

from flakeid.core.config import settings
from flakeid.core.exceptions import (
    ClockRollbackError,
    IdFormatError,
    OutOfRangeError,
    UnknownVariantError,
)
from flakeid.schema import DecodedID, GenerateOverrides, IDResponse
from flakeid.services.id_service import decode_identifier, generate_identifier
from flakeid.services.logger import setup_logger

logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan event handler.

    Generators are built at import time, so a data center, worker, region or
    machine ID that does not fit its field has already failed the import by
    the time this runs. This handler only reports the active configuration.

    Args:
        app (FastAPI): The FastAPI application instance

    Yields:
        None: Control to the application during its lifetime
    """
    logger.info(
        "Starting identifier service (env=%s, data_center=%s, worker=%s,"
        " region=%s, machine=%s)",
        settings.ENV,
        settings.DATA_CENTER_ID,
        settings.WORKER_ID,
        settings.REGION_ID,
        settings.MACHINE_ID,
    )

    yield

    logger.info("Application is shutting down.")


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", summary="Health check")
async def health():
    return {"status": "ok"}


@app.get(
    "/{variant}/generate",
    response_model=IDResponse,
    summary="Generate an identifier",
    description="""
    Generate a new identifier of the given variant.

    The snowflake variant is issued by a lock-guarded monotonic generator:
    every ID is strictly greater than the previous one issued by this process.
    Overrides are ignored for it.

    The catkin, peony and jasmine variants are free-running: the timestamp is
    the current time unless overridden, and the sequence is the next value of
    a process-wide counter unless overridden. Region and machine default to
    the configured values. For jasmine, precision 0 selects a seconds
    timestamp and precision 1 a milliseconds timestamp.
    """,
    responses={
        200: {
            "description": "Identifier generated successfully",
            "content": {"application/json": {"example": {"id": "36671638107855309"}}},
        },
        400: {
            "description": "A field override does not fit in its field",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "The 'sequence' value must be between 0 and 8191"
                        " (it must fit in 13 bits), got 9000."
                    }
                }
            },
        },
        404: {
            "description": "Unknown variant",
            "content": {
                "application/json": {
                    "example": {"detail": "Unknown identifier variant: 'tulip'"}
                }
            },
        },
        503: {
            "description": "System clock moved backward",
            "content": {
                "application/json": {
                    "example": {"detail": "Identifier generation unavailable"}
                }
            },
        },
    },
)
def generate(
    variant: Annotated[str, Path(description="Identifier variant", example="catkin")],
    overrides: Annotated[GenerateOverrides, Query()],
):
    """Generate an identifier of the given variant.

    Args:
        variant (str): Identifier variant name.
        overrides (GenerateOverrides): Optional field overrides from the query.

    Returns:
        IDResponse: The identifier as decimal text.
    """
    try:
        return generate_identifier(variant, overrides)
    except UnknownVariantError as e:
        logger.warning("Unknown variant requested: %s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OutOfRangeError as e:
        logger.warning("Field override out of range: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValueError as e:
        logger.warning("Invalid field override: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ClockRollbackError as e:
        logger.error("Identifier generation refused: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identifier generation unavailable",
        )


@app.get(
    "/{variant}/decode",
    response_model=DecodedID,
    summary="Decode an identifier",
    description="""
    Decode an identifier of the given variant into its named fields.

    The identifier is the signed decimal text returned by the generate
    endpoint. Identifiers with the top bit set are negative. The creation time
    is derived from the timestamp field and the variant's epoch.
    """,
    responses={
        200: {
            "description": "Identifier decoded successfully",
            "content": {
                "application/json": {
                    "example": {
                        "id": "36671638107855309",
                        "variant": "catkin",
                        "fields": {
                            "reserved": 0,
                            "timestamp": 8743199851,
                            "region": 0,
                            "machine": 0,
                            "sequence": 6605,
                        },
                        "creation_time": "2017-04-12T04:39:59.851000Z",
                    }
                }
            },
        },
        400: {
            "description": "Malformed identifier",
            "content": {
                "application/json": {
                    "example": {"detail": "'12ab' is not a valid identifier string."}
                }
            },
        },
        404: {
            "description": "Unknown variant",
            "content": {
                "application/json": {
                    "example": {"detail": "Unknown identifier variant: 'tulip'"}
                }
            },
        },
    },
)
def decode(
    variant: str = Path(..., description="Identifier variant", example="catkin"),
    identifier: str = Query(
        ...,
        alias="id",
        description="Signed 64-bit identifier as decimal text",
        example="36671638107855309",
    ),
):
    """Decode an identifier into its fields.

    Args:
        variant (str): Identifier variant name.
        identifier (str): The identifier as decimal text, from the "id" query.

    Returns:
        DecodedID: Field breakdown and creation time.
    """
    try:
        return decode_identifier(variant, identifier)
    except UnknownVariantError as e:
        logger.warning("Unknown variant requested: %s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except IdFormatError as e:
        logger.warning("Malformed identifier: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
