"""Bulk CSV import endpoints.

Imports are validate-only: the response carries the accepted rows and every
error, and the caller persists ``data`` only when ``success`` is true.
"""

from typing import Annotated

from fastapi import APIRouter, File, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse

from school_portal.core.app_exceptions import invalid_encoding, payload_too_large, unknown_entity
from school_portal.core.config import settings
from school_portal.core.etag import csv_download
from school_portal.core.logging import get_logger
from school_portal.services.importer import UnknownEntityError, get_pipeline
from school_portal.services.importer.templates import (
    generate_csv_template,
    sample_template,
    scan_entity_structure,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post("/{entity}")
async def import_csv(
    entity: str,
    file: UploadFile = File(..., description="CSV file with a header row"),
) -> JSONResponse:
    """Validate an uploaded CSV file for one entity type."""
    try:
        pipeline = get_pipeline(entity)
    except UnknownEntityError as e:
        raise unknown_entity(str(e), e.supported) from e

    max_bytes = settings.IMPORT_MAX_BYTES
    try:
        raw = await file.read(max_bytes + 1)
    finally:
        await file.close()

    if len(raw) > max_bytes:
        raise payload_too_large(max_bytes)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise invalid_encoding(e.start) from e

    result = pipeline.run(text)
    logger.info(
        "CSV upload validated",
        extra={
            "entity": pipeline.schema.plural,
            "upload_name": file.filename,
            "success": result.success,
        },
    )
    return JSONResponse(content=result.to_response())


@router.get("/{entity}/template")
async def download_template(
    entity: str,
    request: Request,
    sample_rows: Annotated[int | None, Query(ge=0, le=50)] = None,
    include_optional: bool = True,
    empty_optional_fields: bool = False,
    static: bool = False,
) -> Response:
    """
    Download a CSV template for an entity. Supports ETag/If-None-Match for caching.

    With ``static=true`` the fixed sample file for an importable entity is
    served instead of a generated one; the other options are ignored.
    """
    try:
        structure = scan_entity_structure(entity)
        if static:
            csv_content = sample_template(entity)
        else:
            csv_content = generate_csv_template(
                structure,
                include_optional=include_optional,
                sample_rows=settings.TEMPLATE_SAMPLE_ROWS if sample_rows is None else sample_rows,
                empty_optional_fields=empty_optional_fields,
            )
    except UnknownEntityError as e:
        raise unknown_entity(str(e), e.supported) from e

    return csv_download(request, csv_content, f"{structure.entity_name}_import_template.csv")
