"""
Template upload and lookup endpoints.

POST /upload  — stage a PDF or DOCX, extract its text and segment it into sections.
GET  /        — list registered templates (summaries).
GET  /{id}    — full template, or null if unknown.
"""
from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import List, Optional

import aiofiles
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.config import settings
from app.dependencies.services import ServiceContainer, get_services
from app.exceptions import CorruptDocument, UnsupportedFormat
from app.models.schemas import TemplateResponse, TemplateSummary, TemplateUploadResponse
from app.utils.helpers import safe_remove

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=TemplateUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_template(
    file: UploadFile = File(...),
    services: ServiceContainer = Depends(get_services),
) -> TemplateUploadResponse:
    """
    Upload a PDF or DOCX and register it as a report template.

    - Max file size: 10 MB (configurable via MAX_FILE_SIZE)
    - The file is staged under a UUID name and deleted once parsed
    - The response carries the detected sections
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{file_ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, stored_name)
    file_size = 0

    try:
        # Stream to disk while enforcing the size limit
        async with aiofiles.open(file_path, "wb") as out:
            while True:
                chunk = await file.read(1024 * 1024)   # 1 MB slices
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > settings.MAX_FILE_SIZE:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=(
                            f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                            "size limit."
                        ),
                    )
                await out.write(chunk)

        logger.info(
            f"Staged {file.filename!r} → {file_path} ({file_size:,} bytes)"
        )

        # Ingestion removes the staged file itself
        template = await services.ingestion.ingest(file_path, file.filename)

    except HTTPException:
        safe_remove(file_path)
        raise
    except UnsupportedFormat as exc:
        safe_remove(file_path)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    except CorruptDocument as exc:
        safe_remove(file_path)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    except Exception as exc:
        logger.exception(f"Unexpected error processing {file.filename!r}")
        safe_remove(file_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error processing template: {exc}",
        )

    logger.info(
        f"Template {file.filename!r} stored as id={template.id} "
        f"with {len(template.sections)} sections."
    )
    return TemplateUploadResponse(
        template_id=template.id,
        template=TemplateResponse.from_template(template),
        message=(
            f"Template uploaded and parsed successfully. "
            f"{len(template.sections)} sections detected."
        ),
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@router.get("/", response_model=List[TemplateSummary])
async def list_templates(
    services: ServiceContainer = Depends(get_services),
) -> List[TemplateSummary]:
    """List registered templates in upload order."""
    return services.report_service.list_template_summaries()


@router.get("/{template_id}", response_model=Optional[TemplateResponse])
async def get_template(
    template_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Optional[TemplateResponse]:
    """Return one template, or null when the id is unknown."""
    template = services.templates.get(template_id)
    if template is None:
        return None
    return TemplateResponse.from_template(template)
