"""
Report endpoints.

POST /generate — synthesize a report from a registered template.
GET  /         — list committed reports.
GET  /{id}     — one report, or null if unknown.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.services import ServiceContainer, get_services
from app.exceptions import TemplateNotFound
from app.models.schemas import (
    GenerateReportRequest,
    GenerateReportResponse,
    GenerationStatusSchema,
    ReportResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=GenerateReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_report(
    request: GenerateReportRequest,
    services: ServiceContainer = Depends(get_services),
) -> GenerateReportResponse:
    """
    Generate a report synchronously.

    Returns 404 for an unknown template and 500 if synthesis fails; in both
    cases no report is stored.
    """
    try:
        result = await services.report_service.generate(
            request.template_id,
            request.title,
            request.prompt,
            request.context,
        )
    except TemplateNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        )

    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Report generation failed: {result.error}",
        )

    return GenerateReportResponse(
        report_id=result.report.id,
        status=GenerationStatusSchema.COMPLETED,
        content=result.report.content,
    )


@router.get("/", response_model=List[ReportResponse])
async def list_reports(
    services: ServiceContainer = Depends(get_services),
) -> List[ReportResponse]:
    """List committed reports in creation order."""
    return [ReportResponse.from_report(r) for r in services.reports.list()]


@router.get("/{report_id}", response_model=Optional[ReportResponse])
async def get_report(
    report_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Optional[ReportResponse]:
    """Return one report, or null when the id is unknown."""
    report = services.reports.get(report_id)
    if report is None:
        return None
    return ReportResponse.from_report(report)
