"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import logging

from app.dependencies.services import ServiceContainer, get_services
from app.models.schemas import HealthCheckResponse
from app.services.section_writer import OllamaSectionWriter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(services: ServiceContainer = Depends(get_services)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with registry sizes and section writer status
    """
    # The deterministic writer has nothing to probe
    writer_status = "ok"
    if isinstance(services.writer, OllamaSectionWriter):
        try:
            if not await services.writer.check_health():
                writer_status = "error"
        except Exception as e:
            logger.error(f"Ollama health check failed: {e}")
            writer_status = "error"

    overall_status = "healthy" if writer_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        templates=len(services.templates),
        reports=len(services.reports),
        writer=services.writer_backend,
        writer_status=writer_status,
        timestamp=datetime.now(timezone.utc),
    )
