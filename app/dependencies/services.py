"""
Service container and FastAPI dependencies.

One ServiceContainer is built in the application lifespan and stored on
``app.state.services``; routers and the WebSocket gateway receive it through
``Depends(get_services)``.  Tests override ``get_services`` with their own
container.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from fastapi import HTTPException, status
from fastapi.requests import HTTPConnection

from app.config import settings
from app.services.document_parser import DocumentTextExtractor
from app.services.registry import ReportRegistry, TemplateRegistry
from app.services.report_service import ReportService
from app.services.section_writer import SectionWriter, build_section_writer
from app.services.segmenter import SectionSegmenter, SegmenterConfig
from app.services.synthesizer import ReportSynthesizer
from app.services.template_ingestion import TemplateIngestionService

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ServiceContainer:
    templates: TemplateRegistry
    reports: ReportRegistry
    ingestion: TemplateIngestionService
    report_service: ReportService
    writer: SectionWriter
    writer_backend: str


def build_services(
    writer_backend: Optional[str] = None,
    ocr_enabled: Optional[bool] = None,
) -> ServiceContainer:
    """Wire registries, segmenter, writer and synthesizer from settings."""
    config = SegmenterConfig.from_settings()
    backend = (writer_backend or settings.REPORT_WRITER).lower()
    writer = build_section_writer(config.locale, backend)

    templates = TemplateRegistry()
    reports = ReportRegistry()
    ingestion = TemplateIngestionService(
        extractor=DocumentTextExtractor(ocr_enabled=ocr_enabled),
        segmenter=SectionSegmenter(config),
        registry=templates,
    )
    report_service = ReportService(
        templates=templates,
        reports=reports,
        synthesizer=ReportSynthesizer(writer=writer, locale=config.locale),
    )

    logger.info(
        "Services ready (locale=%s, writer=%s)", config.locale.code, backend
    )
    return ServiceContainer(
        templates=templates,
        reports=reports,
        ingestion=ingestion,
        report_service=report_service,
        writer=writer,
        writer_backend=backend,
    )


async def get_services(connection: HTTPConnection) -> ServiceContainer:
    """Return the container built at startup. Works for HTTP and WebSocket routes."""
    services = getattr(connection.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services are not initialised.",
        )
    return services
