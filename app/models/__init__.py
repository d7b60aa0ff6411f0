"""Domain and schema models for Stencil."""
from app.models.domain import (
    Section,
    Template,
    Report,
    SectionType,
    DocumentType,
    ReportStatus,
)
from app.models.schemas import (
    SectionSchema,
    TemplateResponse,
    TemplateSummary,
    TemplateUploadResponse,
    ReportResponse,
    GenerateReportRequest,
    GenerateReportResponse,
    GenerationStatusSchema,
    GatewayEvent,
    HealthCheckResponse,
)

__all__ = [
    # Domain models
    "Section",
    "Template",
    "Report",
    "SectionType",
    "DocumentType",
    "ReportStatus",
    # Pydantic schemas
    "SectionSchema",
    "TemplateResponse",
    "TemplateSummary",
    "TemplateUploadResponse",
    "ReportResponse",
    "GenerateReportRequest",
    "GenerateReportResponse",
    "GenerationStatusSchema",
    "GatewayEvent",
    "HealthCheckResponse",
]
