"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from enum import Enum

from app.models.domain import (
    DocumentType,
    Report,
    ReportStatus,
    SectionType,
    Template,
)


class GenerationStatusSchema(str, Enum):
    """Report status as seen by generation callers."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


# Template Schemas
class SectionSchema(BaseModel):
    """One template section."""

    title: str
    placeholder: Optional[str] = None
    order: int = Field(..., ge=0)
    type: SectionType

    model_config = ConfigDict(from_attributes=True)


class TemplateResponse(BaseModel):
    """Schema for template details."""

    id: str
    filename: str
    type: DocumentType
    content: str
    sections: List[SectionSchema]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_template(cls, template: Template) -> "TemplateResponse":
        return cls.model_validate(template)


class TemplateSummary(BaseModel):
    """Compact template listing entry."""

    template_id: str
    filename: str
    type: DocumentType
    sections: int
    created_at: datetime

    @classmethod
    def from_template(cls, template: Template) -> "TemplateSummary":
        return cls(
            template_id=template.id,
            filename=template.filename,
            type=template.type,
            sections=len(template.sections),
            created_at=template.created_at,
        )


class TemplateUploadResponse(BaseModel):
    """Schema for template upload response."""

    template_id: str
    template: TemplateResponse
    message: str = "Template uploaded and parsed successfully"


# Report Schemas
class ReportResponse(BaseModel):
    """Schema for report details."""

    id: str
    title: str
    template: TemplateResponse
    content: str
    status: ReportStatus
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        return cls.model_validate(report)


class GenerateReportRequest(BaseModel):
    """Report generation request."""

    template_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    prompt: str = Field(..., min_length=1)
    context: Optional[Dict[str, Any]] = None


class GenerateReportResponse(BaseModel):
    """Report generation response."""

    report_id: str = ""
    status: GenerationStatusSchema
    content: Optional[str] = None
    error: Optional[str] = None


# Gateway Schemas
class GatewayGenerateMessage(GenerateReportRequest):
    """WebSocket request to generate a report."""

    action: Literal["generate_report"]
    request_id: Optional[str] = None


class GatewayListTemplatesMessage(BaseModel):
    """WebSocket request to list templates."""

    action: Literal["list_templates"]
    request_id: Optional[str] = None


class GatewayEvent(BaseModel):
    """Server → client WebSocket message."""

    event: Literal["generation", "templates", "error"]
    request_id: Optional[str] = None
    result: Optional[GenerateReportResponse] = None
    templates: Optional[List[TemplateSummary]] = None
    error: Optional[str] = None


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    templates: int
    reports: int
    writer: str
    writer_status: str
    timestamp: datetime
    version: str = "0.1.0"

