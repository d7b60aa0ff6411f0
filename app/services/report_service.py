"""
Report generation orchestration.

Resolves template ids against the TemplateRegistry, runs the synthesizer and
commits completed reports to the ReportRegistry.  ``handle_generate`` is the
generation boundary used by the WebSocket gateway: the internal
pending/processing/completed/failed lifecycle collapses to
started/completed/failed there.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.exceptions import TemplateNotFound
from app.models.schemas import (
    GenerateReportRequest,
    GenerateReportResponse,
    GenerationStatusSchema,
    TemplateSummary,
)
from app.services.registry import ReportRegistry, TemplateRegistry
from app.services.synthesizer import ReportSynthesizer, SynthesisResult
from app.utils.helpers import truncate_text

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        templates: TemplateRegistry,
        reports: ReportRegistry,
        synthesizer: ReportSynthesizer,
    ) -> None:
        self.templates = templates
        self.reports = reports
        self.synthesizer = synthesizer

    async def generate(
        self,
        template_id: str,
        title: str,
        prompt: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> SynthesisResult:
        """
        Synthesize and commit a report.

        Raises:
            TemplateNotFound: *template_id* is not registered; raised before
                              synthesis starts.
        """
        template = self.templates.get(template_id)
        if template is None:
            raise TemplateNotFound(template_id)

        logger.info(
            "Generating report %r from template %s — prompt: %s",
            title,
            template_id,
            truncate_text(prompt, 80),
        )
        result = await self.synthesizer.generate(template, prompt, context, title=title)
        if result.ok:
            self.reports.put(result.report)
        return result

    async def handle_generate(self, request: GenerateReportRequest) -> GenerateReportResponse:
        """Run a generation request and map the outcome to the boundary response."""
        try:
            result = await self.generate(
                request.template_id,
                request.title,
                request.prompt,
                request.context,
            )
        except TemplateNotFound as exc:
            logger.warning("Generation rejected: %s", exc)
            return GenerateReportResponse(status=GenerationStatusSchema.FAILED, error=str(exc))

        if not result.ok:
            return GenerateReportResponse(status=GenerationStatusSchema.FAILED, error=result.error)

        return GenerateReportResponse(
            report_id=result.report.id,
            status=GenerationStatusSchema.COMPLETED,
            content=result.report.content,
        )

    def list_template_summaries(self) -> List[TemplateSummary]:
        return [TemplateSummary.from_template(t) for t in self.templates.list()]
