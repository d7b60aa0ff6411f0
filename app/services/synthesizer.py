"""
Report synthesis: expands a template's sections plus a prompt into a report.

Layout of the generated Markdown (ko bundle shown):

    # <filename>에 기반한 보고서
    ## <section title>                one per section, ascending ``order``
    ### <section title> 상세           header sections only
    <placeholder>
    <type block>                      content → SectionWriter output
                                      table   → fixed 3-column sample table
                                      list    → fixed 3-bullet sample list
                                      header/image → nothing
    ---
    **보고서 생성 완료**: <timestamp>
    **기반 템플릿**: <filename>

Content is built in a local buffer and only handed back once complete; the
synthesizer never touches a registry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.models.domain import Report, ReportStatus, Section, SectionType, Template, utcnow
from app.services.locales import KO, LocaleStrings
from app.services.registry import new_id
from app.services.section_writer import PlaceholderSectionWriter, SectionRequest, SectionWriter

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """Completed report, or the reason synthesis failed."""

    report: Optional[Report] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.report is not None


class ReportSynthesizer:
    """Deterministic, section-by-section report assembly."""

    def __init__(
        self,
        writer: Optional[SectionWriter] = None,
        locale: LocaleStrings = KO,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.locale = locale
        self.writer = writer or PlaceholderSectionWriter(locale)
        self._clock = clock
        self._id_factory = id_factory

    async def generate(
        self,
        template: Template,
        prompt: str,
        context: Optional[Dict[str, Any]] = None,
        title: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Build a completed Report for *template*.

        Any exception while assembling content is converted into a failed
        SynthesisResult; the half-built report is discarded.
        """
        report: Optional[Report] = None
        try:
            report = Report(
                id=self._id_factory(),
                title=title or template.filename,
                template=template,
                status=ReportStatus.PROCESSING,
                created_at=self._clock(),
            )
            content = await self._render(template, prompt, context)
            report.complete(content, completed_at=self._clock())
        except Exception as exc:
            logger.error(
                "Synthesis failed for template %s (%s): %s",
                template.id,
                template.filename,
                exc,
                exc_info=True,
            )
            if report is not None and not report.is_terminal:
                report.fail()
            return SynthesisResult(error=str(exc) or type(exc).__name__)

        logger.info(
            "Synthesized report id=%s from template %s (%d sections, %d chars)",
            report.id,
            template.id,
            len(template.sections),
            len(report.content),
        )
        return SynthesisResult(report=report)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def _render(
        self,
        template: Template,
        prompt: str,
        context: Optional[Dict[str, Any]],
    ) -> str:
        locale = self.locale
        blocks: List[str] = [locale.report_heading.format(filename=template.filename)]

        for section in sorted(template.sections, key=lambda s: s.order):
            section_type = SectionType(section.type)
            blocks.append(f"## {section.title}")

            if section_type is SectionType.HEADER:
                blocks.append(locale.header_detail_heading.format(title=section.title))

            blocks.append(self._placeholder_for(section))

            body = await self._body_block(section, section_type, template, prompt, context)
            if body is not None:
                blocks.append(body)

        content = "".join(f"{block}\n\n" for block in blocks)
        content += (
            "\n---\n"
            f"{locale.footer_generated.format(timestamp=self._timestamp())}\n"
            f"{locale.footer_template.format(filename=template.filename)}\n"
        )
        return content

    async def _body_block(
        self,
        section: Section,
        section_type: SectionType,
        template: Template,
        prompt: str,
        context: Optional[Dict[str, Any]],
    ) -> Optional[str]:
        if section_type is SectionType.CONTENT:
            request = SectionRequest(
                template=template, section=section, prompt=prompt, context=context
            )
            return await self.writer.write(request)
        if section_type is SectionType.TABLE:
            return self._sample_table()
        if section_type is SectionType.LIST:
            return "\n".join(f"- {item}" for item in self.locale.list_items)
        return None

    def _placeholder_for(self, section: Section) -> str:
        if section.placeholder is None:
            return self.locale.section_placeholder.format(title=section.title)
        return section.placeholder

    def _sample_table(self) -> str:
        columns = self.locale.table_columns
        rows = [
            "| " + " | ".join(columns) + " |",
            "|" + "|".join("------" for _ in columns) + "|",
        ]
        rows.extend("| " + " | ".join(row) + " |" for row in self.locale.table_rows)
        return "\n".join(rows)

    def _timestamp(self) -> str:
        return self._clock().strftime("%Y-%m-%d %H:%M:%S %Z").strip()
