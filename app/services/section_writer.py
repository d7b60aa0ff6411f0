"""
Section writers: produce the body of a ``content`` section during synthesis.

Every writer receives a SectionRequest and returns plain Markdown text.
``SectionRequest.render_prompt`` is the exact input a model-backed writer
sends, so swapping the deterministic writer for a real model never changes
the report's surrounding structure.

PlaceholderSectionWriter  — deterministic bracketed line (default)
OllamaSectionWriter       — Ollama /api/generate via httpx
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from app.config import settings
from app.exceptions import SynthesisError
from app.models.domain import Section, Template
from app.services.locales import LocaleStrings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / protocol
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SectionRequest:
    """Everything a writer may use to produce one section body."""

    template: Template
    section: Section
    prompt: str
    context: Optional[Dict[str, Any]] = None

    def render_prompt(self, locale: LocaleStrings) -> str:
        """Build the generation prompt for this section."""
        structure = "\n".join(
            f"- {s.title}: {s.placeholder or ''}" for s in self.template.sections
        )
        guidelines = "\n".join(
            f"{i}. {rule}" for i, rule in enumerate(locale.writer_guidelines, start=1)
        )

        parts = [
            locale.writer_role,
            "",
            locale.writer_structure_label,
            structure,
            "",
            locale.writer_source_label,
            self.template.content,
            "",
            guidelines,
            "",
            f"{locale.writer_request_label} {self.prompt}",
        ]
        if self.context:
            parts.append(
                f"{locale.writer_context_label} "
                f"{json.dumps(self.context, ensure_ascii=False, indent=2, default=str)}"
            )
        parts.extend(["", locale.writer_target_label.format(title=self.section.title)])
        return "\n".join(parts)


@runtime_checkable
class SectionWriter(Protocol):
    async def write(self, request: SectionRequest) -> str:
        ...


# ---------------------------------------------------------------------------
# Deterministic writer
# ---------------------------------------------------------------------------

class PlaceholderSectionWriter:
    """Marks where generated prose goes without calling any model."""

    def __init__(self, locale: LocaleStrings) -> None:
        self.locale = locale

    async def write(self, request: SectionRequest) -> str:
        return self.locale.content_placeholder.format(
            prompt=request.prompt,
            title=request.section.title,
        )


# ---------------------------------------------------------------------------
# Ollama writer
# ---------------------------------------------------------------------------

class OllamaSectionWriter:
    """
    Section writer backed by Ollama's /api/generate endpoint.

    Limits concurrency to MAX_CONCURRENT simultaneous LLM calls.  Timeouts,
    connection errors, non-200 responses and empty output raise
    SynthesisError.
    """

    MAX_CONCURRENT: int = 2
    MAX_TOKENS: int = 1200
    LLM_TIMEOUT: float = float(settings.OLLAMA_TIMEOUT)

    def __init__(
        self,
        locale: LocaleStrings,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.locale = locale
        self.base_url = base_url or settings.OLLAMA_BASE_URL
        self.model = model or settings.OLLAMA_LLM_MODEL
        self.timeout = httpx.Timeout(self.LLM_TIMEOUT, connect=10.0)
        self._transport = transport
        self._semaphore = asyncio.Semaphore(self.MAX_CONCURRENT)

    async def write(self, request: SectionRequest) -> str:
        prompt = request.render_prompt(self.locale)
        text = (await self._call_llm(prompt)).strip()
        if not text:
            raise SynthesisError(
                f"LLM returned no content for section {request.section.title!r}"
            )
        return text

    async def check_health(self) -> bool:
        """Return True if Ollama answers /api/tags."""
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
            return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.warning("Ollama health check failed: %s", exc)
            return False

    async def _call_llm(self, prompt: str) -> str:
        """POST to Ollama /api/generate and return the response text."""
        async with self._semaphore:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    resp = await client.post(
                        f"{self.base_url}/api/generate",
                        json={
                            "model": self.model,
                            "prompt": prompt,
                            "stream": False,
                            "options": {
                                "num_predict": self.MAX_TOKENS,
                                "temperature": 0.3,
                            },
                        },
                    )
            except httpx.TimeoutException as exc:
                logger.error(
                    "_call_llm: request timed out after %.0f s", self.LLM_TIMEOUT
                )
                raise SynthesisError("LLM request timed out") from exc
            except httpx.HTTPError as exc:
                logger.error("_call_llm: connection error — %s", exc)
                raise SynthesisError(f"LLM connection error: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "_call_llm: Ollama returned HTTP %d: %s",
                resp.status_code,
                resp.text[:300],
            )
            raise SynthesisError(f"LLM returned HTTP {resp.status_code}")

        return resp.json().get("response", "")


def build_section_writer(locale: LocaleStrings, backend: Optional[str] = None) -> SectionWriter:
    """Instantiate the writer named by *backend* (defaults to REPORT_WRITER)."""
    name = (backend or settings.REPORT_WRITER).lower()
    if name == "template":
        return PlaceholderSectionWriter(locale)
    if name == "ollama":
        return OllamaSectionWriter(locale)
    raise ValueError(f"Unknown REPORT_WRITER {name!r}; expected 'template' or 'ollama'")
