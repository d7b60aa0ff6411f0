"""
Template ingestion: staged upload → extracted text → sections → registry.

The staged file is always removed, whether ingestion succeeds or fails, and
a template is registered only after extraction and segmentation succeed.
"""
from __future__ import annotations

import logging
from pathlib import Path

import aiofiles

from app.models.domain import Template
from app.services.document_parser import DocumentTextExtractor, resolve_document_type
from app.services.registry import TemplateRegistry
from app.services.segmenter import SectionSegmenter
from app.utils.helpers import safe_remove

logger = logging.getLogger(__name__)


class TemplateIngestionService:
    """Turns an uploaded document into a registered Template."""

    def __init__(
        self,
        extractor: DocumentTextExtractor,
        segmenter: SectionSegmenter,
        registry: TemplateRegistry,
    ) -> None:
        self.extractor = extractor
        self.segmenter = segmenter
        self.registry = registry

    async def ingest(self, staged_path: str, filename: str) -> Template:
        """
        Register a template from the file staged at *staged_path*.

        Args:
            staged_path: Temporary file written by the upload handler.
            filename:    Original client filename; its extension selects the parser.

        Returns:
            The registered Template (with its id).

        Raises:
            UnsupportedFormat: Extension is not .pdf/.docx.
            CorruptDocument:   The parser could not read the file.
        """
        try:
            doc_type = resolve_document_type(Path(filename).suffix)

            async with aiofiles.open(staged_path, "rb") as f:
                data = await f.read()

            text = await self.extractor.extract(data, doc_type.value)
            if not text.strip():
                logger.warning(f"{filename!r} contains no extractable text")

            template = Template(
                filename=filename,
                type=doc_type,
                content=text,
                sections=self.segmenter.segment(text),
            )
            template_id = self.registry.put(template)
            return self.registry.get(template_id)
        finally:
            safe_remove(staged_path)
