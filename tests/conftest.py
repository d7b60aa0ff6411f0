"""
Shared fixtures for Stencil backend tests.

Each test gets a fresh ServiceContainer (empty registries, deterministic
section writer, OCR disabled) wired into the FastAPI app through a
dependency override, and a temporary upload directory.
"""
from __future__ import annotations

import io
from typing import AsyncGenerator, Iterable

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from docx import Document as DocxDocument
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.dependencies.services import ServiceContainer, build_services, get_services
from app.main import app


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point UPLOAD_DIR at a throwaway directory."""
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def services(upload_dir) -> ServiceContainer:
    return build_services(writer_backend="template", ocr_enabled=False)


@pytest.fixture
def override_services(services: ServiceContainer):
    app.dependency_overrides[get_services] = lambda: services
    yield services
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_services: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_docx(paragraphs: Iterable[str]) -> bytes:
    """Return DOCX bytes with one paragraph per entry."""
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def make_pdf(lines: Iterable[str]) -> bytes:
    """Return single-page PDF bytes with the given (Latin-only) lines."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "\n".join(lines), fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


SAMPLE_TEMPLATE_LINES = [
    "1. 목표",
    "달성할 목표는 매출 증가입니다.",
    "2. 결론",
    "요약하면 긍정적입니다.",
]

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
