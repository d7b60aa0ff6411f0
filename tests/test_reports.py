"""Tests for report generation and lookup over HTTP."""
import io

import pytest
from httpx import AsyncClient

from app.models.domain import DocumentType, Section, Template
from tests.conftest import DOCX_MIME, SAMPLE_TEMPLATE_LINES, make_docx


async def _upload_template(client: AsyncClient) -> str:
    resp = await client.post(
        "/api/templates/upload",
        files={"file": ("plan.docx", io.BytesIO(make_docx(SAMPLE_TEMPLATE_LINES)), DOCX_MIME)},
    )
    assert resp.status_code == 201
    return resp.json()["template_id"]


async def _generate(client: AsyncClient, template_id: str, **overrides):
    payload = {"template_id": template_id, "title": "Q2 Review", "prompt": "매출 분석"}
    payload.update(overrides)
    return await client.post("/api/reports/generate", json=payload)


@pytest.mark.asyncio
async def test_generate_report(client: AsyncClient):
    template_id = await _upload_template(client)

    resp = await _generate(client, template_id, context={"quarter": "Q2"})

    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "completed"
    assert data["report_id"]
    assert data["error"] is None
    content = data["content"]
    assert content.startswith("# plan.docx에 기반한 보고서")
    assert "## 1. 목표" in content
    assert "## 2. 결론" in content
    assert "**기반 템플릿**: plan.docx" in content


@pytest.mark.asyncio
async def test_generated_report_is_listed_and_readable(client: AsyncClient):
    template_id = await _upload_template(client)
    report_id = (await _generate(client, template_id)).json()["report_id"]

    listed = (await client.get("/api/reports/")).json()
    assert [r["id"] for r in listed] == [report_id]

    resp = await client.get(f"/api/reports/{report_id}")
    assert resp.status_code == 200
    report = resp.json()
    assert report["title"] == "Q2 Review"
    assert report["status"] == "completed"
    assert report["completed_at"] is not None
    assert report["template"]["id"] == template_id


@pytest.mark.asyncio
async def test_generate_unknown_template(client: AsyncClient, services):
    resp = await _generate(client, "missing-template")

    assert resp.status_code == 404
    assert "Template not found" in resp.json()["detail"]
    assert len(services.reports) == 0


@pytest.mark.asyncio
async def test_failed_synthesis_stores_nothing(client: AsyncClient, services):
    template_id = services.templates.put(
        Template(
            filename="odd.docx",
            type=DocumentType.DOCX,
            content="",
            sections=[Section("Chart", None, 0, "diagram")],
        )
    )

    resp = await _generate(client, template_id)

    assert resp.status_code == 500
    assert "Report generation failed" in resp.json()["detail"]
    assert len(services.reports) == 0


@pytest.mark.asyncio
async def test_generate_validates_payload(client: AsyncClient):
    resp = await client.post("/api/reports/generate", json={"template_id": "x"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_unknown_report_returns_null(client: AsyncClient):
    resp = await client.get("/api/reports/nope")
    assert resp.status_code == 200
    assert resp.json() is None
