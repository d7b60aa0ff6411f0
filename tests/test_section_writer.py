"""Tests for section writers."""
import json

import httpx
import pytest

from app.exceptions import SynthesisError
from app.models.domain import DocumentType, Section, SectionType, Template
from app.services.locales import EN, KO
from app.services.section_writer import (
    OllamaSectionWriter,
    PlaceholderSectionWriter,
    SectionRequest,
    build_section_writer,
)

TEMPLATE = Template(
    id="tpl-1",
    filename="plan.docx",
    type=DocumentType.DOCX,
    content="1. Goals\nGrow revenue.",
    sections=[Section("1. Goals", "Grow revenue.", 0, SectionType.CONTENT)],
)


def _request(**overrides) -> SectionRequest:
    fields = dict(template=TEMPLATE, section=TEMPLATE.sections[0], prompt="Q3 results")
    fields.update(overrides)
    return SectionRequest(**fields)


def test_render_prompt_contains_structure_request_and_target():
    prompt = _request(context={"region": "EU"}).render_prompt(EN)

    assert "- 1. Goals: Grow revenue." in prompt
    assert "User request: Q3 results" in prompt
    assert '"region": "EU"' in prompt
    assert prompt.endswith("Write only the body of this section: 1. Goals")


def test_render_prompt_omits_empty_context():
    assert "Additional context:" not in _request().render_prompt(EN)


@pytest.mark.asyncio
async def test_placeholder_writer_output():
    text = await PlaceholderSectionWriter(KO).write(_request())
    assert text == "[Q3 results와 관련된 1. Goals 내용이 여기에 작성됩니다.]"


def test_build_section_writer():
    assert isinstance(build_section_writer(EN, "template"), PlaceholderSectionWriter)
    assert isinstance(build_section_writer(EN, "OLLAMA"), OllamaSectionWriter)
    with pytest.raises(ValueError):
        build_section_writer(EN, "gpt")


# ---------------------------------------------------------------------------
# Ollama writer (mocked transport)
# ---------------------------------------------------------------------------

def _ollama(handler) -> OllamaSectionWriter:
    return OllamaSectionWriter(
        EN,
        base_url="http://ollama.test",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_ollama_writer_posts_rendered_prompt():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "  Revenue grew 12%.  "})

    text = await _ollama(handler).write(_request())

    assert text == "Revenue grew 12%."
    assert seen["path"] == "/api/generate"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["stream"] is False
    assert "User request: Q3 results" in seen["body"]["prompt"]


@pytest.mark.asyncio
async def test_ollama_writer_raises_on_http_error():
    writer = _ollama(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(SynthesisError, match="HTTP 500"):
        await writer.write(_request())


@pytest.mark.asyncio
async def test_ollama_writer_raises_on_empty_output():
    writer = _ollama(lambda request: httpx.Response(200, json={"response": "   "}))
    with pytest.raises(SynthesisError, match="no content"):
        await writer.write(_request())


@pytest.mark.asyncio
async def test_ollama_writer_raises_on_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SynthesisError, match="connection error"):
        await _ollama(handler).write(_request())


@pytest.mark.asyncio
async def test_ollama_health_check():
    healthy = _ollama(lambda request: httpx.Response(200, json={"models": []}))
    down = _ollama(lambda request: httpx.Response(503))

    assert await healthy.check_health() is True
    assert await down.check_health() is False
