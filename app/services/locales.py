"""
Locale bundles for segmentation defaults and report text.

Every user-visible string the segmenter and synthesizer emit lives here, so
adding a language means adding one bundle.  Format strings take named
fields only (``{title}``, ``{prompt}``, ``{filename}``, ``{timestamp}``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class LocaleStrings:
    code: str

    # Segmentation
    header_keywords: Tuple[str, ...]
    default_section_title: str
    default_section_placeholder: str
    section_placeholder: str            # "{title}"

    # Report body
    report_heading: str                 # "{filename}"
    header_detail_heading: str          # "{title}"
    content_placeholder: str            # "{prompt}", "{title}"
    table_columns: Tuple[str, str, str]
    table_rows: Tuple[Tuple[str, str, str], ...]
    list_items: Tuple[str, ...]
    footer_generated: str               # "{timestamp}"
    footer_template: str                # "{filename}"

    # Per-section generation prompt
    writer_role: str
    writer_structure_label: str
    writer_source_label: str
    writer_guidelines: Tuple[str, ...]
    writer_request_label: str
    writer_context_label: str
    writer_target_label: str            # "{title}"


KO = LocaleStrings(
    code="ko",
    header_keywords=("목표", "개요", "배경", "결론", "요약"),
    default_section_title="전체 문서",
    default_section_placeholder="[보고서 내용을 입력하세요]",
    section_placeholder="[{title} 내용을 입력하세요]",
    report_heading="# {filename}에 기반한 보고서",
    header_detail_heading="### {title} 상세",
    content_placeholder="[{prompt}와 관련된 {title} 내용이 여기에 작성됩니다.]",
    table_columns=("항목", "내용", "비고"),
    table_rows=(("예시1", "데이터1", "설명1"), ("예시2", "데이터2", "설명2")),
    list_items=("첫 번째 항목", "두 번째 항목", "세 번째 항목"),
    footer_generated="**보고서 생성 완료**: {timestamp}",
    footer_template="**기반 템플릿**: {filename}",
    writer_role=(
        "당신은 전문적인 비즈니스 보고서 작성자입니다.\n"
        "주어진 템플릿 구조에 맞춰 사용자의 요청에 따라 보고서를 작성해주세요."
    ),
    writer_structure_label="템플릿 구조:",
    writer_source_label="원본 템플릿 내용:",
    writer_guidelines=(
        "각 섹션별로 상세하고 전문적인 내용을 작성하세요",
        "비즈니스 문서에 적합한 격식 있는 언어를 사용하세요",
        "구체적인 데이터나 예시를 포함하세요",
        "마크다운 형식으로 작성하세요",
        "각 섹션은 명확하게 구분되어야 합니다",
    ),
    writer_request_label="사용자 요청:",
    writer_context_label="추가 컨텍스트:",
    writer_target_label="다음 섹션의 본문만 작성하세요: {title}",
)

EN = LocaleStrings(
    code="en",
    header_keywords=("objective", "overview", "background", "conclusion", "summary"),
    default_section_title="Full Document",
    default_section_placeholder="[Enter report content]",
    section_placeholder="[{title} content here]",
    report_heading="# Report based on {filename}",
    header_detail_heading="### {title} Details",
    content_placeholder="[{title} content related to {prompt} will be written here.]",
    table_columns=("Item", "Content", "Note"),
    table_rows=(
        ("Example 1", "Data 1", "Description 1"),
        ("Example 2", "Data 2", "Description 2"),
    ),
    list_items=("First item", "Second item", "Third item"),
    footer_generated="**Report generated**: {timestamp}",
    footer_template="**Source template**: {filename}",
    writer_role=(
        "You are a professional business report writer.\n"
        "Write the report following the given template structure and the user's request."
    ),
    writer_structure_label="Template structure:",
    writer_source_label="Original template content:",
    writer_guidelines=(
        "Write detailed, professional content for each section",
        "Use formal language appropriate for business documents",
        "Include concrete data or examples",
        "Write in Markdown",
        "Keep every section clearly separated",
    ),
    writer_request_label="User request:",
    writer_context_label="Additional context:",
    writer_target_label="Write only the body of this section: {title}",
)

LOCALES: Dict[str, LocaleStrings] = {bundle.code: bundle for bundle in (KO, EN)}


def get_locale(code: str) -> LocaleStrings:
    """Return the bundle for *code*; raises ValueError for unknown locales."""
    try:
        return LOCALES[code.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown locale {code!r}. Available: {', '.join(sorted(LOCALES))}"
        ) from None
