"""
Heuristic section segmentation of extracted document text.

Turns the flat text of an uploaded template into an ordered list of
Sections.  Classification is line-local: each non-blank line is tested
against an ordered chain of named header predicates (first match wins), and
a two-state reducer decides what the line does to the open section:

  NoOpenSection ── header ──▶ OpenSection(new)
  NoOpenSection ── body   ──▶ NoOpenSection          (pre-header prose dropped)
  OpenSection   ── header ──▶ OpenSection(new)       emits the previous one
  OpenSection   ── body   ──▶ OpenSection(content)   first body line seeds
                                                     the placeholder

Text with no detected header yields a single default "whole document"
section, so the result is never empty.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from app.config import settings
from app.models.domain import Section, SectionType
from app.services.locales import KO, LocaleStrings, get_locale

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SegmenterConfig:
    """
    Tunables for header detection.

    Attributes:
        locale:            Bundle providing default titles/placeholders and
                           the default keyword set.
        keywords:          Structural keywords; ``None`` uses the locale's.
        max_header_length: Colon and keyword headers must be shorter than this.
        length_limits_all_keywords:
                           True  → the length limit applies to every keyword.
                           False → legacy precedence: only the first keyword
                                   is length limited, the rest match at any
                                   line length.
        sentence_terminators:
                           Keyword lines ending with one of these read as
                           prose, not headers ("목표는 매출 증가입니다.").
    """

    locale: LocaleStrings = KO
    keywords: Optional[Tuple[str, ...]] = None
    max_header_length: int = 100
    length_limits_all_keywords: bool = True
    sentence_terminators: Tuple[str, ...] = (".", "!", "?", "。")

    @property
    def header_keywords(self) -> Tuple[str, ...]:
        raw = self.keywords if self.keywords is not None else self.locale.header_keywords
        return tuple(k.casefold() for k in raw if k.strip())

    @classmethod
    def from_settings(cls) -> "SegmenterConfig":
        keywords = settings.SECTION_KEYWORDS
        return cls(
            locale=get_locale(settings.REPORT_LOCALE),
            keywords=tuple(keywords) if keywords is not None else None,
            max_header_length=settings.SECTION_HEADER_MAX_LENGTH,
            length_limits_all_keywords=settings.SECTION_KEYWORD_LENGTH_ALL,
        )


# ---------------------------------------------------------------------------
# Header predicates
# ---------------------------------------------------------------------------

HeaderPredicate = Callable[[str, SegmenterConfig], bool]

_NUMBERED_RE = re.compile(r"^\d+\.\s+.+")          # 1. Header
_LETTERED_RE = re.compile(r"^[A-Z가-힣]\.\s+.+")    # A. Header / 가. Header
_MARKDOWN_RE = re.compile(r"^#{1,6}\s+.+")         # ## Header
_BRACKETED_RE = re.compile(r"^(?:\[.+\]|【.+】)$")   # [Header] / 【Header】


def _is_numbered(line: str, config: SegmenterConfig) -> bool:
    return bool(_NUMBERED_RE.match(line))


def _is_lettered(line: str, config: SegmenterConfig) -> bool:
    return bool(_LETTERED_RE.match(line))


def _is_markdown(line: str, config: SegmenterConfig) -> bool:
    return bool(_MARKDOWN_RE.match(line))


def _is_colon_terminated(line: str, config: SegmenterConfig) -> bool:
    return len(line) < config.max_header_length and line.endswith(":")


def _is_bracketed(line: str, config: SegmenterConfig) -> bool:
    return bool(_BRACKETED_RE.match(line))


def _has_keyword(line: str, config: SegmenterConfig) -> bool:
    keywords = config.header_keywords
    if not keywords:
        return False

    if line.endswith(config.sentence_terminators):
        return False

    folded = line.casefold()
    is_short = len(line) < config.max_header_length

    if config.length_limits_all_keywords:
        return is_short and any(k in folded for k in keywords)

    first, rest = keywords[0], keywords[1:]
    return (is_short and first in folded) or any(k in folded for k in rest)


# Evaluated in order; the first match names the header kind.
HEADER_PREDICATES: Tuple[Tuple[str, HeaderPredicate], ...] = (
    ("numbered", _is_numbered),
    ("lettered", _is_lettered),
    ("markdown", _is_markdown),
    ("colon", _is_colon_terminated),
    ("bracketed", _is_bracketed),
    ("keyword", _has_keyword),
)


def classify_header(
    line: str,
    config: SegmenterConfig,
    predicates: Sequence[Tuple[str, HeaderPredicate]] = HEADER_PREDICATES,
) -> Optional[str]:
    """Return the name of the first predicate matching *line*, or None."""
    for name, predicate in predicates:
        if predicate(line, config):
            return name
    return None


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoOpenSection:
    next_order: int = 0


@dataclass(frozen=True)
class OpenSection:
    section: Section
    seeded: bool          # placeholder already replaced by a body line
    next_order: int


SegmenterState = Union[NoOpenSection, OpenSection]


def step(
    state: SegmenterState,
    line: str,
    config: SegmenterConfig,
) -> Tuple[SegmenterState, Optional[Section]]:
    """
    Advance the segmenter by one trimmed line.

    Returns the new state and the section closed by this line, if any.
    Blank lines leave the state untouched.
    """
    if not line:
        return state, None

    if classify_header(line, config) is not None:
        closed = state.section if isinstance(state, OpenSection) else None
        opened = Section(
            title=line,
            placeholder=config.locale.section_placeholder.format(title=line),
            order=state.next_order,
            type=SectionType.HEADER,
        )
        return OpenSection(section=opened, seeded=False, next_order=state.next_order + 1), closed

    if isinstance(state, NoOpenSection):
        return state, None

    if state.seeded:
        return state, None

    promoted = replace(state.section, type=SectionType.CONTENT, placeholder=line)
    return OpenSection(section=promoted, seeded=True, next_order=state.next_order), None


def finish(state: SegmenterState) -> Optional[Section]:
    """Return the section still open at end of input."""
    return state.section if isinstance(state, OpenSection) else None


def _split_lines(text: str) -> List[str]:
    """Non-blank, trimmed lines in document order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# SectionSegmenter
# ---------------------------------------------------------------------------

class SectionSegmenter:
    """Segments plain text into an ordered, never-empty list of Sections."""

    def __init__(self, config: Optional[SegmenterConfig] = None) -> None:
        self.config = config or SegmenterConfig()

    def segment(self, text: str) -> List[Section]:
        sections: List[Section] = []
        state: SegmenterState = NoOpenSection()

        for line in _split_lines(text or ""):
            state, closed = step(state, line, self.config)
            if closed is not None:
                sections.append(closed)

        last = finish(state)
        if last is not None:
            sections.append(last)

        if not sections:
            logger.info("No headers detected — using a single default section")
            sections.append(self.default_section())
        else:
            logger.info(f"Detected {len(sections)} sections")

        return sections

    def default_section(self) -> Section:
        locale = self.config.locale
        return Section(
            title=locale.default_section_title,
            placeholder=locale.default_section_placeholder,
            order=0,
            type=SectionType.CONTENT,
        )
