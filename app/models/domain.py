"""
In-memory domain models: sections, templates and reports.

Templates and sections are frozen values; a report is the only mutable
record and moves through its status lifecycle via ``start``/``complete``/
``fail``.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from app.exceptions import ReportStateError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SectionType(str, enum.Enum):
    """Structural role of a template section."""

    HEADER = "header"
    CONTENT = "content"
    TABLE = "table"
    LIST = "list"
    IMAGE = "image"


class DocumentType(str, enum.Enum):
    """Supported upload formats."""

    PDF = "pdf"
    DOCX = "docx"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_TERMINAL_STATUSES = frozenset({ReportStatus.COMPLETED, ReportStatus.FAILED})


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Section:
    """One structural unit of a template."""

    title: str
    placeholder: Optional[str]
    order: int
    type: SectionType = SectionType.HEADER


@dataclass(frozen=True)
class Template:
    """
    Extracted text of an uploaded document plus its segmented structure.

    ``id`` stays ``None`` until the TemplateRegistry assigns one.  Any
    sequence passed as ``sections`` is copied into a tuple so later
    caller-side mutation cannot leak in.
    """

    filename: str
    type: DocumentType
    content: str
    sections: Tuple[Section, ...]
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not isinstance(self.sections, tuple):
            object.__setattr__(self, "sections", tuple(self.sections))
        if not isinstance(self.type, DocumentType):
            object.__setattr__(self, "type", DocumentType(self.type))


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class Report:
    """One synthesis attempt bound to a template snapshot."""

    id: str
    title: str
    template: Template
    content: str = ""
    status: ReportStatus = ReportStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in _TERMINAL_STATUSES

    def start(self) -> None:
        """pending → processing."""
        self._transition(ReportStatus.PROCESSING, allowed_from={ReportStatus.PENDING})

    def complete(self, content: str, completed_at: Optional[datetime] = None) -> None:
        """processing → completed; sets content and completion time."""
        self._transition(ReportStatus.COMPLETED, allowed_from={ReportStatus.PROCESSING})
        self.content = content
        self.completed_at = completed_at or utcnow()

    def fail(self) -> None:
        """Move a non-terminal report to failed."""
        self._transition(
            ReportStatus.FAILED,
            allowed_from={ReportStatus.PENDING, ReportStatus.PROCESSING},
        )

    def _transition(self, target: ReportStatus, allowed_from: set) -> None:
        if self.status not in allowed_from:
            raise ReportStateError(
                f"Report {self.id} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target
