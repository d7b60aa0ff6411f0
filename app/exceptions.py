"""Exception hierarchy for the Stencil backend."""


class StencilError(Exception):
    """Base exception for all Stencil errors."""


class UnsupportedFormat(StencilError, ValueError):
    """Raised when an upload's extension is not one of the supported types."""


class CorruptDocument(StencilError, RuntimeError):
    """Raised when a PDF/DOCX cannot be opened or parsed."""


class TemplateNotFound(StencilError, LookupError):
    """Raised when generation is requested against an unknown template id."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class SynthesisError(StencilError):
    """Raised when report content cannot be assembled."""


class ReportStateError(StencilError):
    """Raised on an illegal report status transition."""
