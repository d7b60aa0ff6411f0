"""Tests for the template/report registries and the report lifecycle."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.exceptions import ReportStateError
from app.models.domain import (
    DocumentType,
    Report,
    ReportStatus,
    Section,
    SectionType,
    Template,
)
from app.services.registry import ReportRegistry, TemplateRegistry
from app.services.storage import InMemoryStore, KeyValueStore


def _template(filename: str = "plan.docx", sections=None) -> Template:
    if sections is None:
        sections = [Section(title="1. Intro", placeholder="body", order=0, type=SectionType.CONTENT)]
    return Template(
        filename=filename,
        type=DocumentType.DOCX,
        content="1. Intro\nbody",
        sections=sections,
    )


def _report(report_id: str, status: ReportStatus) -> Report:
    return Report(id=report_id, title="t", template=_template(), status=status)


# ---------------------------------------------------------------------------
# Template registry
# ---------------------------------------------------------------------------

def test_put_assigns_id_and_get_returns_registered_copy():
    registry = TemplateRegistry()
    draft = _template()

    template_id = registry.put(draft)
    stored = registry.get(template_id)

    assert template_id
    assert stored.id == template_id
    assert stored.sections == draft.sections
    assert draft.id is None


def test_get_unknown_template_returns_none():
    assert TemplateRegistry().get("missing") is None


def test_template_without_sections_is_rejected():
    registry = TemplateRegistry()
    with pytest.raises(ValueError, match="no sections"):
        registry.put(_template(sections=[]))
    assert len(registry) == 0


def test_template_with_duplicate_orders_is_rejected():
    registry = TemplateRegistry()
    sections = [
        Section(title="A", placeholder=None, order=0),
        Section(title="B", placeholder=None, order=0),
    ]
    with pytest.raises(ValueError, match="duplicate section orders"):
        registry.put(_template(sections=sections))
    assert len(registry) == 0


def test_template_with_negative_order_is_rejected():
    registry = TemplateRegistry()
    with pytest.raises(ValueError, match="negative section order"):
        registry.put(_template(sections=[Section(title="A", placeholder=None, order=-1)]))
    assert registry.list() == []


def test_out_of_sequence_unique_orders_are_accepted():
    registry = TemplateRegistry()
    sections = [
        Section(title="B", placeholder=None, order=5),
        Section(title="A", placeholder=None, order=2),
    ]
    template_id = registry.put(_template(sections=sections))
    assert [s.order for s in registry.get(template_id).sections] == [5, 2]


def test_list_preserves_insertion_order():
    registry = TemplateRegistry()
    ids = [registry.put(_template(f"t{i}.docx")) for i in range(5)]

    assert [t.id for t in registry.list()] == ids
    assert [t.filename for t in registry.list()] == [f"t{i}.docx" for i in range(5)]


def test_id_collision_is_retried():
    ids = iter(["a", "a", "b"])
    registry = TemplateRegistry(id_factory=lambda: next(ids))

    assert registry.put(_template()) == "a"
    assert registry.put(_template()) == "b"
    assert len(registry) == 2


def test_concurrent_puts_yield_unique_ids():
    registry = TemplateRegistry()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda i: registry.put(_template(f"t{i}.docx")), range(200)))

    assert len(set(ids)) == 200
    assert len(registry) == 200


def test_sections_are_snapshotted_at_construction():
    sections = [Section(title="1. A", placeholder=None, order=0)]
    template = _template(sections=sections)
    sections.append(Section(title="2. B", placeholder=None, order=1))

    assert len(template.sections) == 1


def test_in_memory_store_satisfies_protocol():
    store = InMemoryStore()
    assert isinstance(store, KeyValueStore)
    assert store.put_new("k", 1) is True
    assert store.put_new("k", 2) is False
    assert store.get("k") == 1


# ---------------------------------------------------------------------------
# Report registry
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [ReportStatus.PROCESSING, ReportStatus.COMPLETED])
def test_report_registry_accepts_live_reports(status):
    registry = ReportRegistry()
    assert registry.put(_report("r1", status)) == "r1"
    assert registry.get("r1").status is status


@pytest.mark.parametrize("status", [ReportStatus.PENDING, ReportStatus.FAILED])
def test_report_registry_rejects_pending_and_failed(status):
    registry = ReportRegistry()
    with pytest.raises(ValueError):
        registry.put(_report("r1", status))
    assert registry.get("r1") is None


def test_report_registry_rejects_duplicate_id():
    registry = ReportRegistry()
    registry.put(_report("r1", ReportStatus.COMPLETED))
    with pytest.raises(ValueError, match="already registered"):
        registry.put(_report("r1", ReportStatus.COMPLETED))


# ---------------------------------------------------------------------------
# Report lifecycle
# ---------------------------------------------------------------------------

def test_report_happy_path():
    report = _report("r1", ReportStatus.PENDING)

    report.start()
    assert report.status is ReportStatus.PROCESSING
    assert not report.is_terminal

    report.complete("# done")
    assert report.status is ReportStatus.COMPLETED
    assert report.content == "# done"
    assert report.completed_at is not None
    assert report.is_terminal


def test_report_can_fail_from_processing():
    report = _report("r1", ReportStatus.PROCESSING)
    report.fail()
    assert report.status is ReportStatus.FAILED


def test_complete_requires_processing():
    report = _report("r1", ReportStatus.PENDING)
    with pytest.raises(ReportStateError):
        report.complete("too early")


@pytest.mark.parametrize("status", [ReportStatus.COMPLETED, ReportStatus.FAILED])
def test_terminal_reports_do_not_move(status):
    report = _report("r1", status)
    with pytest.raises(ReportStateError):
        report.start()
    with pytest.raises(ReportStateError):
        report.fail()
