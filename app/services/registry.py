"""
Template and report registries.

Both are thin keyed maps over an injected ``KeyValueStore``.  Ids are
random UUID4 hex strings, so concurrent allocation needs no counter; the
store's ``put_new`` still refuses to overwrite in the (practically
impossible) event of a collision.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, List, Optional

from app.models.domain import Report, ReportStatus, Template
from app.services.storage import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


class TemplateRegistry:
    """Owns registered templates; a stored template is never mutated."""

    def __init__(
        self,
        store: Optional[KeyValueStore[Template]] = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._store: KeyValueStore[Template] = store if store is not None else InMemoryStore()
        self._id_factory = id_factory

    def put(self, template: Template) -> str:
        """
        Register *template* under a fresh id and return the id.

        Raises:
            ValueError: The template has no sections, or its section orders
                        are negative or repeated.
        """
        if not template.sections:
            raise ValueError(
                f"Template {template.filename!r} has no sections; "
                "segmentation must always yield at least one."
            )

        orders = [section.order for section in template.sections]
        if any(order < 0 for order in orders):
            raise ValueError(
                f"Template {template.filename!r} has a negative section order: {orders}"
            )
        if len(set(orders)) != len(orders):
            raise ValueError(
                f"Template {template.filename!r} has duplicate section orders: {orders}"
            )

        while True:
            template_id = self._id_factory()
            if self._store.put_new(template_id, replace(template, id=template_id)):
                break
            logger.warning("Template id collision on %s — retrying", template_id)

        logger.info(
            "Registered template id=%s (%s, %d sections)",
            template_id,
            template.filename,
            len(template.sections),
        )
        return template_id

    def get(self, template_id: str) -> Optional[Template]:
        return self._store.get(template_id)

    def list(self) -> List[Template]:
        return self._store.values()

    def __len__(self) -> int:
        return len(self._store)


class ReportRegistry:
    """Holds reports that reached ``processing`` or ``completed``."""

    _COMMITTABLE = frozenset({ReportStatus.PROCESSING, ReportStatus.COMPLETED})

    def __init__(self, store: Optional[KeyValueStore[Report]] = None) -> None:
        self._store: KeyValueStore[Report] = store if store is not None else InMemoryStore()

    def put(self, report: Report) -> str:
        """
        Commit *report* under its own id.

        Raises:
            ValueError: The report is pending/failed, or its id is taken.
        """
        if report.status not in self._COMMITTABLE:
            raise ValueError(
                f"Report {report.id} has status {report.status.value}; "
                "only processing or completed reports are stored."
            )
        if not self._store.put_new(report.id, report):
            raise ValueError(f"Report {report.id} is already registered.")

        logger.info("Committed report id=%s (%s)", report.id, report.status.value)
        return report.id

    def get(self, report_id: str) -> Optional[Report]:
        return self._store.get(report_id)

    def list(self) -> List[Report]:
        return self._store.values()

    def __len__(self) -> int:
        return len(self._store)
