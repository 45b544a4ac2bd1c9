"""Status lookup for single issues.

The resolver reads the status field an issue has on a Projects board and
maps it onto a :class:`~epic_progress.domain.StatusCategory`. Lookups never
raise: any transport problem is logged and the issue counts as
``unstarted`` so that the Epic total stays computable.

``resolve`` returns ``None`` for issues excluded by the milestone filter.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from .domain import IssueRef, StatusCategory
from .github import GitHubError, IssueMetadata

log = logging.getLogger(__name__)

STATUS_FIELD = "Status"

STATUS_NAMES: Dict[str, StatusCategory] = {
    "done": StatusCategory.DONE,
    "code review": StatusCategory.REVIEW,
    "in progress": StatusCategory.PROGRESS,
}

# KeyError, TypeError and AttributeError come from payloads of an unexpected shape
LOOKUP_ERRORS = (
    requests.RequestException, GitHubError, ValueError, KeyError, TypeError, AttributeError,
)


def normalize_status(status: Optional[str]) -> StatusCategory:
    """Map a board status name onto a category, case-insensitively."""
    if not status:
        return StatusCategory.UNSTARTED
    return STATUS_NAMES.get(status.lower(), StatusCategory.UNSTARTED)


class StatusResolver:
    """Classify issues against one board and an optional milestone."""

    def __init__(
        self,
        client,
        project_id: Optional[str] = None,
        milestone: Optional[str] = None,
        status_field: str = STATUS_FIELD,
    ) -> None:
        self.client = client
        self.project_id = project_id
        self.milestone = milestone or None
        self.status_field = status_field

    def _fetch(self, ref: IssueRef) -> Optional[IssueMetadata]:
        node_id = self.client.issue_node_id(ref)
        return self.client.issue_metadata(node_id)

    def _board_values(self, ref: IssueRef, meta: IssueMetadata) -> Optional[Dict[str, str]]:
        if self.project_id:
            values = meta.projects.get(self.project_id)
            if values is None:
                log.warning("Issue %s is not in project %s", ref, self.project_id)
            return values
        for values in meta.projects.values():
            if self.status_field in values:
                return values
        log.warning("Issue %s has no %r on any project", ref, self.status_field)
        return None

    def resolve(self, ref: IssueRef) -> Optional[StatusCategory]:
        try:
            meta = self._fetch(ref)
        except LOOKUP_ERRORS as exc:
            log.warning("Could not fetch status for issue %s: %s", ref, exc)
            return StatusCategory.UNSTARTED
        if meta is None:
            log.warning("Could not fetch node for issue %s", ref)
            return StatusCategory.UNSTARTED

        if self.milestone and meta.milestone != self.milestone:
            log.warning(
                "Skipping issue %s: not in milestone %r (found: %r)",
                ref, self.milestone, meta.milestone or "none",
            )
            return None

        values = self._board_values(ref, meta)
        raw = (values or {}).get(self.status_field)
        category = normalize_status(raw.strip() if raw else None)
        log.info("Issue %s status: %s", ref, category.value)
        return category


__all__ = ["STATUS_FIELD", "StatusResolver", "normalize_status"]
