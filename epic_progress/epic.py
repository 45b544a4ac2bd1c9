from __future__ import annotations

import logging
from typing import Optional, Union

from .aggregator import TreeAggregator
from .domain import IssueRef, ProgressResult, ProjectRef
from .progress import render
from .refs import parse_issue_ref, parse_project_ref
from .resolver import STATUS_FIELD, StatusResolver

log = logging.getLogger(__name__)


def build_resolver(
    client,
    board: Union[str, ProjectRef, None] = None,
    milestone: Optional[str] = None,
    status_field: str = STATUS_FIELD,
) -> StatusResolver:
    """Return a :class:`StatusResolver` with the board id resolved up front.

    Raises :class:`~epic_progress.refs.RefError` for a malformed board
    reference and :class:`~epic_progress.github.GitHubError` if the board
    cannot be found.
    """
    project_id = None
    if board:
        if isinstance(board, str):
            board = parse_project_ref(board)
        project_id = client.project_node_id(board)
    if milestone:
        log.info("Filtering issues by milestone: %r", milestone)
    return StatusResolver(client, project_id=project_id, milestone=milestone, status_field=status_field)


def compute_progress(
    root: Union[str, IssueRef],
    client,
    board: Union[str, ProjectRef, None] = None,
    milestone: Optional[str] = None,
    status_field: str = STATUS_FIELD,
) -> ProgressResult:
    """Compute the weighted progress of the Epic ``root``.

    ``root`` is an issue URL, ``owner/repo#number`` or an :class:`IssueRef`.
    ``board`` is the project board to read statuses from; without it the first
    board carrying ``status_field`` is used for each issue. ``milestone``
    restricts the count to issues in that exact milestone.
    """
    if isinstance(root, str):
        root = parse_issue_ref(root)
    resolver = build_resolver(client, board, milestone, status_field)
    counts = TreeAggregator(client, resolver).aggregate(root)
    log.info("Epic %s: %d issues counted", root, counts.total)
    return render(counts)


__all__ = ["build_resolver", "compute_progress"]
