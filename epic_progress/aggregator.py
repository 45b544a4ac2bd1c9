"""Recursive aggregation of sub-issue statuses below an Epic."""

from __future__ import annotations

import logging
from typing import List, Set

import requests

from .domain import CategoryCounts, IssueRef
from .github import GitHubError
from .refs import RefError

log = logging.getLogger(__name__)

LISTING_ERRORS = (
    requests.RequestException, GitHubError, RefError, ValueError, KeyError, TypeError, AttributeError,
)


class TreeAggregator:
    """Walk the sub-issue graph of an Epic and count statuses.

    The walk is depth first and pre-order. Every issue is visited at most
    once per :meth:`aggregate` call, which makes shared children and cycles
    safe. The Epic itself is not counted.
    """

    def __init__(self, client, resolver) -> None:
        self.client = client
        self.resolver = resolver

    def aggregate(self, root: IssueRef) -> CategoryCounts:
        seen: Set[IssueRef] = set()
        return self._visit(root, seen, is_root=True)

    def _children(self, ref: IssueRef) -> List[IssueRef]:
        try:
            return list(self.client.sub_issues(ref))
        except LISTING_ERRORS as exc:
            log.warning("Failed to fetch sub-issues for %s: %s", ref, exc)
            return []

    def _visit(self, ref: IssueRef, seen: Set[IssueRef], is_root: bool = False) -> CategoryCounts:
        if ref in seen:
            return CategoryCounts()
        seen.add(ref)

        counts = CategoryCounts()
        if not is_root:
            category = self.resolver.resolve(ref)
            if category is not None:
                counts = counts.incremented(category)

        for child in self._children(ref):
            counts = counts + self._visit(child, seen)
        return counts


__all__ = ["TreeAggregator"]
