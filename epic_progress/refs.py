from __future__ import annotations

import re

from .domain import IssueRef, ProjectRef


class RefError(ValueError):
    """Raised when an issue or project reference cannot be parsed."""


ISSUE_URL = re.compile(r"github\.com/([^/\s]+)/([^/\s]+)/issues/(\d+)")
ISSUE_SHORT = re.compile(r"^([\w.-]+)/([\w.-]+)#(\d+)$")
PROJECT_URL = re.compile(r"github\.com/(orgs|users)/([^/\s]+)/projects/(\d+)")
PROJECT_NODE_ID = re.compile(r"^PVT_\w+$")
REPO_API_URL = re.compile(r"/repos/([^/\s]+)/([^/\s]+)/?$")


def parse_issue_ref(text: str) -> IssueRef:
    """Parse an issue URL or ``owner/repo#number`` into an :class:`IssueRef`."""
    text = (text or "").strip()
    match = ISSUE_URL.search(text) or ISSUE_SHORT.match(text)
    if not match:
        raise RefError(f"Invalid GitHub issue reference: {text!r}")
    owner, repo, number = match.groups()
    return IssueRef(owner=owner, repo=repo, number=int(number))


def parse_project_ref(text: str) -> ProjectRef:
    """Parse a project URL or a ``PVT_`` node id into a :class:`ProjectRef`.

    Both organisation (``/orgs/<org>/projects/<n>``) and user
    (``/users/<login>/projects/<n>``) boards are accepted.
    """
    text = (text or "").strip()
    if PROJECT_NODE_ID.match(text):
        return ProjectRef(node_id=text)
    match = PROJECT_URL.search(text)
    if not match:
        raise RefError(f"Invalid GitHub project reference: {text!r}")
    kind, owner, number = match.groups()
    owner_type = "organization" if kind == "orgs" else "user"
    return ProjectRef(owner=owner, number=int(number), owner_type=owner_type)


def repo_from_api_url(url: str) -> tuple[str, str]:
    """Return ``(owner, repo)`` from a REST ``repository_url``."""
    match = REPO_API_URL.search(url or "")
    if not match:
        raise RefError(f"Invalid GitHub repository URL: {url!r}")
    return match.group(1), match.group(2)


__all__ = ["RefError", "parse_issue_ref", "parse_project_ref", "repo_from_api_url"]
