"""Thin GitHub REST/GraphQL client used to read sub-issues and board status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .domain import IssueRef, ProjectRef
from .refs import repo_from_api_url

API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

log = logging.getLogger(__name__)


class GitHubError(RuntimeError):
    """Raised when GitHub answers with an error or an unexpected payload."""


ISSUE_ID_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      id
    }
  }
}
"""

ISSUE_METADATA_QUERY = """
query($issueId: ID!) {
  node(id: $issueId) {
    ... on Issue {
      milestone { title }
      projectItems(first: 30) {
        nodes {
          project { id }
          fieldValues(first: 20) {
            nodes {
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field { ... on ProjectV2FieldCommon { name } }
              }
            }
          }
        }
      }
    }
  }
}
"""

PROJECT_ID_QUERY = """
query($login: String!, $number: Int!) {
  %s(login: $login) {
    projectV2(number: $number) {
      id
      title
    }
  }
}
"""


@dataclass
class IssueMetadata:
    """Milestone and board field values of a single issue.

    ``projects`` maps a project node id to the single-select field values
    (field name -> option name) the issue has on that board, in the order
    GitHub lists them.
    """

    milestone: Optional[str] = None
    projects: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_node(cls, node: dict) -> 'IssueMetadata':
        milestone = (node.get("milestone") or {}).get("title")
        projects: Dict[str, Dict[str, str]] = {}
        for item in (node.get("projectItems") or {}).get("nodes") or []:
            project_id = ((item or {}).get("project") or {}).get("id")
            if not project_id:
                continue
            values: Dict[str, str] = {}
            for fv in (item.get("fieldValues") or {}).get("nodes") or []:
                name = ((fv or {}).get("field") or {}).get("name")
                if name and isinstance(fv.get("name"), str):
                    values[name] = fv["name"]
            projects[project_id] = values
        return cls(milestone=milestone, projects=projects)


class GitHubClient:
    """Small wrapper around a :class:`requests.Session` for the GitHub API."""

    def __init__(
        self,
        token: str,
        api_url: str = API_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        })

    def graphql(self, query: str, variables: Optional[dict] = None) -> Dict[str, Any]:
        """Run a GraphQL query and return its ``data`` member."""
        resp = self.session.post(
            f"{self.api_url}/graphql",
            json={"query": query, "variables": variables or {}},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise GitHubError(f"Unexpected GraphQL response: {payload!r}")
        errors = payload.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = "; ".join(
                e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors
            )
            raise GitHubError(f"GraphQL error: {messages}")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise GitHubError(f"Unexpected GraphQL data: {data!r}")
        return data

    def sub_issues(self, ref: IssueRef) -> List[IssueRef]:
        """Return the direct sub-issues of ``ref`` in listing order.

        Sub-issues may live in another repository; the ``repository_url`` of
        each entry decides where it is looked up.
        """
        url: Optional[str] = (
            f"{self.api_url}/repos/{ref.owner}/{ref.repo}/issues/{ref.number}/sub_issues"
        )
        params: Optional[dict] = {"per_page": 100}
        children: List[IssueRef] = []
        while url:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            entries = resp.json() or []
            if not isinstance(entries, list):
                raise GitHubError(f"Unexpected sub-issue listing for {ref}: {entries!r}")
            for entry in entries:
                if not isinstance(entry, dict) or not isinstance(entry.get("number"), int):
                    raise GitHubError(f"Sub-issue of {ref} without a number: {entry!r}")
                owner, repo = ref.owner, ref.repo
                if entry.get("repository_url"):
                    owner, repo = repo_from_api_url(entry["repository_url"])
                children.append(IssueRef(owner=owner, repo=repo, number=entry["number"]))
            url = resp.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None
        log.debug("Issue %s has %d sub-issues", ref, len(children))
        return children

    def issue_node_id(self, ref: IssueRef) -> str:
        data = self.graphql(
            ISSUE_ID_QUERY,
            {"owner": ref.owner, "repo": ref.repo, "number": ref.number},
        )
        issue = (data.get("repository") or {}).get("issue") or {}
        if not issue.get("id"):
            raise GitHubError(f"Issue {ref} not found")
        return issue["id"]

    def issue_metadata(self, node_id: str) -> Optional[IssueMetadata]:
        """Return milestone and board values for an issue node, if it exists."""
        data = self.graphql(ISSUE_METADATA_QUERY, {"issueId": node_id})
        node = data.get("node")
        if not node:
            return None
        return IssueMetadata.from_node(node)

    def project_node_id(self, project: ProjectRef) -> str:
        """Resolve ``project`` to the node id used by ``projectItems``."""
        if project.node_id:
            return project.node_id
        data = self.graphql(
            PROJECT_ID_QUERY % project.owner_type,
            {"login": project.owner, "number": project.number},
        )
        board = (data.get(project.owner_type) or {}).get("projectV2") or {}
        if not board.get("id"):
            raise GitHubError(f"Project {project} not found")
        log.info("Using project %r (%s)", board.get("title"), board["id"])
        return board["id"]


__all__ = ["API_URL", "GitHubClient", "GitHubError", "IssueMetadata"]
