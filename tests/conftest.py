import pytest

from epic_progress.domain import IssueRef
from epic_progress.github import GitHubError, IssueMetadata

BOARD = "PVT_board"
OWNER = "acme"
REPO = "widgets"


def ref(number: int) -> IssueRef:
    return IssueRef(OWNER, REPO, number)


class FakeClient:
    """In-memory stand-in for :class:`epic_progress.github.GitHubClient`.

    ``children`` maps an issue number to its sub-issue numbers, ``statuses``
    an issue number to its board status (``None`` keeps the issue off the
    board) and ``milestones`` an issue number to its milestone title.
    """

    def __init__(self, children=None, statuses=None, milestones=None,
                 failing_lists=(), failing_lookups=(), missing=()):
        self.children = children or {}
        self.statuses = statuses or {}
        self.milestones = milestones or {}
        self.failing_lists = set(failing_lists)
        self.failing_lookups = set(failing_lookups)
        self.missing = set(missing)
        self.listed = []
        self.looked_up = []

    def sub_issues(self, issue):
        self.listed.append(issue.number)
        if issue.number in self.failing_lists:
            raise GitHubError("boom")
        return [ref(n) for n in self.children.get(issue.number, [])]

    def issue_node_id(self, issue):
        self.looked_up.append(issue.number)
        if issue.number in self.failing_lookups:
            raise GitHubError("lookup failed")
        return f"I_{issue.number}"

    def issue_metadata(self, node_id):
        number = int(node_id[2:])
        if number in self.missing:
            return None
        projects = {}
        status = self.statuses.get(number)
        if status is not None:
            projects[BOARD] = {"Status": status}
        return IssueMetadata(milestone=self.milestones.get(number), projects=projects)

    def project_node_id(self, project):
        return project.node_id or BOARD


@pytest.fixture
def make_client():
    return FakeClient
