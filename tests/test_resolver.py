import logging

import pytest
import requests

from epic_progress.domain import IssueRef, StatusCategory
from epic_progress.github import GitHubClient, IssueMetadata
from epic_progress.resolver import StatusResolver, normalize_status

BOARD = "PVT_board"
ISSUE = IssueRef("acme", "widgets", 2)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("done", StatusCategory.DONE),
        ("Done", StatusCategory.DONE),
        ("CODE REVIEW", StatusCategory.REVIEW),
        ("In Progress", StatusCategory.PROGRESS),
        ("Todo", StatusCategory.UNSTARTED),
        ("Backlog", StatusCategory.UNSTARTED),
        ("review", StatusCategory.UNSTARTED),
        ("in-progress", StatusCategory.UNSTARTED),
        (" done ", StatusCategory.UNSTARTED),
        ("", StatusCategory.UNSTARTED),
        (None, StatusCategory.UNSTARTED),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) == expected


def test_resolve_board_status(make_client):
    client = make_client(statuses={2: "In Progress"})
    assert StatusResolver(client, project_id=BOARD).resolve(ISSUE) == StatusCategory.PROGRESS


def test_resolve_trims_status(make_client):
    client = make_client(statuses={2: "  Code Review "})
    assert StatusResolver(client, project_id=BOARD).resolve(ISSUE) == StatusCategory.REVIEW


def test_issue_not_on_board(make_client, caplog):
    client = make_client(statuses={})
    with caplog.at_level(logging.WARNING):
        category = StatusResolver(client, project_id=BOARD).resolve(ISSUE)
    assert category == StatusCategory.UNSTARTED
    assert "not in project" in caplog.text


def test_other_board_is_ignored(make_client):
    client = make_client(statuses={2: "Done"})
    assert StatusResolver(client, project_id="PVT_other").resolve(ISSUE) == StatusCategory.UNSTARTED


def test_no_board_uses_first_with_status():
    class Client:
        def issue_node_id(self, ref):
            return "I_2"

        def issue_metadata(self, node_id):
            return IssueMetadata(projects={"PVT_a": {"Size": "L"}, "PVT_b": {"Status": "Done"}})

    assert StatusResolver(Client()).resolve(ISSUE) == StatusCategory.DONE


def test_custom_status_field():
    class Client:
        def issue_node_id(self, ref):
            return "I_2"

        def issue_metadata(self, node_id):
            return IssueMetadata(projects={BOARD: {"Status": "Todo", "Stage": "done"}})

    resolver = StatusResolver(Client(), project_id=BOARD, status_field="Stage")
    assert resolver.resolve(ISSUE) == StatusCategory.DONE


def test_milestone_match(make_client):
    client = make_client(statuses={2: "Done"}, milestones={2: "Sprint 4"})
    resolver = StatusResolver(client, project_id=BOARD, milestone="Sprint 4")
    assert resolver.resolve(ISSUE) == StatusCategory.DONE


def test_milestone_mismatch_is_skipped(make_client, caplog):
    client = make_client(statuses={2: "Done"}, milestones={2: "Sprint 3"})
    resolver = StatusResolver(client, project_id=BOARD, milestone="Sprint 4")
    with caplog.at_level(logging.WARNING):
        assert resolver.resolve(ISSUE) is None
    assert "Sprint 3" in caplog.text


def test_milestone_is_case_sensitive(make_client):
    client = make_client(statuses={2: "Done"}, milestones={2: "sprint 4"})
    assert StatusResolver(client, project_id=BOARD, milestone="Sprint 4").resolve(ISSUE) is None


def test_missing_milestone_is_skipped_under_filter(make_client):
    client = make_client(statuses={2: "Done"})
    assert StatusResolver(client, project_id=BOARD, milestone="Sprint 4").resolve(ISSUE) is None


def test_empty_milestone_means_no_filter(make_client):
    client = make_client(statuses={2: "Done"}, milestones={2: "Sprint 3"})
    assert StatusResolver(client, project_id=BOARD, milestone="").resolve(ISSUE) == StatusCategory.DONE


def test_lookup_failure_degrades(make_client, caplog):
    client = make_client(failing_lookups={2})
    with caplog.at_level(logging.WARNING):
        assert StatusResolver(client, project_id=BOARD).resolve(ISSUE) == StatusCategory.UNSTARTED
    assert "acme/widgets#2" in caplog.text


def test_transport_failure_degrades():
    class Client:
        def issue_node_id(self, ref):
            raise requests.ConnectionError("offline")

    assert StatusResolver(Client(), project_id=BOARD).resolve(ISSUE) == StatusCategory.UNSTARTED


def test_missing_node_degrades(make_client):
    client = make_client(missing={2})
    assert StatusResolver(client, project_id=BOARD).resolve(ISSUE) == StatusCategory.UNSTARTED


@pytest.mark.parametrize("payload", [["unexpected"], {"data": {"node": ["unexpected"]}}])
def test_malformed_response_degrades(payload):
    class Response:
        status_code = 200
        links = {}

        def json(self):
            return payload

        def raise_for_status(self):
            pass

    class Session:
        headers = {}

        def post(self, url, json=None, timeout=None):
            return Response()

    client = GitHubClient("secret", session=Session())
    assert StatusResolver(client, project_id=BOARD).resolve(ISSUE) == StatusCategory.UNSTARTED
