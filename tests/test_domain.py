import json

import yaml

from epic_progress.domain import CategoryCounts, IssueRef, ProgressResult, ProjectRef, StatusCategory


def test_counts_default_to_zero():
    counts = CategoryCounts()
    assert counts.to_dict() == {"done": 0, "review": 0, "progress": 0, "unstarted": 0}
    assert counts.total == 0


def test_counts_incremented_returns_copy():
    counts = CategoryCounts()
    more = counts.incremented(StatusCategory.REVIEW)
    assert counts.review == 0
    assert more.review == 1
    assert more.get(StatusCategory.REVIEW) == 1


def test_counts_addition():
    a = CategoryCounts(done=1, unstarted=2)
    b = CategoryCounts(done=2, review=1, progress=3)
    assert a + b == CategoryCounts(done=3, review=1, progress=3, unstarted=2)


def test_counts_from_dict():
    counts = CategoryCounts.from_dict({"done": 2, "progress": "1"})
    assert counts == CategoryCounts(done=2, progress=1)


def test_issue_ref_str():
    assert str(IssueRef("acme", "widgets", 7)) == "acme/widgets#7"


def test_project_ref_str():
    assert str(ProjectRef(owner="acme", number=3)) == "orgs/acme/projects/3"
    assert str(ProjectRef(owner="jo", number=1, owner_type="user")) == "users/jo/projects/1"
    assert str(ProjectRef(node_id="PVT_x")) == "PVT_x"


def test_progress_result_serialisation():
    result = ProgressResult(counts=CategoryCounts(done=1, unstarted=1), percent=50, bar="🟩🟩🟨⬜⬜")
    data = json.loads(result.to_json())
    assert data == {
        "percent": 50,
        "bar": "🟩🟩🟨⬜⬜",
        "total": 2,
        "counts": {"done": 1, "review": 0, "progress": 0, "unstarted": 1},
    }
    assert yaml.safe_load(result.to_yaml()) == data
