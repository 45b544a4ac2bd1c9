from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional
import json
import yaml


class StatusCategory(str, Enum):
    """Workflow bucket an issue is counted in."""

    DONE = "done"
    REVIEW = "review"
    PROGRESS = "progress"
    UNSTARTED = "unstarted"


@dataclass(frozen=True)
class IssueRef:
    """Identifies an issue inside a repository."""

    owner: str
    repo: str
    number: int

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class ProjectRef:
    """Identifies a Projects (v2) board, either by owner/number or node id."""

    owner: str = ""
    number: int = 0
    owner_type: str = "organization"
    node_id: Optional[str] = None

    def __str__(self) -> str:
        if self.node_id:
            return self.node_id
        kind = "orgs" if self.owner_type == "organization" else "users"
        return f"{kind}/{self.owner}/projects/{self.number}"


@dataclass(frozen=True)
class CategoryCounts:
    """Number of issues per :class:`StatusCategory`."""

    done: int = 0
    review: int = 0
    progress: int = 0
    unstarted: int = 0

    def get(self, category: StatusCategory) -> int:
        return getattr(self, category.value)

    def incremented(self, category: StatusCategory) -> 'CategoryCounts':
        """Return a copy with one more issue in ``category``."""
        return replace(self, **{category.value: self.get(category) + 1})

    def __add__(self, other: 'CategoryCounts') -> 'CategoryCounts':
        if not isinstance(other, CategoryCounts):
            return NotImplemented
        return CategoryCounts(
            done=self.done + other.done,
            review=self.review + other.review,
            progress=self.progress + other.progress,
            unstarted=self.unstarted + other.unstarted,
        )

    @property
    def total(self) -> int:
        return self.done + self.review + self.progress + self.unstarted

    def to_dict(self) -> Dict[str, int]:
        return {c.value: self.get(c) for c in StatusCategory}

    @classmethod
    def from_dict(cls, data: dict) -> 'CategoryCounts':
        return cls(**{c.value: int(data.get(c.value, 0)) for c in StatusCategory})


@dataclass(frozen=True)
class ProgressResult:
    """Weighted completion of an Epic.

    ``percent`` is ``None`` when nothing was counted, so callers can tell an
    empty Epic apart from one where no work has started.
    """

    counts: CategoryCounts = field(default_factory=CategoryCounts)
    percent: Optional[int] = None
    bar: str = ""

    @property
    def has_data(self) -> bool:
        return self.percent is not None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            'percent': self.percent,
            'bar': self.bar,
            'total': self.counts.total,
        }
        data['counts'] = self.counts.to_dict()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), sort_keys=False, allow_unicode=True)
