"""Epic Progress core package."""

from .domain import CategoryCounts, IssueRef, ProgressResult, ProjectRef, StatusCategory
from .progress import progress_bar, render
from .epic import compute_progress

__all__ = [
    "CategoryCounts",
    "IssueRef",
    "ProgressResult",
    "ProjectRef",
    "StatusCategory",
    "progress_bar",
    "render",
    "compute_progress",
]
