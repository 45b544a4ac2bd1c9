"""Progress calculation utilities for Epic Progress.

This module turns the per-category issue counts gathered for an Epic into
a single completion percentage and a small emoji bar.

Each category carries a weight:
    - ``done``: 1
    - ``review``: 1/2
    - ``progress``: 1/4
    - ``unstarted``: 0

The percentage is ``100 * weighted / total`` rounded half up. Weights are
kept as :class:`~fractions.Fraction` so that values such as 62.5 round the
same way every time.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Dict, Optional

from .domain import CategoryCounts, ProgressResult, StatusCategory


WEIGHTS: Dict[StatusCategory, Fraction] = {
    StatusCategory.DONE: Fraction(1),
    StatusCategory.REVIEW: Fraction(1, 2),
    StatusCategory.PROGRESS: Fraction(1, 4),
    StatusCategory.UNSTARTED: Fraction(0),
}

BAR_CELLS = 5
FULL_CELL = "🟩"
HALF_CELL = "🟨"
EMPTY_CELL = "⬜"

LABELS: Dict[StatusCategory, str] = {
    StatusCategory.DONE: "Done",
    StatusCategory.REVIEW: "Code Review",
    StatusCategory.PROGRESS: "In Progress",
    StatusCategory.UNSTARTED: "Not Started",
}


def weighted_score(counts: CategoryCounts) -> Fraction:
    """Return the weighted number of completed issues in ``counts``."""
    return sum((WEIGHTS[c] * counts.get(c) for c in StatusCategory), Fraction(0))


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def percentage(counts: CategoryCounts) -> Optional[int]:
    """Return the completion percentage, or ``None`` if nothing was counted."""
    total = counts.total
    if total == 0:
        return None
    # every weight is <= 1, so weighted never exceeds total and pct stays in 0-100
    return _round_half_up(100 * weighted_score(counts) / total)


def progress_bar(percent: Optional[int], cells: int = BAR_CELLS) -> str:
    """Return an emoji bar of ``cells`` cells for ``percent``.

    A cell is full for every whole ``100 / cells`` percent; a half cell is
    added when the remainder is at least half a cell. ``None`` renders as an
    empty bar.
    """
    if percent is None:
        return EMPTY_CELL * cells
    if not 0 <= percent <= 100:
        raise ValueError(f"percent must be between 0 and 100, got {percent}")
    score = Fraction(percent, 100) * cells
    full = math.floor(score)
    half = 1 if score - full >= Fraction(1, 2) else 0
    empty = cells - full - half
    return FULL_CELL * full + HALF_CELL * half + EMPTY_CELL * empty


def render(counts: CategoryCounts) -> ProgressResult:
    """Return the :class:`ProgressResult` for ``counts``."""
    pct = percentage(counts)
    return ProgressResult(counts=counts, percent=pct, bar=progress_bar(pct))


def format_summary(result: ProgressResult, title: str = "Epic Progress") -> str:
    """Return the multi-line text report for ``result``."""
    lines = [f"----- {title} -----"]
    if result.has_data:
        lines.append(f"Progress: {result.percent}% {result.bar}")
    else:
        lines.append(f"Progress: n/a {result.bar} (no countable sub-issues)")
    lines.append(", ".join(
        f"{LABELS[c]}: {result.counts.get(c)}" for c in StatusCategory
    ))
    return "\n".join(lines)
