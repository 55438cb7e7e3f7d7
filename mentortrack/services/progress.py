"""
Derived metrics: weekly completion for one (agent, week).

Definition
----------
A metric is *complete* when BOTH hold:
  1. A target is set for it (target > 0).
  2. The observed count (skillsets: score) is >= that target.
A metric without a target never counts as complete, whatever its count.

Category ratio  = complete metrics / catalog size of the category
                  (0 when the category is empty or no snapshot is loaded).
Weekly progress = round-half-up(100 * mean of the three category ratios).
The mean is unweighted: each category counts for one third regardless of
how many metrics it holds.

Pure functions over cached values. Any of snapshot / targets / catalog
may be missing; the result is then the conservative zero.

Public API
----------
metric_rows(kind, catalog, snapshot, targets)        -> list[MetricProgress]
category_progress(kind, catalog, snapshot, targets)  -> CategoryProgress
weekly_progress(catalog, snapshot, targets)          -> WeeklyProgress
format_skill_percentage(score)                       -> str
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from mentortrack.schemas.catalog import Catalog, MetricKind
from mentortrack.schemas.progress import Snapshot, round_half_up
from mentortrack.schemas.target import TargetSet
from mentortrack.services.metric_ids import to_absolute_id


# ---------------------------------------------------------------------------
# Result types (plain dataclasses, no Pydantic)
# ---------------------------------------------------------------------------

@dataclass
class MetricProgress:
    kind: MetricKind
    name: str
    position: int
    metric_id: int          # remote id (position + kind offset)
    observed: int           # count, or 0–100 score for skillsets
    target: int             # 0 = no target set
    is_complete: bool


@dataclass
class CategoryProgress:
    kind: MetricKind
    completed: int
    total: int              # catalog size
    ratio: float            # 0.0 – 1.0


@dataclass
class WeeklyProgress:
    actions: CategoryProgress
    skillsets: CategoryProgress
    requirements: CategoryProgress
    percentage: int         # 0 – 100


# ---------------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------------

def is_complete(observed: int, target: int) -> bool:
    return target > 0 and observed >= target


def metric_rows(
    kind: MetricKind,
    catalog: Optional[Catalog],
    snapshot: Optional[Snapshot],
    targets: Optional[TargetSet],
) -> list[MetricProgress]:
    """One row per catalog entry of `kind`, in catalog order."""
    if catalog is None:
        return []

    rows = []
    for entry in catalog.entries(kind):
        metric_id = to_absolute_id(kind, entry.position)
        observed = snapshot.observed(kind, metric_id) if snapshot else 0
        target = targets.count_for(kind, metric_id) if targets else 0
        rows.append(MetricProgress(
            kind=kind,
            name=entry.name,
            position=entry.position,
            metric_id=metric_id,
            observed=observed,
            target=target,
            is_complete=is_complete(observed, target),
        ))
    return rows


def category_progress(
    kind: MetricKind,
    catalog: Optional[Catalog],
    snapshot: Optional[Snapshot],
    targets: Optional[TargetSet],
) -> CategoryProgress:
    total = catalog.size(kind) if catalog else 0
    if snapshot is None or total == 0:
        return CategoryProgress(kind=kind, completed=0, total=total, ratio=0.0)

    completed = sum(1 for row in metric_rows(kind, catalog, snapshot, targets) if row.is_complete)
    return CategoryProgress(kind=kind, completed=completed, total=total, ratio=completed / total)


def weekly_progress(
    catalog: Optional[Catalog],
    snapshot: Optional[Snapshot],
    targets: Optional[TargetSet],
) -> WeeklyProgress:
    actions = category_progress(MetricKind.action, catalog, snapshot, targets)
    skillsets = category_progress(MetricKind.skillset, catalog, snapshot, targets)
    requirements = category_progress(MetricKind.requirement, catalog, snapshot, targets)

    # Exact fractions so that e.g. 1/2 lands on 50, not 49.99...
    mean = sum(
        (Decimal(c.completed) / Decimal(c.total) if c.total and snapshot else Decimal(0))
        for c in (actions, skillsets, requirements)
    ) / 3
    return WeeklyProgress(
        actions=actions,
        skillsets=skillsets,
        requirements=requirements,
        percentage=round_half_up(mean * 100),
    )


def format_skill_percentage(score: int) -> str:
    """Display a 0–100 skillset score. The score already is the percentage."""
    return f"{round_half_up(score)}%"
