"""
Tests for the derived-metrics calculator.

Covered scenarios:
  - no target means never complete, whatever the count
  - target met exactly completes the metric
  - empty category and missing snapshot give a ratio of exactly 0
  - weekly percentage is the unweighted mean, rounded half-up
  - skillset scores display as the percentage they already are
"""
from __future__ import annotations

from mentortrack.schemas.catalog import Catalog, MetricKind
from mentortrack.schemas.progress import (
    ActionProgress,
    RequirementProgress,
    SkillsetProgress,
    Snapshot,
    round_half_up,
)
from mentortrack.schemas.target import TargetEntry, TargetSet
from mentortrack.services.progress import (
    category_progress,
    format_skill_percentage,
    is_complete,
    metric_rows,
    weekly_progress,
)

CATALOG = Catalog.from_names(
    actions=["Calls", "Meetings", "Closings"],
    skillsets=["Opening", "Objection handling"],
    requirements=["Weekly report", "Training"],
)


def _snapshot(actions=(), skillsets=(), requirements=(), agent_id=101, week=3) -> Snapshot:
    return Snapshot(
        agent_id=agent_id,
        week=week,
        actions=[ActionProgress(metric_id=i, count=c) for i, c in actions],
        skillsets=[SkillsetProgress(metric_id=i, total_score=s) for i, s in skillsets],
        requirements=[RequirementProgress(metric_id=i, count=c) for i, c in requirements],
    )


def _targets(*entries: TargetEntry, agent_id=101, week=3) -> TargetSet:
    return TargetSet(agent_id=agent_id, week=week, entries=list(entries))


class TestCompletion:
    def test_no_target_never_complete(self):
        assert is_complete(5, 0) is False

    def test_target_met(self):
        assert is_complete(5, 5) is True

    def test_target_not_met(self):
        assert is_complete(4, 5) is False

    def test_count_without_target_row_not_complete(self):
        snapshot = _snapshot(actions=[(1, 5)])
        rows = metric_rows(MetricKind.action, CATALOG, snapshot, _targets())
        assert rows[0].observed == 5
        assert rows[0].target == 0
        assert rows[0].is_complete is False
        assert category_progress(MetricKind.action, CATALOG, snapshot, _targets()).ratio == 0.0

    def test_target_five_count_five_at_position_zero(self):
        snapshot = _snapshot(actions=[(1, 5)])
        targets = _targets(TargetEntry(kpi_id=1, target_count=5))
        c = category_progress(MetricKind.action, CATALOG, snapshot, targets)
        assert c.completed == 1
        assert c.total == 3
        assert c.ratio == 1 / 3

    def test_skillset_rows_use_offset_ids(self):
        snapshot = _snapshot(skillsets=[(8, 70), (9, 69)])
        targets = _targets(
            TargetEntry(kpi_id=8, target_count=70),
            TargetEntry(kpi_id=9, target_count=70),
        )
        rows = metric_rows(MetricKind.skillset, CATALOG, snapshot, targets)
        assert [r.metric_id for r in rows] == [8, 9]
        assert [r.is_complete for r in rows] == [True, False]

    def test_requirement_target_not_confused_with_action(self):
        # kpi_id=1 is action 0, not requirement 0
        snapshot = _snapshot(requirements=[(1, 1)])
        targets = _targets(TargetEntry(kpi_id=1, target_count=1))
        rows = metric_rows(MetricKind.requirement, CATALOG, snapshot, targets)
        assert rows[0].target == 0
        assert rows[0].is_complete is False


class TestRatios:
    def test_empty_category_ratio_is_zero(self):
        catalog = Catalog.from_names(actions=["Calls"], skillsets=[], requirements=["Report"])
        c = category_progress(MetricKind.skillset, catalog, _snapshot(), _targets())
        assert c.total == 0
        assert c.ratio == 0.0

    def test_missing_snapshot_ratio_is_zero(self):
        targets = _targets(TargetEntry(kpi_id=1, target_count=0))
        c = category_progress(MetricKind.action, CATALOG, None, targets)
        assert c.ratio == 0.0
        assert c.total == 3

    def test_missing_catalog_yields_no_rows(self):
        assert metric_rows(MetricKind.action, None, _snapshot(), _targets()) == []


class TestWeeklyProgress:
    def test_no_snapshot_is_zero(self):
        targets = _targets(TargetEntry(kpi_id=1, target_count=1))
        assert weekly_progress(CATALOG, None, targets).percentage == 0

    def test_unweighted_mean(self):
        # actions 1/3, skillsets 0/2, requirements 1/2 -> (1/3 + 0 + 1/2) / 3 = 27.77...
        snapshot = _snapshot(actions=[(1, 5)], requirements=[(1, 1)])
        targets = _targets(
            TargetEntry(kpi_id=1, target_count=5),
            TargetEntry(requirement_id=1, target_count=1),
        )
        w = weekly_progress(CATALOG, snapshot, targets)
        assert w.actions.completed == 1
        assert w.skillsets.completed == 0
        assert w.requirements.completed == 1
        assert w.percentage == 28

    def test_everything_complete(self):
        snapshot = _snapshot(
            actions=[(1, 1), (2, 1), (3, 1)],
            skillsets=[(8, 90), (9, 90)],
            requirements=[(1, 1), (2, 1)],
        )
        targets = _targets(
            *[TargetEntry(kpi_id=i, target_count=1) for i in (1, 2, 3)],
            *[TargetEntry(kpi_id=i, target_count=80) for i in (8, 9)],
            *[TargetEntry(requirement_id=i, target_count=1) for i in (1, 2)],
        )
        assert weekly_progress(CATALOG, snapshot, targets).percentage == 100

    def test_rounds_half_up(self):
        # 3/8 actions complete, nothing else: 100 * (3/8) / 3 = 12.5 -> 13
        catalog = Catalog.from_names(
            actions=[f"A{i}" for i in range(8)],
            skillsets=["S"],
            requirements=["R"],
        )
        snapshot = _snapshot(actions=[(1, 1), (2, 1), (3, 1)])
        targets = _targets(*[TargetEntry(kpi_id=i, target_count=1) for i in (1, 2, 3)])
        assert weekly_progress(catalog, snapshot, targets).percentage == 13


class TestSnapshotValues:
    def test_repeated_action_ids_are_summed(self):
        snapshot = _snapshot(actions=[(1, 2), (1, 3)])
        assert snapshot.observed(MetricKind.action, 1) == 5

    def test_repeated_skillset_ids_keep_best(self):
        snapshot = _snapshot(skillsets=[(8, 60), (8, 75)])
        assert snapshot.observed(MetricKind.skillset, 8) == 75

    def test_absent_metric_is_zero(self):
        assert _snapshot().observed(MetricKind.requirement, 2) == 0

    def test_total_derived_from_sub_scores(self):
        s = SkillsetProgress(metric_id=8, wording=70, tonality=70, rapport=71.5)
        assert s.total_score == 71

    def test_explicit_total_wins(self):
        s = SkillsetProgress(metric_id=8, total_score=40, wording=90, tonality=90, rapport=90)
        assert s.total_score == 40


class TestFormatting:
    def test_skill_percentage_is_the_score(self):
        assert format_skill_percentage(70) == "70%"
        assert format_skill_percentage(0) == "0%"
        assert format_skill_percentage(100) == "100%"

    def test_round_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4999) == 2
