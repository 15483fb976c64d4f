from __future__ import annotations

import pandas as pd

from skillgap.budget import (
    allocate_budget,
    choose_approach,
    estimate_budget,
    hiring_cost_for_category,
    hiring_cost_per_position,
    training_costs_by_skill,
    volume_discount,
)
from skillgap.config import AnalysisSettings
from skillgap.models import Approach, Importance, Solution, TeamGap, TeamGapSeverity, TeamMember


def _gap(name: str, solution: Solution, training: float, hiring: float, max_time: int) -> TeamGap:
    return TeamGap(
        skill_name=name,
        category="Programming",
        importance=Importance.IMPORTANT,
        members_needing=2,
        percentage_needing=67,
        severity=TeamGapSeverity.MODERATE,
        estimated_training_cost=training,
        estimated_hiring_cost=hiring,
        recommended_solution=solution,
        member_ids=["a", "b"],
        average_time_to_competency=float(max_time),
        max_time_to_competency=max_time,
    )


def test_training_cost_includes_member_rate():
    rows = pd.DataFrame(
        [
            {"member_id": "a", "skill_name": "Go", "category": "Programming", "time_to_competency": 2, "hourly_rate": 0.0},
            {"member_id": "b", "skill_name": "Go", "category": "Programming", "time_to_competency": 4, "hourly_rate": 30.0},
            {"member_id": "a", "skill_name": "Rust", "category": "Programming", "time_to_competency": 1, "hourly_rate": 0.0},
        ]
    )
    costs = training_costs_by_skill(rows, AnalysisSettings())
    assert costs["Go"] == 2000.0 + 6400.0
    assert costs["Rust"] == 1000.0


def test_training_cost_scales_by_category_and_group_size():
    rows = pd.DataFrame(
        [
            {"member_id": f"ml{i}", "skill_name": "Machine Learning", "category": "AI & Machine Learning",
             "time_to_competency": 2, "hourly_rate": 0.0}
            for i in range(3)
        ]
        + [
            {"member_id": f"sec{i}", "skill_name": "Cybersecurity", "category": "Security",
             "time_to_competency": 1, "hourly_rate": 0.0}
            for i in range(6)
        ]
    )
    costs = training_costs_by_skill(rows, AnalysisSettings())
    assert costs["Machine Learning"] == 10800.0
    assert costs["Cybersecurity"] == 7200.0


def test_volume_discount_tiers():
    settings = AnalysisSettings()
    assert volume_discount(2, settings) == 1.0
    assert volume_discount(3, settings) == 0.9
    assert volume_discount(6, settings) == 0.8


def test_hiring_cost_scales_by_category():
    settings = AnalysisSettings()
    assert hiring_cost_for_category(24_000.0, "AI & Machine Learning", settings) == 60_000.0
    assert hiring_cost_for_category(24_000.0, "Security", settings) == 43_200.0
    assert hiring_cost_for_category(24_000.0, "Programming", settings) == 24_000.0


def test_hiring_cost_uses_median_salary():
    settings = AnalysisSettings()
    members = [
        TeamMember(id="a", skills=[], salary=100_000),
        TeamMember(id="b", skills=[], salary=140_000),
        TeamMember(id="c", skills=[], salary=200_000),
        TeamMember(id="d", skills=[]),
    ]
    assert hiring_cost_per_position(members, settings) == 28_000.0
    assert hiring_cost_per_position([TeamMember(id="x", skills=[])], settings) == 24_000.0


def test_approach_thresholds():
    assert choose_approach(1000, 5000) is Approach.TRAINING_FOCUSED
    assert choose_approach(12000, 5000) is Approach.HIRING_FOCUSED
    assert choose_approach(5000, 5000) is Approach.MIXED_APPROACH
    assert choose_approach(3000, 0) is Approach.TRAINING_FOCUSED
    assert choose_approach(0, 3000) is Approach.HIRING_FOCUSED
    assert choose_approach(0, 0) is Approach.MIXED_APPROACH


def test_estimate_counts_mixed_gaps_on_both_sides():
    estimate = estimate_budget(
        [
            _gap("Go", Solution.TRAINING, 4000, 24000, 4),
            _gap("Rust", Solution.MIXED, 6000, 24000, 8),
            _gap("Kubernetes", Solution.HIRING, 9000, 24000, 6),
        ]
    )
    assert estimate.training_costs.per_skill == {"Go": 4000, "Rust": 6000}
    assert estimate.training_costs.total == 10000
    assert estimate.hiring_costs.per_skill == {"Rust": 24000, "Kubernetes": 24000}
    assert estimate.hiring_costs.positions_needed == 2
    assert estimate.roi_timeline_months == 8
    assert estimate.recommended_approach is Approach.TRAINING_FOCUSED


def test_empty_estimate_splits_evenly():
    settings = AnalysisSettings()
    estimate = estimate_budget([])
    assert estimate.roi_timeline_months == 1
    allocation = allocate_budget(estimate, settings)
    assert (allocation.training_percentage, allocation.hiring_percentage) == (50, 50)
    assert allocation.total_budget_needed == 0


def test_allocation_is_clamped():
    settings = AnalysisSettings()
    estimate = estimate_budget([_gap("Go", Solution.TRAINING, 500, 0, 2), _gap("AWS", Solution.HIRING, 0, 99500, 2)])
    allocation = allocate_budget(estimate, settings)
    assert allocation.training_percentage == 10
    assert allocation.hiring_percentage == 90
    assert allocation.total_budget_needed == 100000
