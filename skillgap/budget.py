from __future__ import annotations

import numpy as np
import pandas as pd

from skillgap.config import AnalysisSettings
from skillgap.models import (
    Approach,
    BudgetAllocation,
    BudgetEstimate,
    HiringCosts,
    Solution,
    TeamGap,
    TeamMember,
    TrainingCosts,
)

TRAINING_PATHS = (Solution.TRAINING, Solution.MIXED)
HIRING_PATHS = (Solution.HIRING, Solution.MIXED)


def volume_discount(members_trained: int, settings: AnalysisSettings) -> float:
    for above, factor in settings.training_volume_discounts:
        if members_trained > above:
            return factor
    return 1.0


def training_costs_by_skill(gap_rows: pd.DataFrame, settings: AnalysisSettings) -> pd.Series:
    """Cost of training every member who needs a skill, keyed by skill name.

    Each member costs ``time_to_competency`` months of training hours, billed
    at the trainer rate plus the member's own hourly rate when it is known,
    scaled by the category's training multiplier. Training a larger group of
    members for the same skill earns a volume discount.
    """
    if gap_rows.empty:
        return pd.Series(dtype=float)
    hours = gap_rows["time_to_competency"] * settings.training_hours_per_month
    multiplier = gap_rows["category"].map(settings.training_cost_multipliers).fillna(1.0)
    cost = hours * (settings.training_cost_per_hour + gap_rows["hourly_rate"]) * multiplier
    by_skill = cost.groupby(gap_rows["skill_name"], sort=False).sum()
    trained = gap_rows.groupby("skill_name", sort=False)["member_id"].nunique()
    discount = trained.map(lambda count: volume_discount(int(count), settings))
    return (by_skill * discount).round(2)


def hiring_cost_per_position(members: list[TeamMember], settings: AnalysisSettings) -> float:
    salaries = [member.salary for member in members if member.salary]
    band = float(np.median(salaries)) if salaries else settings.default_annual_salary
    return round(band * settings.hiring_fee_ratio, 2)


def hiring_cost_for_category(base_cost: float, category: str, settings: AnalysisSettings) -> float:
    return round(base_cost * settings.hiring_cost_multipliers.get(category, 1.0), 2)


def choose_approach(training_total: float, hiring_total: float) -> Approach:
    if hiring_total <= 0 and training_total > 0:
        return Approach.TRAINING_FOCUSED
    if training_total <= 0 and hiring_total > 0:
        return Approach.HIRING_FOCUSED
    if training_total < 0.5 * hiring_total:
        return Approach.TRAINING_FOCUSED
    if training_total > 2 * hiring_total:
        return Approach.HIRING_FOCUSED
    return Approach.MIXED_APPROACH


def estimate_budget(team_gaps: list[TeamGap]) -> BudgetEstimate:
    training_per_skill = {
        gap.skill_name: gap.estimated_training_cost
        for gap in team_gaps
        if gap.recommended_solution in TRAINING_PATHS
    }
    hiring_per_skill = {
        gap.skill_name: gap.estimated_hiring_cost
        for gap in team_gaps
        if gap.recommended_solution in HIRING_PATHS
    }
    training_total = round(sum(training_per_skill.values()), 2)
    hiring_total = round(sum(hiring_per_skill.values()), 2)
    roi_months = max(
        [gap.max_time_to_competency for gap in team_gaps if gap.recommended_solution in TRAINING_PATHS],
        default=1,
    )
    roi_months = max(1, roi_months)
    return BudgetEstimate(
        training_costs=TrainingCosts(
            total=training_total,
            per_skill=training_per_skill,
            timeline_months=roi_months,
        ),
        hiring_costs=HiringCosts(
            total=hiring_total,
            per_skill=hiring_per_skill,
            positions_needed=len(hiring_per_skill),
        ),
        recommended_approach=choose_approach(training_total, hiring_total),
        roi_timeline_months=roi_months,
    )


def allocate_budget(estimate: BudgetEstimate, settings: AnalysisSettings) -> BudgetAllocation:
    training = estimate.training_costs.total
    hiring = estimate.hiring_costs.total
    total = training + hiring
    if total <= 0:
        training_pct = 50
    else:
        training_pct = int(round(100.0 * training / total))
        training_pct = max(settings.budget_split_floor, min(settings.budget_split_ceiling, training_pct))
    return BudgetAllocation(
        training_percentage=training_pct,
        hiring_percentage=100 - training_pct,
        total_budget_needed=round(total, 2),
    )
