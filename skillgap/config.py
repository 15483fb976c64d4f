from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = ROOT_DIR / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "skill_catalog.json"

IMPORTANCE_MATCH_WEIGHTS = {
    "critical": 3,
    "important": 2,
    "nice-to-have": 1,
}

IMPORTANCE_PRIORITY_WEIGHTS = {
    "critical": 5,
    "important": 3,
    "nice-to-have": 1,
}

SEVERITY_PRIORITY_WEIGHTS = {
    "critical": 4,
    "moderate": 2,
    "minor": 1,
}

SLOW_CATEGORIES = (
    "AI & Machine Learning",
    "Data Science & Analytics",
    "Cloud & DevOps",
    "Security",
)

# categories missing from these tables cost 1.0x
TRAINING_COST_MULTIPLIERS = {
    "AI & Machine Learning": 2.0,
    "Cloud & DevOps": 1.5,
    "Security": 1.5,
}

HIRING_COST_MULTIPLIERS = {
    "AI & Machine Learning": 2.5,
    "Cloud & DevOps": 1.8,
    "Security": 1.8,
}

# (more than N members trained, factor), checked in order
TRAINING_VOLUME_DISCOUNTS = (
    (5, 0.8),
    (2, 0.9),
)


@dataclass(frozen=True)
class AnalysisSettings:
    # matching
    fuzzy_threshold: float = 0.8
    unknown_skill_confidence: float = 0.5

    # individual gaps
    base_months_per_level: float = 2.0
    slow_category_multiplier: float = 1.5
    slow_categories: tuple[str, ...] = SLOW_CATEGORIES
    immediate_max_months: int = 1
    short_term_max_months: int = 4
    transfer_same_category_base: float = 0.5
    transfer_per_year: float = 0.1
    transfer_years_cap: float = 0.3
    transfer_min_score: float = 0.4
    strength_min_level: int = 3
    importance_match_weights: dict[str, int] = field(
        default_factory=lambda: dict(IMPORTANCE_MATCH_WEIGHTS)
    )
    importance_priority_weights: dict[str, int] = field(
        default_factory=lambda: dict(IMPORTANCE_PRIORITY_WEIGHTS)
    )
    severity_priority_weights: dict[str, int] = field(
        default_factory=lambda: dict(SEVERITY_PRIORITY_WEIGHTS)
    )

    # team aggregation
    team_gap_threshold: float = 0.5
    team_critical_threshold: float = 0.8
    team_strength_threshold: float = 0.5
    excellent_coverage_threshold: float = 0.8
    training_max_months: float = 6.0
    role_match_threshold: int = 65
    max_workers: int = 8
    failure_confidence_discount: float = 0.9
    knowledge_sharing_limit: int = 3

    # budget
    training_cost_per_hour: float = 50.0
    training_hours_per_month: float = 20.0
    hiring_fee_ratio: float = 0.2
    default_annual_salary: float = 120_000.0
    budget_split_floor: int = 10
    budget_split_ceiling: int = 90
    training_cost_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(TRAINING_COST_MULTIPLIERS)
    )
    hiring_cost_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(HIRING_COST_MULTIPLIERS)
    )
    training_volume_discounts: tuple[tuple[int, float], ...] = TRAINING_VOLUME_DISCOUNTS

    @classmethod
    def from_env(cls) -> AnalysisSettings:
        """Build settings, overriding selected values from SKILLGAP_* variables."""
        settings = cls()
        overrides: dict[str, float | int] = {}
        for name, cast in _ENV_OVERRIDES.items():
            raw = os.getenv(f"SKILLGAP_{name.upper()}")
            if raw is None or not raw.strip():
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for SKILLGAP_{name.upper()}: {raw!r}") from exc
        return replace(settings, **overrides) if overrides else settings


_ENV_OVERRIDES = {
    "fuzzy_threshold": float,
    "base_months_per_level": float,
    "role_match_threshold": int,
    "max_workers": int,
    "training_cost_per_hour": float,
    "training_hours_per_month": float,
    "hiring_fee_ratio": float,
    "default_annual_salary": float,
}
