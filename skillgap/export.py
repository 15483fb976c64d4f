from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum, IntEnum
from typing import Any

from skillgap.models import GapAnalysisResult, TeamAnalysisResult

MEMBER_GAP_FIELDS = (
    "skill_name",
    "category",
    "current_level",
    "required_level",
    "gap_severity",
    "priority",
    "time_to_competency",
)
MEMBER_STRENGTH_FIELDS = ("skill_name", "level", "years_experience", "category")


def to_payload(value: Any) -> Any:
    """Render result objects as JSON-ready dicts, lists and scalars.

    Skill levels are rendered by name, other enums by value.
    """
    if isinstance(value, IntEnum):
        return value.name.lower()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_payload(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value


def export_individual(result: GapAnalysisResult) -> dict[str, Any]:
    return {"analysis": to_payload(result)}


def export_team(result: TeamAnalysisResult) -> dict[str, Any]:
    payload = to_payload(result)
    payload["member_analyses"] = [
        {
            **analysis,
            "skill_gaps": [
                {key: gap[key] for key in MEMBER_GAP_FIELDS}
                for gap in analysis["skill_gaps"]
            ],
            "strengths": [
                {key: strength[key] for key in MEMBER_STRENGTH_FIELDS}
                for strength in analysis["strengths"]
            ],
        }
        for analysis in payload["member_analyses"]
    ]
    return payload
