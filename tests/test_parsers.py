from __future__ import annotations

import pytest

from skillgap.errors import InvalidInputError
from skillgap.models import Importance, ProjectPriority, SkillLevel
from skillgap.parsers import (
    parse_project_requirements,
    parse_requirement,
    parse_team_member,
    parse_user_skill,
)


def test_parses_camel_and_snake_case_records():
    camel = parse_user_skill(
        {"skillName": "React", "level": "Advanced", "yearsExperience": 4, "confidenceScore": 0.9}
    )
    snake = parse_user_skill({"skill_name": "React", "level": 3, "years_experience": 4, "confidence_score": 0.9})
    assert camel == snake
    assert camel.level is SkillLevel.ADVANCED


def test_requirement_defaults():
    requirement = parse_requirement({"skill": "Docker"})
    assert requirement.importance is Importance.IMPORTANT
    assert requirement.minimum_level is SkillLevel.INTERMEDIATE
    assert requirement.confidence == 1.0


@pytest.mark.parametrize(
    "raw",
    [
        {"skillName": "", "level": "advanced"},
        {"skillName": "Go", "level": "guru"},
        {"skillName": "Go", "level": "expert", "yearsExperience": -1},
        {"skillName": "Go", "level": "expert", "confidenceScore": 1.5},
        {"skillName": "Go", "level": "expert", "yearsExperience": "lots"},
        "Go",
    ],
)
def test_invalid_user_skill_records(raw):
    with pytest.raises(InvalidInputError):
        parse_user_skill(raw)


def test_invalid_requirement_importance():
    with pytest.raises(InvalidInputError) as excinfo:
        parse_requirement({"skill": "Go", "importance": "urgent"})
    assert excinfo.value.to_dict()["error_code"] == "V001"


def test_parses_team_member_and_project():
    member = parse_team_member(
        {
            "id": 7,
            "name": "Dana",
            "hourlyRate": "45",
            "skills": [{"skillName": "Python", "level": "expert"}],
        }
    )
    assert member.id == "7"
    assert member.hourly_rate == 45.0
    assert member.skills[0].level is SkillLevel.EXPERT

    project = parse_project_requirements(
        {
            "name": "Data Platform",
            "priority": "HIGH",
            "requiredSkills": ["Python", "Kubernetes"],
            "skillRequirements": [{"skill": "Python", "importance": "critical", "minimumLevel": "advanced"}],
        }
    )
    assert project.priority is ProjectPriority.HIGH
    assert project.required_skills == ["Python", "Kubernetes"]
    assert project.skill_requirements[0].importance is Importance.CRITICAL


def test_team_member_requires_id():
    with pytest.raises(InvalidInputError):
        parse_team_member({"name": "No Id", "skills": []})
