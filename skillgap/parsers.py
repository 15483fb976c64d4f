from __future__ import annotations

from typing import Any, Iterable

from skillgap.errors import InvalidInputError
from skillgap.models import (
    Importance,
    ProjectPriority,
    ProjectRequirements,
    SkillLevel,
    SkillRequirement,
    TeamMember,
    UserSkill,
)


def _get(raw: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _level(value: Any, field_name: str) -> SkillLevel:
    try:
        return SkillLevel.parse(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid {field_name}: {value!r}", field=field_name) from exc


def _importance(value: Any) -> Importance:
    if isinstance(value, Importance):
        return value
    try:
        return Importance(str(value).strip().lower())
    except ValueError as exc:
        raise InvalidInputError(f"Invalid importance: {value!r}", field="importance") from exc


def _number(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{field_name} must be numeric, got {value!r}", field=field_name) from exc


def _name(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field_name} must be a non-empty string", field=field_name)
    return value.strip()


def parse_user_skill(raw: dict[str, Any]) -> UserSkill:
    if not isinstance(raw, dict):
        raise InvalidInputError("Skill record must be an object", value=repr(raw))
    skill = UserSkill(
        skill_name=_name(_get(raw, "skillName", "skill_name", "name"), "skillName"),
        skill_category=_get(raw, "skillCategory", "skill_category", "category", default="General"),
        level=_level(_get(raw, "level"), "level"),
        years_experience=_number(_get(raw, "yearsExperience", "years_experience", default=0), "yearsExperience"),
        confidence_score=_number(_get(raw, "confidenceScore", "confidence_score", default=0.5), "confidenceScore"),
        certifications=tuple(_get(raw, "certifications", default=())),
    )
    validate_user_skills([skill])
    return skill


def parse_user_skills(raw_items: Iterable[dict[str, Any]]) -> list[UserSkill]:
    return [parse_user_skill(item) for item in raw_items]


def parse_requirement(raw: dict[str, Any]) -> SkillRequirement:
    if not isinstance(raw, dict):
        raise InvalidInputError("Requirement record must be an object", value=repr(raw))
    requirement = SkillRequirement(
        skill=_name(_get(raw, "skill", "skillName", "name"), "skill"),
        category=_get(raw, "category", default="General"),
        importance=_importance(_get(raw, "importance", default=Importance.IMPORTANT.value)),
        minimum_level=_level(
            _get(raw, "minimumLevel", "minimum_level", default=SkillLevel.INTERMEDIATE), "minimumLevel"
        ),
        confidence=_number(_get(raw, "confidence", default=1.0), "confidence"),
        context=_get(raw, "context", default=""),
    )
    validate_requirements([requirement])
    return requirement


def parse_requirements(raw_items: Iterable[dict[str, Any]]) -> list[SkillRequirement]:
    return [parse_requirement(item) for item in raw_items]


def parse_team_member(raw: dict[str, Any]) -> TeamMember:
    if not isinstance(raw, dict):
        raise InvalidInputError("Team member must be an object", value=repr(raw))
    member_id = _get(raw, "id", "member_id")
    if member_id is None or not str(member_id).strip():
        raise InvalidInputError("Team member id is required")
    salary = _get(raw, "salary")
    hourly_rate = _get(raw, "hourlyRate", "hourly_rate")
    return TeamMember(
        id=str(member_id).strip(),
        name=_get(raw, "name"),
        role=_get(raw, "role"),
        department=_get(raw, "department"),
        skills=parse_user_skills(_get(raw, "skills", default=[])),
        salary=None if salary is None else _number(salary, "salary"),
        hourly_rate=None if hourly_rate is None else _number(hourly_rate, "hourlyRate"),
    )


def parse_project_requirements(raw: dict[str, Any]) -> ProjectRequirements:
    if not isinstance(raw, dict):
        raise InvalidInputError("Project requirements must be an object", value=repr(raw))
    structured = _get(raw, "skillRequirements", "skill_requirements")
    priority = _get(raw, "priority", default=ProjectPriority.MEDIUM.value)
    try:
        priority = ProjectPriority(str(priority).strip().lower())
    except ValueError as exc:
        raise InvalidInputError(f"Invalid project priority: {priority!r}", field="priority") from exc
    budget = _get(raw, "budget")
    return ProjectRequirements(
        name=_name(_get(raw, "name"), "name"),
        description=_get(raw, "description"),
        required_skills=[_name(skill, "required_skills") for skill in _get(raw, "required_skills", "requiredSkills", default=[])],
        timeline=_get(raw, "timeline"),
        priority=priority,
        budget=None if budget is None else _number(budget, "budget"),
        skill_requirements=None if structured is None else parse_requirements(structured),
    )


def validate_user_skills(skills: Iterable[UserSkill], owner: str | None = None) -> None:
    for skill in skills:
        _level(skill.level, "level")
        if _number(skill.years_experience, "yearsExperience") < 0:
            raise InvalidInputError(
                f"Negative experience for {skill.skill_name!r}",
                member_id=owner,
                years_experience=skill.years_experience,
            )
        if not 0.0 <= _number(skill.confidence_score, "confidenceScore") <= 1.0:
            raise InvalidInputError(
                f"Confidence for {skill.skill_name!r} must be within [0, 1]",
                member_id=owner,
                confidence_score=skill.confidence_score,
            )


def validate_requirements(requirements: Iterable[SkillRequirement]) -> None:
    for requirement in requirements:
        _name(requirement.skill, "skill")
        _level(requirement.minimum_level, "minimumLevel")
        _importance(requirement.importance)
        if not 0.0 <= _number(requirement.confidence, "confidence") <= 1.0:
            raise InvalidInputError(
                f"Confidence for requirement {requirement.skill!r} must be within [0, 1]",
                confidence=requirement.confidence,
            )


def validate_team(members: list[TeamMember], project: ProjectRequirements) -> None:
    if not members:
        raise InvalidInputError("Team analysis needs at least one member")
    if not project.name or not project.name.strip():
        raise InvalidInputError("Project name is required")
    seen: set[str] = set()
    for member in members:
        if member.id in seen:
            raise InvalidInputError(f"Duplicate team member id {member.id!r}", member_id=member.id)
        seen.add(member.id)
        validate_user_skills(member.skills, owner=member.id)
    for skill in project.required_skills:
        _name(skill, "required_skills")
    if project.skill_requirements:
        validate_requirements(project.skill_requirements)
