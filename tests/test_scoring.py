from __future__ import annotations

from pathlib import Path

import pytest

from skillgap.catalog import SkillCatalog
from skillgap.config import AnalysisSettings
from skillgap.errors import InvalidInputError
from skillgap.export import export_individual
from skillgap.matching import SkillMatcher
from skillgap.models import (
    GapSeverity,
    Importance,
    LearningDifficulty,
    SkillLevel,
    SkillRequirement,
    UserSkill,
)
from skillgap.scoring import (
    GapAnalyzer,
    analyze_individual,
    gap_priority,
    gap_severity,
    learning_difficulty,
    time_to_competency,
)

BASE_DIR = Path(__file__).resolve().parents[1]


def _matcher() -> SkillMatcher:
    return SkillMatcher(catalog=SkillCatalog.from_file(BASE_DIR / "data" / "skill_catalog.json"))


def _skill(name: str, level: SkillLevel, years: float = 2.0) -> UserSkill:
    return UserSkill(skill_name=name, level=level, years_experience=years, confidence_score=0.8)


def _req(name: str, importance: Importance, level: SkillLevel) -> SkillRequirement:
    return SkillRequirement(skill=name, importance=importance, minimum_level=level)


def test_no_requirements_is_a_full_match():
    skills = [_skill("Python", SkillLevel.ADVANCED), _skill("SQL", SkillLevel.BEGINNER)]
    result = GapAnalyzer(matcher=_matcher()).analyze(skills, [])
    assert result.overall_match_percentage == 100
    assert result.skill_gaps == []
    assert {s.skill_name for s in result.strengths} == {"Python", "SQL"}
    assert all(not s.required for s in result.strengths)
    assert result.metadata.analysis_confidence == 1.0


def test_no_user_skills_means_every_requirement_is_missing():
    requirements = [
        _req("React", Importance.CRITICAL, SkillLevel.ADVANCED),
        _req("Python", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
    ]
    result = GapAnalyzer(matcher=_matcher()).analyze([], requirements)
    assert result.overall_match_percentage == 0
    assert [g.skill_name for g in result.skill_gaps] == ["React", "Python"]
    assert all(g.missing for g in result.skill_gaps)

    react, python = result.skill_gaps
    assert react.level_gap == 3
    assert react.gap_severity is GapSeverity.CRITICAL
    assert react.learning_difficulty is LearningDifficulty.HARD
    assert react.time_to_competency == 6
    assert react.priority == 10
    assert python.gap_severity is GapSeverity.MODERATE
    assert python.time_to_competency == 4
    assert python.priority == 6
    assert result.critical_gaps == [react]
    assert react in result.long_term_goals


def test_match_percentage_is_importance_weighted():
    skills = [_skill("Python", SkillLevel.ADVANCED)]
    requirements = [
        _req("Python", Importance.CRITICAL, SkillLevel.ADVANCED),
        _req("Docker", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
    ]
    result = GapAnalyzer(matcher=_matcher()).analyze(skills, requirements)
    assert result.overall_match_percentage == 60
    assert [s.skill_name for s in result.strengths] == ["Python"]
    assert result.strengths[0].required


def test_synonym_skill_satisfies_requirement():
    result = GapAnalyzer(matcher=_matcher()).analyze(
        [_skill("JS", SkillLevel.ADVANCED)],
        [_req("JavaScript", Importance.IMPORTANT, SkillLevel.INTERMEDIATE)],
    )
    assert result.overall_match_percentage == 100
    assert result.skill_gaps == []
    assert result.strengths[0].skill_name == "JavaScript"


def test_duplicate_requirements_merge_to_strictest():
    result = GapAnalyzer(matcher=_matcher()).analyze(
        [],
        [
            _req("React", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
            _req("reactjs", Importance.CRITICAL, SkillLevel.ADVANCED),
        ],
    )
    assert len(result.skill_gaps) == 1
    gap = result.skill_gaps[0]
    assert gap.importance is Importance.CRITICAL
    assert gap.required_level is SkillLevel.ADVANCED


def test_extra_strengths_need_advanced_level():
    skills = [
        _skill("Go", SkillLevel.EXPERT),
        _skill("Rust", SkillLevel.ADVANCED),
        _skill("Figma", SkillLevel.INTERMEDIATE),
    ]
    result = GapAnalyzer(matcher=_matcher()).analyze(
        skills, [_req("Python", Importance.NICE_TO_HAVE, SkillLevel.BEGINNER)]
    )
    assert [s.skill_name for s in result.strengths] == ["Go", "Rust"]


def test_quick_win_lands_in_immediate_recommendations():
    result = GapAnalyzer(matcher=_matcher()).analyze(
        [_skill("Python", SkillLevel.INTERMEDIATE)],
        [_req("Python", Importance.IMPORTANT, SkillLevel.ADVANCED)],
    )
    gap = result.skill_gaps[0]
    assert gap.level_gap == 1
    assert result.quick_wins == [gap]
    assert any(line.startswith("Python (quick win, ~2 mo)") for line in result.recommendations.immediate)


def test_transferable_skills_rank_same_category_first():
    result = GapAnalyzer(matcher=_matcher()).analyze(
        [_skill("JavaScript", SkillLevel.EXPERT, years=5)],
        [
            _req("TypeScript", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
            _req("React", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
        ],
    )
    scores = {t.to_skill_name: t.transferability_score for t in result.transferable_opportunities}
    assert scores == {"TypeScript": 0.8, "React": 0.7}
    assert result.transferable_opportunities[0].to_skill_name == "TypeScript"
    assert any("Leverage your JavaScript experience" in line for line in result.recommendations.immediate)


def test_analysis_is_deterministic_and_bounded():
    skills = [_skill("Python", SkillLevel.INTERMEDIATE), _skill("postgres", SkillLevel.ADVANCED)]
    requirements = [
        _req("Python", Importance.CRITICAL, SkillLevel.EXPERT),
        _req("AWS", Importance.IMPORTANT, SkillLevel.ADVANCED),
        _req("PostgreSQL", Importance.NICE_TO_HAVE, SkillLevel.INTERMEDIATE),
        _req("Machine Learning", Importance.IMPORTANT, SkillLevel.INTERMEDIATE),
    ]
    analyzer = GapAnalyzer(matcher=_matcher())
    first = analyzer.analyze(skills, requirements)
    second = analyzer.analyze(skills, requirements)
    assert [g.skill_name for g in first.skill_gaps] == [g.skill_name for g in second.skill_gaps]
    assert first.overall_match_percentage == second.overall_match_percentage
    assert 0 <= first.overall_match_percentage <= 100
    assert 0.0 <= first.metadata.analysis_confidence <= 1.0
    assert all(1 <= g.priority <= 10 for g in first.skill_gaps)
    assert all(g.time_to_competency >= 1 for g in first.skill_gaps)


def test_severity_rules():
    assert gap_severity(Importance.CRITICAL, 2, False) is GapSeverity.CRITICAL
    assert gap_severity(Importance.CRITICAL, 1, True) is GapSeverity.CRITICAL
    assert gap_severity(Importance.CRITICAL, 1, False) is GapSeverity.MODERATE
    assert gap_severity(Importance.IMPORTANT, 1, False) is GapSeverity.MODERATE
    assert gap_severity(Importance.IMPORTANT, 3, True) is GapSeverity.MODERATE
    assert gap_severity(Importance.NICE_TO_HAVE, 3, True) is GapSeverity.MINOR


def test_difficulty_time_and_priority_rules():
    settings = AnalysisSettings()
    assert learning_difficulty(1) is LearningDifficulty.EASY
    assert learning_difficulty(2) is LearningDifficulty.MODERATE
    assert learning_difficulty(4) is LearningDifficulty.HARD
    assert time_to_competency(1, "Programming", settings) == 2
    assert time_to_competency(2, "AI & Machine Learning", settings) == 6
    assert time_to_competency(0, "Programming", settings) == 1
    assert gap_priority(Importance.CRITICAL, GapSeverity.CRITICAL, 1.0, settings) == 10
    assert gap_priority(Importance.NICE_TO_HAVE, GapSeverity.MINOR, 0.0, settings) == 2


def test_invalid_records_raise_invalid_input():
    with pytest.raises(InvalidInputError):
        analyze_individual(
            [UserSkill(skill_name="Python", level=SkillLevel.ADVANCED, years_experience=-1)],
            [],
            matcher=_matcher(),
        )
    with pytest.raises(InvalidInputError):
        analyze_individual(
            [UserSkill(skill_name="Python", level="wizard")],
            [_req("Python", Importance.IMPORTANT, SkillLevel.ADVANCED)],
            matcher=_matcher(),
        )
    with pytest.raises(InvalidInputError):
        analyze_individual([], [SkillRequirement(skill=" ")], matcher=_matcher())


@pytest.mark.parametrize(
    "skill",
    [
        UserSkill(skill_name="Python", level=None),
        UserSkill(skill_name="Python", level=[3]),
        UserSkill(skill_name="Python", level=2.7),
        UserSkill(skill_name="Python", level=SkillLevel.ADVANCED, years_experience=None),
        UserSkill(skill_name="Python", level=SkillLevel.ADVANCED, confidence_score="high"),
    ],
)
def test_malformed_typed_records_raise_invalid_input(skill):
    with pytest.raises(InvalidInputError):
        analyze_individual([skill], [SkillRequirement("Python")], matcher=_matcher())


def test_skill_level_rejects_fractional_values():
    assert SkillLevel.parse(3) is SkillLevel.ADVANCED
    assert SkillLevel.parse(2.0) is SkillLevel.INTERMEDIATE
    with pytest.raises(ValueError):
        SkillLevel.parse(2.7)
    with pytest.raises(TypeError):
        SkillLevel.parse(None)


def test_individual_export_renders_levels_by_name():
    result = analyze_individual(
        [_skill("Python", SkillLevel.INTERMEDIATE)],
        [_req("Python", Importance.CRITICAL, SkillLevel.EXPERT)],
        matcher=_matcher(),
    )
    payload = export_individual(result)["analysis"]
    gap = payload["skill_gaps"][0]
    assert gap["current_level"] == "intermediate"
    assert gap["required_level"] == "expert"
    assert gap["gap_severity"] == "critical"
