from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace

import numpy as np

from skillgap.catalog import GENERAL_CATEGORY
from skillgap.config import AnalysisSettings
from skillgap.errors import InvalidInputError
from skillgap.matching import SkillMatcher
from skillgap.models import (
    GapAnalysisResult,
    GapMetadata,
    GapSeverity,
    Importance,
    LearningDifficulty,
    MatchedSkill,
    SkillGap,
    SkillLevel,
    SkillRequirement,
    SkillStrength,
    TransferableSkill,
    UserSkill,
)
from skillgap.parsers import validate_requirements, validate_user_skills
from skillgap.recommendations import build_gap_recommendations

logger = logging.getLogger(__name__)

IMPORTANCE_RANK = {
    Importance.NICE_TO_HAVE: 1,
    Importance.IMPORTANT: 2,
    Importance.CRITICAL: 3,
}


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ResolvedRequirement:
    requirement: SkillRequirement
    matched: MatchedSkill
    category: str


@dataclass(frozen=True)
class ResolvedUserSkill:
    skill: UserSkill
    matched: MatchedSkill
    level: SkillLevel
    category: str


def merge_requirements(
    requirements: list[SkillRequirement], matcher: SkillMatcher
) -> list[ResolvedRequirement]:
    """Collapse requirements naming the same canonical skill.

    The most important requirement wins (ties go to the higher minimum level)
    and keeps the highest extraction confidence seen for that skill.
    """
    merged: dict[str, ResolvedRequirement] = {}
    for requirement in requirements:
        requirement = replace(
            requirement,
            importance=Importance(requirement.importance),
            minimum_level=SkillLevel.parse(requirement.minimum_level),
        )
        matched = matcher.match(requirement.skill)
        existing = merged.get(matched.key)
        if existing is not None:
            kept = existing.requirement
            rank = (IMPORTANCE_RANK[requirement.importance], requirement.minimum_level)
            kept_rank = (IMPORTANCE_RANK[kept.importance], kept.minimum_level)
            winner = requirement if rank > kept_rank else kept
            requirement = replace(winner, confidence=max(kept.confidence, requirement.confidence))
            logger.debug("Merged duplicate requirement for %s", matched.canonical_name)
        merged[matched.key] = ResolvedRequirement(
            requirement=requirement,
            matched=matched,
            category=matcher.category_for(requirement.skill, requirement.category),
        )
    return list(merged.values())


def _index_user_skills(user_skills: list[UserSkill], matcher: SkillMatcher) -> dict[str, ResolvedUserSkill]:
    index: dict[str, ResolvedUserSkill] = {}
    for skill in user_skills:
        matched = matcher.match(skill.skill_name)
        level = SkillLevel.parse(skill.level)
        existing = index.get(matched.key)
        if existing is None or level > existing.level:
            index[matched.key] = ResolvedUserSkill(
                skill=skill,
                matched=matched,
                level=level,
                category=matcher.category_for(skill.skill_name, skill.skill_category),
            )
    return index


def gap_severity(importance: Importance, level_gap: int, missing: bool) -> GapSeverity:
    if importance is Importance.CRITICAL and (level_gap >= 2 or missing):
        return GapSeverity.CRITICAL
    if level_gap == 1 and importance in (Importance.CRITICAL, Importance.IMPORTANT):
        return GapSeverity.MODERATE
    if level_gap >= 2 and importance is Importance.IMPORTANT:
        return GapSeverity.MODERATE
    return GapSeverity.MINOR


def learning_difficulty(level_gap: int) -> LearningDifficulty:
    if level_gap <= 1:
        return LearningDifficulty.EASY
    if level_gap == 2:
        return LearningDifficulty.MODERATE
    return LearningDifficulty.HARD


def time_to_competency(level_gap: int, category: str, settings: AnalysisSettings) -> int:
    multiplier = settings.slow_category_multiplier if category in settings.slow_categories else 1.0
    return max(1, int(round(level_gap * settings.base_months_per_level * multiplier)))


def gap_priority(
    importance: Importance, severity: GapSeverity, confidence: float, settings: AnalysisSettings
) -> int:
    raw = (
        settings.importance_priority_weights[importance.value]
        + settings.severity_priority_weights[severity.value]
        + _clamp(confidence)
    )
    return int(max(1, min(10, round(raw))))


def _requirement_confidence(resolved: ResolvedRequirement, user: ResolvedUserSkill | None) -> float:
    confidence = resolved.requirement.confidence * resolved.matched.confidence
    if user is not None:
        confidence = (confidence + user.skill.confidence_score) / 2.0
    return round(_clamp(confidence), 3)


def _transferability(
    gap: SkillGap,
    gap_key: str,
    user_index: dict[str, ResolvedUserSkill],
    matcher: SkillMatcher,
    settings: AnalysisSettings,
) -> list[TransferableSkill]:
    found: list[TransferableSkill] = []
    for key, user in user_index.items():
        if key == gap_key:
            continue
        if user.category == gap.category and gap.category != GENERAL_CATEGORY:
            base = settings.transfer_same_category_base
            reasoning = (
                f"Both {user.matched.canonical_name} and {gap.skill_name} are {gap.category} skills, "
                "so much of the existing knowledge carries over."
            )
        else:
            relation = matcher.catalog.relation_weight(user.category, gap.category)
            if relation <= 0:
                continue
            base = settings.transfer_same_category_base * relation
            reasoning = (
                f"{user.category} experience with {user.matched.canonical_name} shares foundations "
                f"with {gap.category} work such as {gap.skill_name}."
            )
        bonus = min(settings.transfer_years_cap, settings.transfer_per_year * user.skill.years_experience)
        score = round(_clamp(base + bonus), 2)
        if score >= settings.transfer_min_score:
            found.append(
                TransferableSkill(
                    from_skill=user.skill,
                    to_skill_name=gap.skill_name,
                    to_category=gap.category,
                    transferability_score=score,
                    reasoning=reasoning,
                )
            )
    return found


class GapAnalyzer:
    """Compare one person's skills with a list of requirements."""

    def __init__(self, matcher: SkillMatcher | None = None, settings: AnalysisSettings | None = None):
        self.settings = settings or (matcher.settings if matcher is not None else AnalysisSettings())
        self.matcher = matcher or SkillMatcher(settings=self.settings)

    def analyze(self, user_skills: list[UserSkill], requirements: list[SkillRequirement]) -> GapAnalysisResult:
        started = time.perf_counter()
        settings = self.settings
        user_index = _index_user_skills(user_skills, self.matcher)
        resolved_requirements = merge_requirements(requirements, self.matcher)

        if not resolved_requirements:
            strengths = [
                SkillStrength(
                    skill_name=user.matched.canonical_name,
                    category=user.category,
                    level=user.level,
                    years_experience=user.skill.years_experience,
                    required=False,
                    source=user.skill,
                )
                for user in user_index.values()
            ]
            return self._result(100, [], strengths, [], [1.0], len(user_skills), started)

        keyed_gaps: list[tuple[str, SkillGap]] = []
        required_strengths: list[SkillStrength] = []
        confidences: list[float] = []
        total_weight = 0
        satisfied_weight = 0

        for resolved in resolved_requirements:
            requirement = resolved.requirement
            weight = settings.importance_match_weights[requirement.importance.value]
            total_weight += weight
            user = user_index.get(resolved.matched.key)
            confidence = _requirement_confidence(resolved, user)
            confidences.append(confidence)

            if user is not None and user.level >= requirement.minimum_level:
                satisfied_weight += weight
                required_strengths.append(
                    SkillStrength(
                        skill_name=resolved.matched.canonical_name,
                        category=resolved.category,
                        level=user.level,
                        years_experience=user.skill.years_experience,
                        required=True,
                        source=user.skill,
                    )
                )
                continue

            current = user.level if user is not None else None
            level_gap = int(requirement.minimum_level) - (int(current) if current is not None else 0)
            severity = gap_severity(requirement.importance, level_gap, current is None)
            keyed_gaps.append(
                (
                    resolved.matched.key,
                    SkillGap(
                        skill_name=resolved.matched.canonical_name,
                        category=resolved.category,
                        current_level=current,
                        required_level=requirement.minimum_level,
                        level_gap=level_gap,
                        gap_severity=severity,
                        learning_difficulty=learning_difficulty(level_gap),
                        time_to_competency=time_to_competency(level_gap, resolved.category, settings),
                        priority=gap_priority(requirement.importance, severity, confidence, settings),
                        importance=requirement.importance,
                        confidence=confidence,
                    ),
                )
            )

        required_keys = {resolved.matched.key for resolved in resolved_requirements}
        extra_strengths = sorted(
            (
                SkillStrength(
                    skill_name=user.matched.canonical_name,
                    category=user.category,
                    level=user.level,
                    years_experience=user.skill.years_experience,
                    required=False,
                    source=user.skill,
                )
                for key, user in user_index.items()
                if key not in required_keys and user.level >= settings.strength_min_level
            ),
            key=lambda s: (-int(s.level), s.skill_name),
        )

        keyed_gaps.sort(key=lambda item: (-item[1].priority, item[1].skill_name))
        transferable: list[TransferableSkill] = []
        for key, gap in keyed_gaps:
            transferable.extend(_transferability(gap, key, user_index, self.matcher, settings))
        transferable.sort(key=lambda t: (-t.transferability_score, t.to_skill_name, t.from_skill.skill_name))

        match_pct = int(round(_clamp(satisfied_weight / total_weight) * 100.0))
        return self._result(
            match_pct,
            [gap for _, gap in keyed_gaps],
            required_strengths + extra_strengths,
            transferable,
            confidences,
            len(user_skills) + len(requirements),
            started,
        )

    def _result(
        self,
        match_pct: int,
        gaps: list[SkillGap],
        strengths: list[SkillStrength],
        transferable: list[TransferableSkill],
        confidences: list[float],
        total_analyzed: int,
        started: float,
    ) -> GapAnalysisResult:
        settings = self.settings
        critical_gaps = [gap for gap in gaps if gap.gap_severity is GapSeverity.CRITICAL]
        quick_wins = [
            gap for gap in gaps if gap.learning_difficulty is LearningDifficulty.EASY and gap.level_gap <= 1
        ]
        long_term_goals = [
            gap
            for gap in gaps
            if gap.time_to_competency > settings.short_term_max_months
            or gap.learning_difficulty is LearningDifficulty.HARD
        ]
        recommendations = build_gap_recommendations(gaps, critical_gaps, quick_wins, transferable, settings)
        return GapAnalysisResult(
            overall_match_percentage=max(0, min(100, match_pct)),
            skill_gaps=gaps,
            strengths=strengths,
            critical_gaps=critical_gaps,
            quick_wins=quick_wins,
            long_term_goals=long_term_goals,
            transferable_opportunities=transferable,
            recommendations=recommendations,
            metadata=GapMetadata(
                total_skills_analyzed=total_analyzed,
                gaps_identified=len(gaps),
                strengths_identified=len(strengths),
                analysis_confidence=round(float(np.mean(confidences)), 3),
                processing_time_ms=round((time.perf_counter() - started) * 1000.0, 3),
            ),
        )


def analyze_individual(
    user_skills: list[UserSkill],
    requirements: list[SkillRequirement],
    matcher: SkillMatcher | None = None,
    settings: AnalysisSettings | None = None,
) -> GapAnalysisResult:
    validate_user_skills(user_skills)
    validate_requirements(requirements)
    try:
        return GapAnalyzer(matcher=matcher, settings=settings).analyze(user_skills, requirements)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Malformed skill record: {exc}") from exc
