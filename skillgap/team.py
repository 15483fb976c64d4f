from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone

import numpy as np
import pandas as pd

from skillgap.budget import (
    TRAINING_PATHS,
    allocate_budget,
    estimate_budget,
    hiring_cost_for_category,
    hiring_cost_per_position,
    training_costs_by_skill,
)
from skillgap.career_connectors import RequirementExtractor, build_training_links
from skillgap.config import AnalysisSettings
from skillgap.errors import AggregationError, SkillGapError
from skillgap.matching import SkillMatcher
from skillgap.models import (
    Coverage,
    GapRecommendations,
    Importance,
    MemberAnalysis,
    MemberAnalysisFailed,
    MemberAnalysisOk,
    MemberOutcome,
    ProjectRequirements,
    SkillLevel,
    SkillRequirement,
    Solution,
    TeamAnalysisResult,
    TeamGap,
    TeamGapSeverity,
    TeamMember,
    TeamMetadata,
    TeamRecommendations,
    TeamStrength,
    TeamSummary,
)
from skillgap.parsers import validate_requirements, validate_team
from skillgap.recommendations import (
    build_hiring_priorities,
    build_knowledge_sharing,
    build_role_optimization,
    build_training_priorities,
)
from skillgap.scoring import IMPORTANCE_RANK, GapAnalyzer, ResolvedRequirement, merge_requirements

logger = logging.getLogger(__name__)

_IMPORTANCE_BY_RANK = {rank: importance for importance, rank in IMPORTANCE_RANK.items()}

GAP_COLUMNS = [
    "member_id",
    "skill_name",
    "category",
    "importance_rank",
    "current_level",
    "time_to_competency",
    "hourly_rate",
]
STRENGTH_COLUMNS = ["member_id", "skill_name", "level"]


def _expertise_level(mean_level: float) -> SkillLevel:
    if mean_level >= 3.5:
        return SkillLevel.EXPERT
    if mean_level >= 2.5:
        return SkillLevel.ADVANCED
    if mean_level >= 1.5:
        return SkillLevel.INTERMEDIATE
    return SkillLevel.BEGINNER


def _ordered_ids(ids: pd.Series) -> list[str]:
    return list(dict.fromkeys(ids))


def _member_analysis(outcome: MemberOutcome) -> MemberAnalysis:
    member = outcome.member
    if isinstance(outcome, MemberAnalysisFailed):
        return MemberAnalysis(
            member_id=member.id,
            member_name=member.display_name,
            role=member.role,
            department=member.department,
            overall_match=0,
            skill_gaps=[],
            strengths=[],
            recommendations=GapRecommendations(),
            analysis_confidence=0.0,
            failed=True,
            failure_reason=outcome.reason,
        )
    result = outcome.result
    return MemberAnalysis(
        member_id=member.id,
        member_name=member.display_name,
        role=member.role,
        department=member.department,
        overall_match=result.overall_match_percentage,
        skill_gaps=result.skill_gaps,
        strengths=result.strengths,
        recommendations=result.recommendations,
        analysis_confidence=result.metadata.analysis_confidence,
    )


class TeamAggregator:
    """Run a gap analysis per team member and fold the results together.

    Members are analyzed concurrently on a bounded thread pool. A member whose
    analysis raises is kept as a failed outcome so the rest of the team is
    still reported.
    """

    def __init__(
        self,
        analyzer: GapAnalyzer | None = None,
        extractor: RequirementExtractor | None = None,
        settings: AnalysisSettings | None = None,
    ):
        self.settings = settings or (analyzer.settings if analyzer is not None else AnalysisSettings())
        self.analyzer = analyzer or GapAnalyzer(settings=self.settings)
        self.extractor = extractor

    @property
    def matcher(self) -> SkillMatcher:
        return self.analyzer.matcher

    def analyze(self, members: list[TeamMember], project: ProjectRequirements) -> TeamAnalysisResult:
        started = time.perf_counter()
        validate_team(members, project)
        requirements = self.resolve_requirements(project)
        resolved = merge_requirements(requirements, self.matcher)

        outcomes = self.analyze_members(members, [item.requirement for item in resolved])
        failed = [outcome for outcome in outcomes if isinstance(outcome, MemberAnalysisFailed)]
        if failed:
            logger.warning(
                "Team analysis for %s degraded: %d of %d member analyses failed",
                project.name,
                len(failed),
                len(members),
            )

        try:
            result = self._aggregate(members, project, resolved, outcomes, started)
        except SkillGapError:
            raise
        except Exception as exc:
            logger.exception("Aggregating team analysis for %s failed", project.name)
            raise AggregationError(f"Team aggregation failed: {exc}", project=project.name) from exc

        logger.info(
            "Analyzed team of %d for %s: %d team gaps, %d team strengths",
            len(members),
            project.name,
            len(result.team_gaps),
            len(result.team_strengths),
        )
        return result

    def resolve_requirements(self, project: ProjectRequirements) -> list[SkillRequirement]:
        if project.skill_requirements:
            return list(project.skill_requirements)
        if project.required_skills:
            return [
                SkillRequirement(
                    skill=name,
                    importance=Importance.IMPORTANT,
                    minimum_level=SkillLevel.INTERMEDIATE,
                    category=self.matcher.category_for(name),
                    context=f"Listed as required for project {project.name}",
                )
                for name in project.required_skills
            ]
        if self.extractor is not None and project.description:
            extracted = self.extractor.extract(project.description, project.name)
            validate_requirements(extracted)
            return extracted
        return []

    def analyze_members(
        self, members: list[TeamMember], requirements: list[SkillRequirement]
    ) -> list[MemberOutcome]:
        outcomes: list[MemberOutcome | None] = [None] * len(members)
        workers = max(1, min(self.settings.max_workers, len(members)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self._analyze_member, member, requirements): index
                for index, member in enumerate(members)
            }
            for future in as_completed(future_to_index):
                outcomes[future_to_index[future]] = future.result()
        return outcomes

    def _analyze_member(self, member: TeamMember, requirements: list[SkillRequirement]) -> MemberOutcome:
        try:
            return MemberAnalysisOk(member=member, result=self.analyzer.analyze(member.skills, requirements))
        except Exception as exc:
            logger.warning("Failed to analyze member %s: %s", member.id, exc)
            return MemberAnalysisFailed(member=member, reason=f"{type(exc).__name__}: {exc}")

    def _aggregate(
        self,
        members: list[TeamMember],
        project: ProjectRequirements,
        resolved: list[ResolvedRequirement],
        outcomes: list[MemberOutcome],
        started: float,
    ) -> TeamAnalysisResult:
        settings = self.settings
        total_members = len(members)
        analyses = [_member_analysis(outcome) for outcome in outcomes]
        member_names = {member.id: member.display_name for member in members}
        hourly_rates = {member.id: member.hourly_rate or 0.0 for member in members}

        gap_rows = pd.DataFrame(
            [
                {
                    "member_id": analysis.member_id,
                    "skill_name": gap.skill_name,
                    "category": gap.category,
                    "importance_rank": IMPORTANCE_RANK[gap.importance],
                    "current_level": int(gap.current_level) if gap.current_level is not None else 0,
                    "time_to_competency": gap.time_to_competency,
                    "hourly_rate": hourly_rates[analysis.member_id],
                }
                for analysis in analyses
                for gap in analysis.skill_gaps
            ],
            columns=GAP_COLUMNS,
        )
        strength_rows = pd.DataFrame(
            [
                {"member_id": analysis.member_id, "skill_name": strength.skill_name, "level": int(strength.level)}
                for analysis in analyses
                for strength in analysis.strengths
            ],
            columns=STRENGTH_COLUMNS,
        )

        proficient = self._proficient_members(gap_rows, strength_rows)
        team_gaps = self._team_gaps(gap_rows, proficient, members, total_members)
        team_strengths = self._team_strengths(strength_rows, total_members)

        required_names = {item.matched.canonical_name for item in resolved}
        covered = required_names & set(strength_rows["skill_name"])
        coverage_pct = int(round(100.0 * len(covered) / len(required_names))) if required_names else 100

        summary = TeamSummary(
            total_members=total_members,
            overall_match=int(round(float(np.mean([a.overall_match for a in analyses])))),
            critical_gaps_count=sum(1 for gap in team_gaps if gap.severity is TeamGapSeverity.CRITICAL),
            team_strengths_count=len(team_strengths),
            skill_coverage_percentage=coverage_pct,
        )

        budget = estimate_budget(team_gaps)
        mentors = {
            gap.skill_name: [member_names[mid] for mid in proficient.get(gap.skill_name, [])]
            for gap in team_gaps
            if gap.recommended_solution is Solution.MIXED
        }
        recommendations = TeamRecommendations(
            hiring_priorities=build_hiring_priorities(team_gaps),
            training_priorities=build_training_priorities(team_gaps),
            knowledge_sharing=build_knowledge_sharing(
                team_strengths, mentors, member_names, limit=settings.knowledge_sharing_limit
            ),
            role_optimization=build_role_optimization(analyses, settings.role_match_threshold),
            budget_allocation=allocate_budget(budget, settings),
            learning_resources={
                gap.skill_name: build_training_links([gap.skill_name])
                for gap in team_gaps
                if gap.recommended_solution in TRAINING_PATHS
            },
        )

        succeeded = [a.analysis_confidence for a in analyses if not a.failed]
        failed_ids = [a.member_id for a in analyses if a.failed]
        confidence = float(np.mean(succeeded)) if succeeded else 0.0
        if failed_ids:
            confidence *= settings.failure_confidence_discount

        return TeamAnalysisResult(
            analysis_id=str(uuid.uuid4()),
            project=project,
            team_summary=summary,
            member_analyses=analyses,
            team_gaps=team_gaps,
            team_strengths=team_strengths,
            recommendations=recommendations,
            budget_estimates=budget,
            metadata=TeamMetadata(
                team_size=total_members,
                processing_time_ms=round((time.perf_counter() - started) * 1000.0, 3),
                analysis_timestamp=datetime.now(timezone.utc).isoformat(),
                project_skills_analyzed=len(resolved),
                analysis_confidence=round(confidence, 2),
                failed_members=failed_ids,
            ),
        )

    def _proficient_members(self, gap_rows: pd.DataFrame, strength_rows: pd.DataFrame) -> dict[str, list[str]]:
        """Members holding each skill above beginner level, in team order."""
        frames = [
            gap_rows[["member_id", "skill_name", "current_level"]].rename(columns={"current_level": "level"}),
            strength_rows[["member_id", "skill_name", "level"]],
        ]
        frames = [frame for frame in frames if not frame.empty]
        if not frames:
            return {}
        levels = pd.concat(frames, ignore_index=True)
        above_beginner = levels[levels["level"] > int(SkillLevel.BEGINNER)]
        if above_beginner.empty:
            return {}
        grouped = above_beginner.groupby("skill_name", sort=False)["member_id"]
        return {skill: _ordered_ids(ids) for skill, ids in grouped}

    def _team_gaps(
        self,
        gap_rows: pd.DataFrame,
        proficient: dict[str, list[str]],
        members: list[TeamMember],
        total_members: int,
    ) -> list[TeamGap]:
        if gap_rows.empty:
            return []
        settings = self.settings
        stats = gap_rows.groupby("skill_name", sort=False).agg(
            members_needing=("member_id", "nunique"),
            category=("category", "first"),
            importance_rank=("importance_rank", "max"),
            average_time=("time_to_competency", "mean"),
            max_time=("time_to_competency", "max"),
        )
        member_ids = gap_rows.groupby("skill_name", sort=False)["member_id"].agg(_ordered_ids)
        training_costs = training_costs_by_skill(gap_rows, settings)
        hiring_cost = hiring_cost_per_position(members, settings)

        team_gaps: list[TeamGap] = []
        for skill_name, row in stats.iterrows():
            needing = int(row["members_needing"])
            ratio = needing / total_members
            if ratio < settings.team_gap_threshold:
                continue
            importance = _IMPORTANCE_BY_RANK[int(row["importance_rank"])]
            if importance is Importance.CRITICAL or ratio >= settings.team_critical_threshold:
                severity = TeamGapSeverity.CRITICAL
            else:
                severity = TeamGapSeverity.MODERATE
            average_time = float(row["average_time"])
            team_gaps.append(
                TeamGap(
                    skill_name=skill_name,
                    category=row["category"],
                    importance=importance,
                    members_needing=needing,
                    percentage_needing=int(round(100.0 * ratio)),
                    severity=severity,
                    estimated_training_cost=float(training_costs.get(skill_name, 0.0)),
                    estimated_hiring_cost=hiring_cost_for_category(hiring_cost, row["category"], settings),
                    recommended_solution=self._recommend_solution(
                        severity, bool(proficient.get(skill_name)), average_time
                    ),
                    member_ids=list(member_ids[skill_name]),
                    average_time_to_competency=round(average_time, 2),
                    max_time_to_competency=int(row["max_time"]),
                )
            )
        team_gaps.sort(
            key=lambda gap: (-gap.members_needing, gap.severity is not TeamGapSeverity.CRITICAL, gap.skill_name)
        )
        return team_gaps

    def _recommend_solution(self, severity: TeamGapSeverity, has_proficiency: bool, average_time: float) -> Solution:
        if severity is TeamGapSeverity.CRITICAL:
            return Solution.MIXED if has_proficiency else Solution.HIRING
        if average_time <= self.settings.training_max_months:
            return Solution.TRAINING
        return Solution.MIXED

    def _team_strengths(self, strength_rows: pd.DataFrame, total_members: int) -> list[TeamStrength]:
        if strength_rows.empty:
            return []
        settings = self.settings
        stats = strength_rows.groupby("skill_name", sort=False).agg(
            members_having=("member_id", "nunique"),
            mean_level=("level", "mean"),
        )
        member_ids = strength_rows.groupby("skill_name", sort=False)["member_id"].agg(_ordered_ids)

        strengths: list[TeamStrength] = []
        for skill_name, row in stats.iterrows():
            having = int(row["members_having"])
            ratio = having / total_members
            if ratio < settings.team_strength_threshold:
                continue
            strengths.append(
                TeamStrength(
                    skill_name=skill_name,
                    members_having=having,
                    percentage_having=int(round(100.0 * ratio)),
                    coverage=Coverage.EXCELLENT if ratio >= settings.excellent_coverage_threshold else Coverage.GOOD,
                    expertise_level=_expertise_level(float(row["mean_level"])),
                    member_ids=list(member_ids[skill_name]),
                )
            )
        strengths.sort(key=lambda s: (-s.members_having, -int(s.expertise_level), s.skill_name))
        return strengths


def analyze_team(
    members: list[TeamMember],
    project: ProjectRequirements,
    matcher: SkillMatcher | None = None,
    extractor: RequirementExtractor | None = None,
    settings: AnalysisSettings | None = None,
) -> TeamAnalysisResult:
    analyzer = GapAnalyzer(matcher=matcher, settings=settings)
    return TeamAggregator(analyzer=analyzer, extractor=extractor, settings=settings).analyze(members, project)
