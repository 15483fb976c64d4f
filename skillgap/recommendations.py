from __future__ import annotations

from skillgap.config import AnalysisSettings
from skillgap.models import (
    GapRecommendations,
    MemberAnalysis,
    SkillGap,
    Solution,
    TeamGap,
    TeamStrength,
    TransferableSkill,
)

UPSKILLING_ACTIONS = {
    "Programming": (
        "Work through a focused {skill} tutorial and ship one small exercise.",
        "Build a portfolio project in {skill} and get it code-reviewed.",
        "Own a production {skill} component end to end.",
    ),
    "Frameworks & Libraries": (
        "Follow the official {skill} getting-started guide and rebuild its sample app.",
        "Build a practical project with {skill} to gain hands-on experience.",
        "Lead a feature built on {skill} and document its patterns for the team.",
    ),
    "Databases": (
        "Model a small schema in {skill} and practice the core queries.",
        "Tune queries and indexes on a realistic {skill} dataset.",
        "Design and operate a {skill} deployment with backups and monitoring.",
    ),
    "Cloud & DevOps": (
        "Complete a free-tier lab deploying a service with {skill}.",
        "Pursue an associate-level {skill} certification for credibility.",
        "Automate a full delivery pipeline around {skill} in a real environment.",
    ),
    "AI & Machine Learning": (
        "Reproduce a reference {skill} notebook end to end.",
        "Train and evaluate a {skill} model on a domain dataset.",
        "Take a {skill} model from prototype to a monitored production service.",
    ),
    "Data Science & Analytics": (
        "Answer three business questions with {skill} on sample data.",
        "Build a recurring {skill} report that stakeholders actually use.",
        "Lead an analysis initiative grounded in {skill}.",
    ),
    "Soft Skills": (
        "Ask a peer for feedback on your {skill} this week.",
        "Practice {skill} deliberately in weekly team rituals.",
        "Mentor others on {skill}.",
    ),
}


def _actions_for(gap: SkillGap) -> tuple[str, str, str]:
    templates = UPSKILLING_ACTIONS.get(
        gap.category,
        (
            "Do targeted practice for {skill}.",
            "Build one project artifact focused on {skill}.",
            "Demonstrate advanced application of {skill}.",
        ),
    )
    return tuple(template.format(skill=gap.skill_name) for template in templates)


def build_gap_recommendations(
    gaps: list[SkillGap],
    critical_gaps: list[SkillGap],
    quick_wins: list[SkillGap],
    transferable: list[TransferableSkill],
    settings: AnalysisSettings,
) -> GapRecommendations:
    immediate: list[str] = []
    short_term: list[str] = []
    long_term: list[str] = []

    if critical_gaps:
        names = ", ".join(gap.skill_name for gap in critical_gaps[:3])
        immediate.append(f"Focus immediately on critical skills: {names}")

    quick_win_names = {gap.skill_name for gap in quick_wins}
    for gap in gaps:
        first, second, third = _actions_for(gap)
        months = gap.time_to_competency
        if months <= settings.immediate_max_months or gap.skill_name in quick_win_names:
            immediate.append(f"{gap.skill_name} (quick win, ~{months} mo): {first}")
        elif months <= settings.short_term_max_months:
            short_term.append(f"{gap.skill_name} (~{months} mo): {second}")
        else:
            long_term.append(f"{gap.skill_name} (~{months} mo): {third}")

    for item in transferable[:2]:
        immediate.append(
            f"Leverage your {item.from_skill.skill_name} experience to learn {item.to_skill_name}"
        )

    return GapRecommendations(immediate=immediate, short_term=short_term, long_term=long_term)


def build_training_priorities(team_gaps: list[TeamGap], limit: int = 5) -> list[str]:
    lines = []
    for gap in team_gaps:
        if gap.recommended_solution is Solution.TRAINING:
            lines.append(
                f"Provide {gap.skill_name} training for {gap.members_needing} team members "
                f"({gap.percentage_needing}% of team, ~{gap.max_time_to_competency} months)"
            )
        elif gap.recommended_solution is Solution.MIXED:
            lines.append(
                f"Upskill {gap.members_needing} team members in {gap.skill_name} using in-house "
                f"practitioners and back it with one targeted hire"
            )
    return lines[:limit]


def build_hiring_priorities(team_gaps: list[TeamGap], limit: int = 5) -> list[str]:
    return [
        f"Hire for {gap.skill_name}: nobody on the team is above beginner level "
        f"({gap.percentage_needing}% of team lacks it)"
        for gap in team_gaps
        if gap.recommended_solution is Solution.HIRING
    ][:limit]


def build_knowledge_sharing(
    team_strengths: list[TeamStrength],
    mentors: dict[str, list[str]],
    member_names: dict[str, str],
    limit: int = 3,
) -> list[str]:
    lines = []
    for strength in team_strengths[:limit]:
        holders = ", ".join(member_names.get(mid, mid) for mid in strength.member_ids)
        lines.append(
            f"Pair {holders} with teammates to spread {strength.skill_name} "
            f"({strength.percentage_having}% coverage, {strength.expertise_level.label} level)"
        )
    for skill_name, names in mentors.items():
        if names:
            lines.append(f"Have {', '.join(names)} mentor the rest of the team on {skill_name}")
    return lines


def build_role_optimization(member_analyses: list[MemberAnalysis], threshold: int) -> list[str]:
    return [
        f"Review role fit or training plan for {analysis.member_name} "
        f"({analysis.overall_match}% project match)"
        for analysis in member_analyses
        if not analysis.failed and analysis.overall_match < threshold
    ]
