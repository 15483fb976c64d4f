from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Union


class SkillLevel(IntEnum):
    BEGINNER = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    EXPERT = 4

    @classmethod
    def parse(cls, value: SkillLevel | str | int) -> SkillLevel:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown skill level: {value!r}") from None
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"Skill level must be a whole number, got {value!r}")
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Unsupported skill level type: {type(value).__name__}")
        return cls(int(value))

    @property
    def label(self) -> str:
        return self.name.lower()


class Importance(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    NICE_TO_HAVE = "nice-to-have"


class GapSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    CRITICAL = "critical"


class LearningDifficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class MatchType(str, Enum):
    EXACT = "exact"
    SYNONYM = "synonym"
    FUZZY = "fuzzy"
    NEW = "new"


class TeamGapSeverity(str, Enum):
    MODERATE = "moderate"
    CRITICAL = "critical"


class Coverage(str, Enum):
    GOOD = "good"
    EXCELLENT = "excellent"


class Solution(str, Enum):
    TRAINING = "training"
    HIRING = "hiring"
    MIXED = "mixed"


class Approach(str, Enum):
    TRAINING_FOCUSED = "training_focused"
    HIRING_FOCUSED = "hiring_focused"
    MIXED_APPROACH = "mixed_approach"


class ProjectPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UserSkill:
    skill_name: str
    level: SkillLevel
    skill_category: str = "General"
    years_experience: float = 0.0
    confidence_score: float = 0.5
    certifications: tuple[str, ...] = ()


@dataclass(frozen=True)
class SkillRequirement:
    skill: str
    importance: Importance = Importance.IMPORTANT
    minimum_level: SkillLevel = SkillLevel.INTERMEDIATE
    category: str = "General"
    confidence: float = 1.0
    context: str = ""


@dataclass(frozen=True)
class MatchedSkill:
    key: str
    canonical_name: str
    category: str
    confidence: float
    match_type: MatchType


@dataclass(frozen=True)
class SkillGap:
    skill_name: str
    category: str
    current_level: SkillLevel | None
    required_level: SkillLevel
    level_gap: int
    gap_severity: GapSeverity
    learning_difficulty: LearningDifficulty
    time_to_competency: int
    priority: int
    importance: Importance
    confidence: float

    @property
    def missing(self) -> bool:
        return self.current_level is None


@dataclass(frozen=True)
class SkillStrength:
    skill_name: str
    category: str
    level: SkillLevel
    years_experience: float
    required: bool
    source: UserSkill


@dataclass(frozen=True)
class TransferableSkill:
    from_skill: UserSkill
    to_skill_name: str
    to_category: str
    transferability_score: float
    reasoning: str


@dataclass(frozen=True)
class GapRecommendations:
    immediate: list[str] = field(default_factory=list)
    short_term: list[str] = field(default_factory=list)
    long_term: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GapMetadata:
    total_skills_analyzed: int
    gaps_identified: int
    strengths_identified: int
    analysis_confidence: float
    processing_time_ms: float


@dataclass(frozen=True)
class GapAnalysisResult:
    overall_match_percentage: int
    skill_gaps: list[SkillGap]
    strengths: list[SkillStrength]
    critical_gaps: list[SkillGap]
    quick_wins: list[SkillGap]
    long_term_goals: list[SkillGap]
    transferable_opportunities: list[TransferableSkill]
    recommendations: GapRecommendations
    metadata: GapMetadata


@dataclass(frozen=True)
class TeamMember:
    id: str
    skills: list[UserSkill]
    name: str | None = None
    role: str | None = None
    department: str | None = None
    salary: float | None = None
    hourly_rate: float | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"Member {self.id}"


@dataclass(frozen=True)
class ProjectRequirements:
    name: str
    required_skills: list[str] = field(default_factory=list)
    description: str | None = None
    timeline: str | None = None
    priority: ProjectPriority = ProjectPriority.MEDIUM
    budget: float | None = None
    skill_requirements: list[SkillRequirement] | None = None


@dataclass(frozen=True)
class MemberAnalysisOk:
    member: TeamMember
    result: GapAnalysisResult


@dataclass(frozen=True)
class MemberAnalysisFailed:
    member: TeamMember
    reason: str


MemberOutcome = Union[MemberAnalysisOk, MemberAnalysisFailed]


@dataclass(frozen=True)
class MemberAnalysis:
    member_id: str
    member_name: str
    role: str | None
    department: str | None
    overall_match: int
    skill_gaps: list[SkillGap]
    strengths: list[SkillStrength]
    recommendations: GapRecommendations
    analysis_confidence: float
    failed: bool = False
    failure_reason: str | None = None


@dataclass(frozen=True)
class TeamGap:
    skill_name: str
    category: str
    importance: Importance
    members_needing: int
    percentage_needing: int
    severity: TeamGapSeverity
    estimated_training_cost: float
    estimated_hiring_cost: float
    recommended_solution: Solution
    member_ids: list[str]
    average_time_to_competency: float
    max_time_to_competency: int


@dataclass(frozen=True)
class TeamStrength:
    skill_name: str
    members_having: int
    percentage_having: int
    coverage: Coverage
    expertise_level: SkillLevel
    member_ids: list[str]


@dataclass(frozen=True)
class BudgetAllocation:
    training_percentage: int
    hiring_percentage: int
    total_budget_needed: float


@dataclass(frozen=True)
class TeamRecommendations:
    hiring_priorities: list[str]
    training_priorities: list[str]
    knowledge_sharing: list[str]
    role_optimization: list[str]
    budget_allocation: BudgetAllocation
    learning_resources: dict[str, list[dict[str, str]]] = field(default_factory=dict)


@dataclass(frozen=True)
class TrainingCosts:
    total: float
    per_skill: dict[str, float]
    timeline_months: int


@dataclass(frozen=True)
class HiringCosts:
    total: float
    per_skill: dict[str, float]
    positions_needed: int


@dataclass(frozen=True)
class BudgetEstimate:
    training_costs: TrainingCosts
    hiring_costs: HiringCosts
    recommended_approach: Approach
    roi_timeline_months: int


@dataclass(frozen=True)
class TeamSummary:
    total_members: int
    overall_match: int
    critical_gaps_count: int
    team_strengths_count: int
    skill_coverage_percentage: int


@dataclass(frozen=True)
class TeamMetadata:
    team_size: int
    processing_time_ms: float
    analysis_timestamp: str
    project_skills_analyzed: int
    analysis_confidence: float
    failed_members: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TeamAnalysisResult:
    analysis_id: str
    project: ProjectRequirements
    team_summary: TeamSummary
    member_analyses: list[MemberAnalysis]
    team_gaps: list[TeamGap]
    team_strengths: list[TeamStrength]
    recommendations: TeamRecommendations
    budget_estimates: BudgetEstimate
    metadata: TeamMetadata
