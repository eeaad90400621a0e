"""
Tuning constants for the issue analytics heuristics.

None of these numbers come from a model; they are rules of thumb. They are
exposed as configuration so a team can retune them without touching code.
The defaults reproduce the dashboard's documented behaviour.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from agent_dashboard.enums import ComplexityLevel


class ComplexityWeights(BaseModel):
    """Score contributions used by the complexity scorer."""

    bug: int = Field(default=1, description="Title mentions 'bug'")
    feature: int = Field(default=2, description="Title mentions 'feat' or 'feature'")
    refactor: int = Field(default=2, description="Title mentions 'refactor'")
    long_body: int = Field(default=1, description="Body longer than long_body_chars")
    long_body_chars: int = Field(default=500, ge=0)
    checklist: int = Field(default=1, description="Body contains 'TODO' or '- [ ]'")
    integration: int = Field(default=2, description="Body mentions API, database or integration")
    enhancement_label: int = Field(default=2)
    documentation_label: int = Field(default=-1)
    urgency_multiplier: float = Field(default=1.5, gt=0, description="Applied for urgent/critical labels")
    confidence: float = Field(default=0.7, ge=0.0, le=1.0, description="Scorer confidence factor")
    simple_max_score: int = Field(default=2, description="Scores up to this value are simple")
    medium_max_score: int = Field(default=5, description="Scores up to this value are medium")

    @model_validator(mode="after")
    def validate_levels(self) -> ComplexityWeights:
        if self.simple_max_score >= self.medium_max_score:
            raise ValueError("simple_max_score must be lower than medium_max_score")
        return self


class BaseEstimate(BaseModel):
    hours: float = Field(..., gt=0)
    confidence: float = Field(..., ge=0.0, le=1.0)


def _default_base_estimates() -> dict[ComplexityLevel, BaseEstimate]:
    return {
        ComplexityLevel.SIMPLE: BaseEstimate(hours=4, confidence=0.8),
        ComplexityLevel.MEDIUM: BaseEstimate(hours=16, confidence=0.6),
        ComplexityLevel.COMPLEX: BaseEstimate(hours=40, confidence=0.4),
    }


class HeuristicsConfig(BaseModel):
    """Thresholds for the estimate, reality, status and prediction heuristics."""

    complexity: ComplexityWeights = Field(default_factory=ComplexityWeights)
    base_estimates: dict[ComplexityLevel, BaseEstimate] = Field(default_factory=_default_base_estimates)

    hours_per_day: float = Field(default=8.0, gt=0, description="Working hours in one estimated day")
    stale_days: int = Field(default=7, ge=0, description="Days without commits before work is stale")
    high_velocity: float = Field(default=2.0, ge=0, description="Commits/day above which velocity is high")
    slow_velocity: float = Field(default=0.2, ge=0, description="Commits/day below which progress is slow")

    not_started_grace_days: int = Field(default=3, ge=0, description="Issue age before an unstarted issue is at risk")
    closed_on_track_ratio: float = Field(default=1.2, gt=0, description="Closed issue on track within this overrun")
    open_overdue_ratio: float = Field(default=1.5, gt=0, description="Open issue overdue beyond this overrun")
    flag_overrun_ratio: float = Field(default=2.0, gt=0, description="Manager flag beyond this overrun")
    long_open_days: int = Field(default=14, ge=0, description="Open issues older than this get flagged")

    start_delay_buffer_days: int = Field(default=3, ge=0, description="Added to predictions for unstarted issues")
    min_commits_for_velocity: int = Field(default=3, ge=1)
    max_commit_details: int = Field(default=10, ge=0, description="Correlated commits enriched with stats")

    @model_validator(mode="after")
    def validate_base_estimates(self) -> HeuristicsConfig:
        missing = [level.value for level in ComplexityLevel if level not in self.base_estimates]
        if missing:
            raise ValueError(f"base_estimates missing levels: {', '.join(missing)}")
        return self
