"""Keyword-based complexity scoring and effort estimation for issues.

The scorer reads the issue title, body and labels, adds up weighted signals
and maps the score to a complexity bucket. The bucket selects a base estimate
(hours and confidence) that is then scaled by the urgency multiplier. The
same issue text always yields the same estimate.
"""

from agent_dashboard.config.heuristics import HeuristicsConfig
from agent_dashboard.enums import ComplexityLevel
from agent_dashboard.models.domain import AgentEstimate, ComplexityAnalysis, Issue


def complexity_level(score: int, config: HeuristicsConfig) -> ComplexityLevel:
    weights = config.complexity
    if score <= weights.simple_max_score:
        return ComplexityLevel.SIMPLE
    if score <= weights.medium_max_score:
        return ComplexityLevel.MEDIUM
    return ComplexityLevel.COMPLEX


def analyze_issue_complexity(
    title: str,
    body: str | None,
    labels: list[str],
    config: HeuristicsConfig | None = None,
) -> ComplexityAnalysis:
    """Score an issue from its text and labels.

    Title keywords are matched case-insensitively; body keywords ("TODO",
    "API", ...) are matched as written.

    Args:
        title: Issue title
        body: Issue body (None is treated as empty)
        labels: Label names
        config: Heuristic weights; defaults apply when omitted

    Returns:
        ComplexityAnalysis with level, score, multiplier and the matched
        factors and reasoning lines
    """
    config = config or HeuristicsConfig()
    weights = config.complexity
    title_lower = title.lower()
    body = body or ""

    score = 0
    multiplier = 1.0
    factors: list[str] = []
    reasoning: list[str] = []

    if "bug" in title_lower:
        score += weights.bug
        factors.append("Bug fix")
        reasoning.append("Bug fixes typically require investigation and testing")

    if "feat" in title_lower:
        score += weights.feature
        factors.append("New feature")
        reasoning.append("New features require design, implementation and testing")

    if "refactor" in title_lower:
        score += weights.refactor
        factors.append("Refactoring")
        reasoning.append("Refactoring requires careful analysis to avoid breaking changes")

    if len(body) > weights.long_body_chars:
        score += weights.long_body
        factors.append("Detailed description")
        reasoning.append("Detailed requirements suggest complexity")

    if "TODO" in body or "- [ ]" in body:
        score += weights.checklist
        factors.append("Multiple tasks")
        reasoning.append("Checklist items indicate multiple work streams")

    if any(keyword in body for keyword in ("API", "database", "integration")):
        score += weights.integration
        factors.append("System integration")
        reasoning.append("API and database work requires coordination across systems")

    if "enhancement" in labels:
        score += weights.enhancement_label
        factors.append("Enhancement")

    if "documentation" in labels:
        score += weights.documentation_label
        factors.append("Documentation")

    if "urgent" in labels or "critical" in labels:
        multiplier *= weights.urgency_multiplier
        factors.append("Urgent priority")
        reasoning.append("Urgent issues often require rapid iteration")

    return ComplexityAnalysis(
        level=complexity_level(score, config),
        score=score,
        multiplier=multiplier,
        confidence=weights.confidence,
        factors=factors,
        reasoning=reasoning,
    )


def generate_agent_estimate(issue: Issue, config: HeuristicsConfig | None = None) -> AgentEstimate:
    """Estimate the effort for an issue from its complexity analysis."""
    config = config or HeuristicsConfig()
    complexity = analyze_issue_complexity(issue.title, issue.body, issue.labels, config)
    base = config.base_estimates[complexity.level]

    return AgentEstimate(
        estimated_hours=base.hours * complexity.multiplier,
        confidence=base.confidence * complexity.confidence,
        complexity=complexity.level,
        score=complexity.score,
        reasoning=complexity.reasoning,
        factors=complexity.factors,
    )
