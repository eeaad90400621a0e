"""Tests for agent_dashboard/analytics/estimation.py."""

import pytest

from agent_dashboard.analytics.estimation import analyze_issue_complexity, generate_agent_estimate
from agent_dashboard.config.heuristics import ComplexityWeights, HeuristicsConfig
from agent_dashboard.enums import ComplexityLevel


class TestAnalyzeIssueComplexity:
    """Tests for analyze_issue_complexity."""

    def test_feature_with_long_api_body_is_medium(self):
        """Should score feature + long body + integration as 5 (medium)."""
        body = "Connect the API to the identity provider. " + "x" * 500

        result = analyze_issue_complexity("Add feature: OAuth integration", body, [])

        assert result.score == 5
        assert result.level == ComplexityLevel.MEDIUM
        assert result.factors == ["New feature", "Detailed description", "System integration"]

    def test_plain_issue_is_simple(self):
        """Should score an issue with no signals as 0 (simple)."""
        result = analyze_issue_complexity("Update readme", "", [])

        assert result.score == 0
        assert result.level == ComplexityLevel.SIMPLE
        assert result.factors == []

    def test_none_body(self):
        """Should treat a missing body as empty."""
        assert analyze_issue_complexity("Fix bug in header", None, []).score == 1

    def test_title_keywords_are_case_insensitive(self):
        """Should match BUG, Feature and REFACTOR in any case."""
        result = analyze_issue_complexity("BUG: Feature flag REFACTOR", "", [])
        assert result.score == 1 + 2 + 2

    def test_body_keywords_are_case_sensitive(self):
        """Should only match body keywords as written."""
        assert analyze_issue_complexity("Task", "call the api", []).score == 0
        assert analyze_issue_complexity("Task", "call the API", []).score == 2

    def test_checklist_signal(self):
        """Should add a point for TODO or unchecked boxes."""
        assert analyze_issue_complexity("Task", "- [ ] step one", []).score == 1
        assert analyze_issue_complexity("Task", "TODO: write tests", []).score == 1

    def test_labels(self):
        """Should add for enhancement and subtract for documentation."""
        assert analyze_issue_complexity("Task", "", ["enhancement"]).score == 2
        assert analyze_issue_complexity("Fix bug", "", ["documentation"]).score == 0

    def test_documentation_weight_is_configurable(self):
        """Should leave the score unchanged when the documentation weight is zero."""
        config = HeuristicsConfig(complexity=ComplexityWeights(documentation_label=0))

        plain = analyze_issue_complexity("Fix bug", "", [], config)
        labelled = analyze_issue_complexity("Fix bug", "", ["documentation"], config)

        assert labelled.score == plain.score == 1

    def test_urgent_label_sets_multiplier(self):
        """Should apply the urgency multiplier without changing the score."""
        result = analyze_issue_complexity("Task", "", ["critical"])

        assert result.score == 0
        assert result.multiplier == 1.5
        assert "Urgent priority" in result.factors

    def test_complex_threshold(self):
        """Should classify scores above 5 as complex."""
        body = "TODO: wire the API. " + "x" * 600
        result = analyze_issue_complexity("Refactor feature", body, ["enhancement"])

        assert result.score == 2 + 2 + 1 + 1 + 2 + 2
        assert result.level == ComplexityLevel.COMPLEX

    def test_custom_weights(self):
        """Should use configured weights and thresholds."""
        config = HeuristicsConfig(complexity=ComplexityWeights(bug=5, simple_max_score=1, medium_max_score=3))

        result = analyze_issue_complexity("bug", "", [], config)

        assert result.score == 5
        assert result.level == ComplexityLevel.COMPLEX


class TestGenerateAgentEstimate:
    """Tests for generate_agent_estimate."""

    def test_medium_issue_uses_sixteen_hours(self, make_issue):
        """Should use the medium base estimate of 16 hours."""
        issue = make_issue(title="Add feature: OAuth integration", body="Uses the API. " + "x" * 500)

        estimate = generate_agent_estimate(issue)

        assert estimate.complexity == ComplexityLevel.MEDIUM
        assert estimate.estimated_hours == 16
        assert estimate.confidence == pytest.approx(0.6 * 0.7)

    def test_urgent_simple_issue(self, make_issue):
        """Should scale hours by the urgency multiplier."""
        estimate = generate_agent_estimate(make_issue(title="Typo", labels=["urgent"]))

        assert estimate.complexity == ComplexityLevel.SIMPLE
        assert estimate.estimated_hours == pytest.approx(6.0)

    def test_is_deterministic(self, make_issue):
        """Should return equal estimates for the same issue text."""
        issue = make_issue(title="Refactor bug handling", body="TODO", labels=["enhancement"])
        assert generate_agent_estimate(issue) == generate_agent_estimate(issue)

    def test_more_signals_never_lower_the_estimate(self, make_issue):
        """Should not decrease hours when a positive signal is added."""
        base = generate_agent_estimate(make_issue(title="Update handler", body="API"))
        richer = generate_agent_estimate(make_issue(title="Update handler feature", body="API TODO"))

        assert richer.score > base.score
        assert richer.estimated_hours >= base.estimated_hours
