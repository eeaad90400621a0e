"""Tests for agent_dashboard/analytics/correlation.py."""

from agent_dashboard.analytics.correlation import commit_references_issue, correlate_commits, title_prefix


class TestCommitReferencesIssue:
    """Tests for commit_references_issue."""

    def test_hash_reference(self, make_issue):
        """Should match a message containing #<number>."""
        issue = make_issue(number=42)
        assert commit_references_issue("Tweak styles (#42)", issue)

    def test_closing_keyword_without_hash(self, make_issue):
        """Should match closing keywords followed by the bare number."""
        issue = make_issue(number=42)
        assert commit_references_issue("fixes 42", issue)
        assert commit_references_issue("This resolved 42 for good", issue)

    def test_closing_keyword_is_case_insensitive(self, make_issue):
        """Should match 'Closes #42' regardless of case."""
        issue = make_issue(number=42)
        assert commit_references_issue("CLOSES #42", issue)

    def test_closing_keyword_form_respects_number_boundary(self, make_issue):
        """Should not match 'fixes 42' against issue 4 through the keyword form."""
        issue = make_issue(number=4, title="Something unrelated to the message")
        assert not commit_references_issue("fixes 42", issue)

    def test_hash_form_is_a_substring_match(self, make_issue):
        """Should match #4 inside #42, since the hash form has no number boundary."""
        issue = make_issue(number=4, title="Something unrelated to the message")
        assert commit_references_issue("Tweak styles (#42)", issue)

    def test_title_prefix_match(self, make_issue):
        """Should match when the message repeats the start of the title."""
        issue = make_issue(number=7, title="Improve login page accessibility")
        assert commit_references_issue("WIP: improve login page access tweaks", issue)

    def test_unrelated_message(self, make_issue):
        """Should not match unrelated commits."""
        issue = make_issue(number=7, title="Improve login page")
        assert not commit_references_issue("Bump dependencies", issue)

    def test_empty_title_never_matches_by_prefix(self, make_issue):
        """Should not treat an empty title as a prefix of every message."""
        issue = make_issue(number=7, title="   ")
        assert not commit_references_issue("Anything at all", issue)


class TestTitlePrefix:
    """Tests for title_prefix."""

    def test_lowercases_and_truncates(self):
        """Should keep the first 20 lower-cased characters."""
        assert title_prefix("Add Feature: OAuth Integration") == "add feature: oauth i"

    def test_short_title(self):
        """Should keep short titles whole."""
        assert title_prefix("Fix Bug") == "fix bug"


class TestCorrelateCommits:
    """Tests for correlate_commits."""

    def test_keeps_matching_commits_in_order(self, make_issue, make_commit):
        """Should return only related commits, preserving input order."""
        issue = make_issue(number=42, title="Improve login page")
        first = make_commit("Start #42", days_ago=3)
        unrelated = make_commit("Bump deps", days_ago=2)
        second = make_commit("improve login page: tests", days_ago=1)

        assert correlate_commits(issue, [first, unrelated, second]) == [first, second]

    def test_no_commits(self, make_issue):
        """Should return an empty list when there is nothing to correlate."""
        assert correlate_commits(make_issue(), []) == []
