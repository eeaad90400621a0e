"""Issue/commit correlation.

A commit belongs to an issue when its message references the issue number
(``#42``, ``fixes 42``, ``Closes #42``) or repeats the start of the issue
title. The title heuristic is deliberately loose; it is what lets commits
written without an issue reference still count towards an issue.
"""

import re
from collections.abc import Iterable

from agent_dashboard.models.domain import Commit, Issue

TITLE_PREFIX_LENGTH = 20

_CLOSING_KEYWORDS = "close|closes|closed|fix|fixes|fixed|resolve|resolves|resolved"


def _closing_pattern(number: int) -> re.Pattern[str]:
    return re.compile(rf"\b(?:{_CLOSING_KEYWORDS})\s+#?{number}\b", re.IGNORECASE)


def title_prefix(title: str) -> str:
    """Lower-cased first characters of an issue title used for matching."""
    return title.lower()[:TITLE_PREFIX_LENGTH]


def commit_references_issue(message: str, issue: Issue) -> bool:
    """Return True if a commit message refers to the given issue."""
    if f"#{issue.number}" in message:
        return True

    if _closing_pattern(issue.number).search(message):
        return True

    prefix = title_prefix(issue.title)
    if not prefix.strip():
        return False
    return prefix in message.lower()


def correlate_commits(issue: Issue, commits: Iterable[Commit]) -> list[Commit]:
    """Filter commits down to the ones related to an issue, keeping their order."""
    return [commit for commit in commits if commit_references_issue(commit.message, issue)]
