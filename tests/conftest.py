"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from agent_dashboard.config.settings import DashboardSettings, ProjectConfig
from agent_dashboard.models.domain import Commit, Issue, IssueState

NOW = datetime(2026, 10, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used by time-dependent analytics."""
    return NOW


@pytest.fixture
def make_issue():
    """Factory for issues; ``age_days`` sets created_at relative to NOW."""

    def _make(
        number: int = 42,
        title: str = "Improve login page",
        body: str = "",
        labels: list[str] | None = None,
        state: IssueState = IssueState.OPEN,
        age_days: float = 2,
        closed_days_ago: float | None = None,
        project: str = "AIBL",
    ) -> Issue:
        created_at = NOW - timedelta(days=age_days)
        closed_at = NOW - timedelta(days=closed_days_ago) if closed_days_ago is not None else None
        return Issue(
            id=1000 + number,
            number=number,
            title=title,
            body=body,
            state=state,
            labels=labels or [],
            created_at=created_at,
            updated_at=closed_at or created_at,
            closed_at=closed_at,
            author="alice",
            url=f"https://github.com/BaliLove/chat-langchain/issues/{number}",
            project=project,
            repo_name="chat-langchain",
        )

    return _make


@pytest.fixture
def make_commit():
    """Factory for commits; ``days_ago`` sets the commit date relative to NOW."""
    counter = iter(range(1, 10_000))

    def _make(
        message: str = "Update code",
        author: str = "alice",
        days_ago: float = 1,
        additions: int = 0,
        deletions: int = 0,
        files_changed: int = 0,
        project: str = "AIBL",
        sha: str | None = None,
    ) -> Commit:
        sha = sha or f"{next(counter):040x}"
        return Commit(
            sha=sha,
            message=message,
            author=author,
            date=NOW - timedelta(days=days_ago),
            additions=additions,
            deletions=deletions,
            files_changed=files_changed,
            url=f"https://github.com/BaliLove/chat-langchain/commit/{sha}",
            project=project,
        )

    return _make


@pytest.fixture
def project_dirs(tmp_path: Path) -> dict[str, Path]:
    """Local checkouts for the test projects."""
    dirs = {name: tmp_path / name.lower() for name in ("AIBL", "Upify", "PureZone")}
    for path in dirs.values():
        path.mkdir()
    (tmp_path / "universal").mkdir()
    return dirs


@pytest.fixture
def settings(project_dirs: dict[str, Path], tmp_path: Path) -> DashboardSettings:
    """Settings with two repository projects and one local-only project."""
    return DashboardSettings(
        github={"token": "test-token"},
        projects=[
            ProjectConfig(
                name="AIBL",
                owner="BaliLove",
                repo="chat-langchain",
                path=str(project_dirs["AIBL"]),
                complexity_factor=1.5,
            ),
            ProjectConfig(name="Upify", owner="tomhay", repo="upify", path=str(project_dirs["Upify"])),
            ProjectConfig(name="PureZone", path=str(project_dirs["PureZone"])),
        ],
        agents={
            "terminal_command": ["fake-term", "--title", "{title}", "--", "{command}"],
            "focus_command": ["fake-focus", "{title}"],
            "universal_path": str(tmp_path / "universal"),
        },
    )
