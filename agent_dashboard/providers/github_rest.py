"""GitHub data source implementation using PyGithub."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from itertools import islice
from typing import Any, TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Commit import Commit as GHCommit  # type: ignore[import-not-found]
from github.Issue import Issue as GHIssue  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from agent_dashboard.config.settings import ProjectConfig
from agent_dashboard.exceptions import GitHubError
from agent_dashboard.models.domain import Commit, Issue, IssueState

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods (including lazy pagination).
    """
    return await asyncio.to_thread(func)


class GitHubDataSource:
    """Read-mostly access to the repositories of all dashboard projects.

    One PyGithub client serves every project; repository handles are created
    lazily and reused.
    """

    def __init__(
        self,
        token: str | None,
        base_url: str = "https://api.github.com",
        per_page: int = 100,
        max_pages: int = 50,
    ):
        """Initialize GitHub data source.

        Args:
            token: GitHub personal access token (None for anonymous access)
            base_url: GitHub API base URL (for GitHub Enterprise)
            per_page: Page size used by list endpoints (GitHub max is 100)
            max_pages: Safety limit on pages read when listing everything
        """
        self.token = token.strip() if token else None
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.max_pages = max_pages
        self._client: Github | None = None
        self._repos: dict[str, GHRepository] = {}

    @property
    def max_items(self) -> int:
        return self.per_page * self.max_pages

    async def connect(self) -> None:
        """Initialize GitHub client."""

        def _connect() -> Github:
            if self.token:
                return Github(auth=Auth.Token(self.token), base_url=self.base_url, per_page=self.per_page)
            return Github(base_url=self.base_url, per_page=self.per_page)

        self._client = await _run_sync(_connect)
        log.info("github_connected", base_url=self.base_url, authenticated=bool(self.token))

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repos.clear()

    def _repo(self, project: ProjectConfig) -> GHRepository:
        if self._client is None:
            raise GitHubError("GitHub client is not connected")

        full_name = project.full_repo
        if full_name not in self._repos:
            self._repos[full_name] = self._client.get_repo(full_name, lazy=True)
        return self._repos[full_name]

    async def list_issues(
        self,
        project: ProjectConfig,
        state: str = "open",
        limit: int | None = None,
        since: datetime | None = None,
    ) -> list[Issue]:
        """List issues, most recently updated first.

        Args:
            project: Project whose repository is queried
            state: "open", "closed" or "all"
            limit: Maximum number of issues; defaults to ``per_page * max_pages``
            since: Only issues updated at or after this time

        Note:
            Like the REST endpoint, the result includes pull requests.
        """
        log.info("list_issues", project=project.name, state=state, limit=limit)
        max_items = limit or self.max_items

        def _list() -> list[GHIssue]:
            kwargs: dict[str, Any] = {"state": state, "sort": "updated", "direction": "desc"}
            if since is not None:
                kwargs["since"] = since
            return list(islice(self._repo(project).get_issues(**kwargs), max_items))

        try:
            gh_issues = await _run_sync(_list)
        except GithubException as e:
            log.error("github_list_issues_failed", project=project.name, error=str(e))
            raise GitHubError(f"Failed to list issues for {project.full_repo}", e.status) from e

        if len(gh_issues) >= self.max_items:
            log.warning("issue_page_limit_reached", project=project.name, pages=self.max_pages)

        log.info("issues_fetched", project=project.name, count=len(gh_issues))
        return [self._convert_issue(gh_issue, project) for gh_issue in gh_issues]

    async def list_commits(
        self,
        project: ProjectConfig,
        since: datetime,
        until: datetime | None = None,
        limit: int = 100,
    ) -> list[Commit]:
        """List commits on the default branch, newest first.

        Returned commits carry no line statistics; use ``get_commit_detail``.
        """
        log.info("list_commits", project=project.name, since=since.isoformat(), limit=limit)

        def _list() -> list[GHCommit]:
            kwargs: dict[str, Any] = {"since": since}
            if until is not None:
                kwargs["until"] = until
            return list(islice(self._repo(project).get_commits(**kwargs), limit))

        try:
            gh_commits = await _run_sync(_list)
        except GithubException as e:
            log.error("github_list_commits_failed", project=project.name, error=str(e))
            raise GitHubError(f"Failed to list commits for {project.full_repo}", e.status) from e

        return [self._convert_commit(gh_commit, project) for gh_commit in gh_commits]

    async def get_commit_detail(self, project: ProjectConfig, sha: str) -> Commit:
        """Get one commit including additions, deletions and files changed."""

        def _detail() -> Commit:
            gh_commit = self._repo(project).get_commit(sha)
            commit = self._convert_commit(gh_commit, project)
            stats = gh_commit.stats
            commit.additions = (stats.additions or 0) if stats else 0
            commit.deletions = (stats.deletions or 0) if stats else 0
            commit.files_changed = len(gh_commit.files or [])
            return commit

        try:
            return await _run_sync(_detail)
        except GithubException as e:
            log.debug("github_commit_detail_failed", project=project.name, sha=sha, error=str(e))
            raise GitHubError(f"Failed to get commit {sha[:7]} in {project.full_repo}", e.status) from e

    async def find_issue_by_id(self, project: ProjectConfig, issue_id: int) -> Issue | None:
        """Find an issue by its database id (not its number)."""
        for issue in await self.list_issues(project, state="all"):
            if issue.id == issue_id:
                return issue
        return None

    async def set_issue_labels(self, project: ProjectConfig, issue_number: int, labels: list[str]) -> Issue:
        """Replace the labels of an issue."""
        log.info("set_issue_labels", project=project.name, number=issue_number, labels=labels)

        def _update() -> GHIssue:
            gh_issue = self._repo(project).get_issue(issue_number)
            gh_issue.set_labels(*labels)
            return self._repo(project).get_issue(issue_number)

        try:
            gh_issue = await _run_sync(_update)
        except GithubException as e:
            log.error("github_set_labels_failed", project=project.name, number=issue_number, error=str(e))
            raise GitHubError(f"Failed to update labels of #{issue_number} in {project.full_repo}", e.status) from e

        return self._convert_issue(gh_issue, project)

    def _convert_issue(self, gh_issue: GHIssue, project: ProjectConfig) -> Issue:
        """Convert GitHub Issue to our Issue model."""
        state = IssueState.CLOSED if gh_issue.state == "closed" else IssueState.OPEN

        return Issue(
            id=gh_issue.id,
            number=gh_issue.number,
            title=gh_issue.title or "",
            body=gh_issue.body or "",
            state=state,
            labels=[label.name for label in gh_issue.labels],
            created_at=gh_issue.created_at,
            updated_at=gh_issue.updated_at,
            closed_at=gh_issue.closed_at,
            assignee=gh_issue.assignee.login if gh_issue.assignee else None,
            author=gh_issue.user.login if gh_issue.user else "unknown",
            author_avatar_url=gh_issue.user.avatar_url if gh_issue.user else None,
            url=gh_issue.html_url,
            project=project.name,
            repo_name=project.repo or "",
        )

    def _convert_commit(self, gh_commit: GHCommit, project: ProjectConfig) -> Commit:
        """Convert GitHub Commit to our Commit model (without statistics)."""
        git_author = gh_commit.commit.author
        if gh_commit.author is not None and gh_commit.author.login:
            author = gh_commit.author.login
        elif git_author is not None and git_author.name:
            author = git_author.name
        else:
            author = "Unknown"

        return Commit(
            sha=gh_commit.sha,
            message=gh_commit.commit.message or "",
            author=author,
            date=git_author.date if git_author is not None else gh_commit.commit.committer.date,
            url=gh_commit.html_url,
            project=project.name,
        )
