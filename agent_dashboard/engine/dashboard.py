"""
Dashboard service: fetches GitHub data per project and runs the analytics.

The service is the only place that combines the data source, the cache and
the analytics functions. Every view fans out over the configured projects
concurrently. When a single project is requested its errors propagate to the
caller; when all projects are requested a failing project is logged and
degrades to no data so the other projects still render.

Example:
    >>> settings = DashboardSettings()
    >>> service = DashboardService.from_settings(settings)
    >>> await service.connect()
    >>> report = await service.issue_tracking("AIBL")
    >>> print(report.summary.on_track)
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TypeVar

import structlog

from agent_dashboard.analytics.commit_analysis import (
    DETAILED_COMMITS_PER_DEVELOPER as ANALYSIS_DETAIL_LIMIT,
)
from agent_dashboard.analytics.commit_analysis import (
    analyze_repository,
    build_commit_analysis_report,
    group_commits_by_author,
)
from agent_dashboard.analytics.correlation import correlate_commits
from agent_dashboard.analytics.developer_performance import (
    DETAILED_COMMITS_PER_DEVELOPER as PERFORMANCE_DETAIL_LIMIT,
)
from agent_dashboard.analytics.developer_performance import (
    DeveloperActivity,
    build_performance_report,
    calculate_developer_performance,
    collect_activity,
)
from agent_dashboard.analytics.tracking import build_issue_tracking, generate_manager_alerts, summarize_tracking
from agent_dashboard.analytics.workflow import build_board_issue, relabel_for_agent, tracking_key
from agent_dashboard.config.settings import DashboardSettings, ProjectConfig
from agent_dashboard.exceptions import IssueNotFoundError
from agent_dashboard.models.domain import (
    BoardIssue,
    Commit,
    Issue,
    IssueTracking,
    IssueTrackingReport,
    ManagerAlerts,
)
from agent_dashboard.models.team import (
    CommitAnalysisReport,
    DeveloperPerformance,
    DeveloperPerformanceReport,
    ProjectCommitAnalysis,
)
from agent_dashboard.providers.github_rest import GitHubDataSource
from agent_dashboard.utils.caching import DashboardCache

log = structlog.get_logger(__name__)

T = TypeVar("T")


class DashboardService:
    """Fetch, cache and analyze GitHub data for the configured projects.

    Attributes:
        settings: Dashboard configuration
        source: GitHub data source shared by all projects
        cache: Best-effort cache with per-kind freshness windows
    """

    def __init__(
        self,
        settings: DashboardSettings,
        source: GitHubDataSource,
        cache: DashboardCache | None = None,
    ) -> None:
        self.settings = settings
        self.source = source
        self.cache = cache or DashboardCache(settings.cache)

    @classmethod
    def from_settings(cls, settings: DashboardSettings) -> "DashboardService":
        github = settings.github
        source = GitHubDataSource(
            token=github.token.get_secret_value() if github.token else None,
            base_url=github.base_url,
            per_page=github.per_page,
            max_pages=github.max_pages,
        )
        return cls(settings, source)

    async def connect(self) -> None:
        await self.source.connect()

    async def disconnect(self) -> None:
        await self.source.disconnect()

    def _projects(self, project: str | None) -> list[ProjectConfig]:
        if project:
            return [self.settings.get_repo_project(project)]
        return self.settings.repo_projects

    async def _fan_out(
        self,
        projects: Sequence[ProjectConfig],
        func: Callable[[ProjectConfig], Awaitable[T]],
    ) -> list[T | BaseException]:
        """Run ``func`` for every project concurrently, collecting exceptions."""
        return await asyncio.gather(*(func(project) for project in projects), return_exceptions=True)

    async def _detail_commits(self, project: ProjectConfig, commits: Sequence[Commit]) -> dict[str, Commit]:
        """Fetch line statistics for commits; failed lookups are left out."""
        results = await asyncio.gather(
            *(self.source.get_commit_detail(project, commit.sha) for commit in commits),
            return_exceptions=True,
        )
        details = {}
        for commit, result in zip(commits, results, strict=True):
            if isinstance(result, BaseException):
                log.debug("commit_detail_skipped", project=project.name, sha=commit.short_sha, error=str(result))
                continue
            details[commit.sha] = result
        return details

    # Issue board

    async def list_board_issues(self, project: str | None = None) -> list[BoardIssue]:
        """Issues for the board, merged with tracking analytics when available.

        A single project lists its most recently updated open issues; without
        a project every issue (open and closed) of every project is listed.
        """
        if project:
            config = self.settings.get_repo_project(project)
            issues = await self.source.list_issues(config, state="open", limit=self.settings.github.board_issue_limit)
        else:
            issues = []
            projects = self._projects(None)
            results = await self._fan_out(projects, lambda p: self.source.list_issues(p, state="all"))
            for config, result in zip(projects, results, strict=True):
                if isinstance(result, BaseException):
                    log.error("board_issues_failed", project=config.name, error=str(result))
                    continue
                issues.extend(result)
            log.info("board_issues_fetched", count=len(issues))

        tracking_by_issue: dict[str, IssueTracking] = {}
        try:
            report = await self.issue_tracking(project)
            tracking_by_issue = {tracking_key(t.project, t.issue.number): t for t in report.issue_tracking}
        except Exception as e:
            log.warning("analytics_enrichment_failed", project=project, error=str(e))

        return [
            build_board_issue(issue, tracking_by_issue.get(tracking_key(issue.project, issue.number)))
            for issue in issues
        ]

    async def assign_agent(
        self,
        project: str,
        agent_id: str,
        issue_id: int | None = None,
        issue_number: int | None = None,
    ) -> Issue:
        """Label an issue for an agent and move it into development.

        The issue is identified by number or, failing that, by its GitHub id.

        Raises:
            ProjectNotFoundError: Unknown project or project without repository
            IssueNotFoundError: No matching issue
            GitHubError: The label update failed
        """
        config = self.settings.get_repo_project(project)

        if issue_number is not None:
            issues = await self.source.list_issues(config, state="all")
            issue = next((i for i in issues if i.number == issue_number), None)
        elif issue_id is not None:
            issue = await self.source.find_issue_by_id(config, issue_id)
        else:
            raise ValueError("issue_id or issue_number is required")

        if issue is None:
            raise IssueNotFoundError(project, issue_number if issue_number is not None else issue_id)

        labels = relabel_for_agent(issue.labels, agent_id)
        updated = await self.source.set_issue_labels(config, issue.number, labels)
        await self.cache.invalidate_project(project)
        log.info("agent_assigned", project=project, issue=issue.number, agent=agent_id)
        return updated

    # Issue tracking

    async def _track_issue(
        self, config: ProjectConfig, issue: Issue, commits: Sequence[Commit], now: datetime
    ) -> IssueTracking:
        related = correlate_commits(issue, commits)[: self.settings.heuristics.max_commit_details]
        details = await self._detail_commits(config, related)
        detailed = [details[commit.sha] for commit in related if commit.sha in details]
        return build_issue_tracking(config.name, issue, detailed, self.settings.heuristics, now)

    async def _track_project(self, config: ProjectConfig, now: datetime) -> list[IssueTracking]:
        async def fetch() -> list[IssueTracking]:
            issues = await self.cache.issues(config.name, lambda: self.source.list_issues(config, state="open"))
            since = now - timedelta(days=self.settings.github.tracking_commit_days)
            commits = await self.cache.commits(
                config.name,
                lambda: self.source.list_commits(config, since=since, limit=self.settings.github.commit_limit),
            )
            tracked = await asyncio.gather(*(self._track_issue(config, issue, commits, now) for issue in issues))
            kept = [t for t in tracked if t.commits or t.issue.is_open]
            log.info("project_tracked", project=config.name, issues=len(issues), tracked=len(kept))
            return kept

        return await self.cache.analytics(config.name, fetch)

    async def issue_tracking(self, project: str | None = None, now: datetime | None = None) -> IssueTrackingReport:
        """Estimate, reality and status for every tracked issue."""
        now = now or datetime.now(UTC)
        projects = self._projects(project)
        heuristics = self.settings.heuristics

        tracked: list[IssueTracking] = []
        errors: dict[str, str] = {}
        if project:
            tracked = await self._track_project(projects[0], now)
        else:
            results = await self._fan_out(projects, lambda p: self._track_project(p, now))
            for config, result in zip(projects, results, strict=True):
                if isinstance(result, BaseException):
                    log.error("issue_tracking_failed", project=config.name, error=str(result))
                    errors[config.name] = str(result)
                    continue
                tracked.extend(result)

        async def alerts() -> ManagerAlerts:
            return generate_manager_alerts(tracked, heuristics, now)

        if project or errors:
            manager_alerts = await alerts()
        else:
            manager_alerts = await self.cache.manager_alerts(alerts)

        return IssueTrackingReport(
            issue_tracking=tracked,
            manager_alerts=manager_alerts,
            summary=summarize_tracking(tracked, heuristics),
            errors=errors,
        )

    # Commit analysis

    async def _analyze_project(self, config: ProjectConfig, now: datetime) -> ProjectCommitAnalysis:
        window_days = self.settings.github.commit_analysis_days
        commits = await self.source.list_commits(
            config, since=now - timedelta(days=window_days), limit=self.settings.github.commit_limit
        )
        sample = [
            commit
            for author_commits in group_commits_by_author(commits).values()
            for commit in author_commits[:ANALYSIS_DETAIL_LIMIT]
        ]
        details = await self._detail_commits(config, sample)
        analysis = analyze_repository(config, commits, details, window_days, now)
        log.info("project_commits_analyzed", project=config.name, commits=len(commits))
        return analysis

    async def commit_analysis(self, project: str | None = None, now: datetime | None = None) -> CommitAnalysisReport:
        """Developer metrics and health per repository plus a cross-project summary."""
        now = now or datetime.now(UTC)
        projects = self._projects(project)

        if project:
            analyses = [await self._analyze_project(projects[0], now)]
        else:
            analyses = []
            results = await self._fan_out(projects, lambda p: self._analyze_project(p, now))
            for config, result in zip(projects, results, strict=True):
                if isinstance(result, BaseException):
                    log.error("commit_analysis_failed", project=config.name, error=str(result))
                    analyses.append(ProjectCommitAnalysis(project=config.name, error=str(result)))
                    continue
                analyses.append(result)

        return build_commit_analysis_report(analyses, self.settings.priority_project)

    # Developer performance

    async def _project_activity(
        self, config: ProjectConfig, start: datetime, end: datetime
    ) -> tuple[str, list[Commit], list[Issue]]:
        limit = self.settings.github.commit_limit
        commits, issues = await asyncio.gather(
            self.source.list_commits(config, since=start, until=end, limit=limit),
            self.source.list_issues(config, state="all", since=start, limit=limit),
        )
        return config.name, commits, issues

    async def developer_performance(self, weeks: int = 4, now: datetime | None = None) -> DeveloperPerformanceReport:
        """Productivity scores per developer across all projects."""
        if weeks < 1:
            raise ValueError("weeks must be at least 1")

        async def fetch() -> DeveloperPerformanceReport:
            end = now or datetime.now(UTC)
            start = end - timedelta(weeks=weeks)
            projects = self._projects(None)
            by_name = {config.name: config for config in projects}

            project_data = []
            results = await self._fan_out(projects, lambda p: self._project_activity(p, start, end))
            for config, result in zip(projects, results, strict=True):
                if isinstance(result, BaseException):
                    log.error("developer_activity_failed", project=config.name, error=str(result))
                    continue
                project_data.append(result)

            activities = collect_activity(project_data)

            async def score(activity: DeveloperActivity) -> DeveloperPerformance:
                sample = activity.commits[:PERFORMANCE_DETAIL_LIMIT]
                details: dict[str, Commit] = {}
                for name in {commit.project for commit in sample}:
                    project_commits = [commit for commit in sample if commit.project == name]
                    details.update(await self._detail_commits(by_name[name], project_commits))
                detailed = [details.get(commit.sha, commit) for commit in sample]
                return calculate_developer_performance(activity, detailed, weeks)

            developers = await asyncio.gather(*(score(activity) for activity in activities))
            log.info("developer_performance_calculated", developers=len(developers), weeks=weeks)
            return build_performance_report(list(developers), start, end, weeks)

        return await self.cache.developer_metrics(weeks, fetch)
