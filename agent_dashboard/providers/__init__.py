"""GitHub data access."""

from agent_dashboard.providers.github_rest import GitHubDataSource

__all__ = ["GitHubDataSource"]
