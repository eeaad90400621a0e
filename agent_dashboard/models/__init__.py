"""Data models for the dashboard.

Key Models:
    - Issue, Commit: normalized GitHub records (domain)
    - AgentEstimate, Reality, Tracking, IssueTracking: derived issue analytics (domain)
    - DeveloperMetrics, ProjectCommitAnalysis, DeveloperPerformance: team analytics (team)
    - AgentDefinition, RunningAgent, LaunchResult, GitInfo: agent sessions (agents)

Example:
    >>> from agent_dashboard.models.domain import Issue, IssueState
    >>> from agent_dashboard.models.agents import AgentDefinition
"""
