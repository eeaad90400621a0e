"""Dashboard orchestration: fetch per project, cache, run analytics."""

from agent_dashboard.engine.dashboard import DashboardService

__all__ = ["DashboardService"]
