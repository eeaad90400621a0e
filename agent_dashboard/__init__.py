"""agent-dashboard: local dashboard for coding-agent sessions and GitHub manager analytics."""

__version__ = "0.1.0"
