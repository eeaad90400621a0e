"""Agent sessions: catalog, terminal launcher, process monitor and git info.

Key Components:
    - AgentCatalog: launchable agent definitions per project
    - AgentLauncher: opens sessions and dev servers in terminals, focuses windows
    - ProcessMonitor: finds running sessions from the process table
    - get_git_info: branch and GitHub link of a project checkout
"""

from agent_dashboard.agents.catalog import AgentCatalog
from agent_dashboard.agents.git_info import collect_git_info, get_git_info
from agent_dashboard.agents.launcher import AgentLauncher, build_window_title
from agent_dashboard.agents.monitor import ProcessMonitor, parse_window_title

__all__ = [
    "AgentCatalog",
    "AgentLauncher",
    "ProcessMonitor",
    "build_window_title",
    "collect_git_info",
    "get_git_info",
    "parse_window_title",
]
