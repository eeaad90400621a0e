"""Configuration system for the dashboard.

This package provides type-safe configuration management using Pydantic,
including the project table, GitHub access, cache freshness windows, agent
launch templates and the tuning constants of the analytics heuristics.

Key Components:
    - DashboardSettings: Main configuration container with YAML loading support
    - ProjectConfig: One dashboard project (repository and local checkout)
    - HeuristicsConfig: Thresholds for estimate, reality and status heuristics

Example:
    >>> from agent_dashboard.config.settings import DashboardSettings
    >>> settings = DashboardSettings.from_yaml("dashboard.yaml")
    >>> repos = [p.full_repo for p in settings.repo_projects]
"""
