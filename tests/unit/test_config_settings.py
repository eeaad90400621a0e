"""Tests for agent_dashboard/config/settings.py and config/heuristics.py."""

import pytest
from pydantic import ValidationError

from agent_dashboard.config.heuristics import ComplexityWeights, HeuristicsConfig
from agent_dashboard.config.settings import DashboardSettings, ProjectConfig
from agent_dashboard.enums import ComplexityLevel
from agent_dashboard.exceptions import ConfigurationError, ProjectNotFoundError


class TestDefaults:
    """Tests for the default project table and sections."""

    def test_default_projects(self, monkeypatch):
        """Should ship the five repository projects and two local-only projects."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        settings = DashboardSettings()

        assert [p.name for p in settings.repo_projects] == ["AIBL", "BL2", "Blxero", "Upify", "BaliLove"]
        assert settings.get_project("BL2").complexity_factor == 2.0
        assert settings.get_project("PureZone").has_repository is False
        assert settings.github.token is None
        assert settings.server.port == 3500

    def test_token_from_environment(self, monkeypatch):
        """Should read GITHUB_TOKEN when no token is configured."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_from_env")
        assert DashboardSettings().github.token.get_secret_value() == "ghp_from_env"

    def test_base_url_trailing_slash(self):
        """Should strip trailing slashes from the API base URL."""
        settings = DashboardSettings(github={"base_url": "https://ghe.example.com/api/v3/"})
        assert settings.github.base_url == "https://ghe.example.com/api/v3"


class TestProjects:
    """Tests for project lookup and validation."""

    def test_full_repo_and_local_path(self):
        """Should expose owner/repo and an expanded path."""
        project = ProjectConfig(name="AIBL", owner="BaliLove", repo="chat-langchain", path="~/apps/aibl")

        assert project.full_repo == "BaliLove/chat-langchain"
        assert not str(project.local_path).startswith("~")

    def test_unknown_project(self, settings):
        """Should raise ProjectNotFoundError for unknown names."""
        with pytest.raises(ProjectNotFoundError, match="Unknown project: Nope"):
            settings.get_project("Nope")

    def test_repo_project_requires_repository(self, settings):
        """Should reject local-only projects where a repository is needed."""
        with pytest.raises(ProjectNotFoundError):
            settings.get_repo_project("PureZone")

    def test_duplicate_names(self):
        """Should reject duplicate project names."""
        with pytest.raises(ValidationError, match="Duplicate project names: AIBL"):
            DashboardSettings(projects=[{"name": "AIBL", "path": "/a"}, {"name": "AIBL", "path": "/b"}])


class TestFromYaml:
    """Tests for DashboardSettings.from_yaml."""

    def test_load_with_env_interpolation(self, tmp_path, monkeypatch):
        """Should substitute ${VAR} and ${VAR:-default} references."""
        monkeypatch.setenv("DASH_TOKEN", "ghp_yaml")
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text(
            """
# token: ${NOT_SET}
github:
  token: ${DASH_TOKEN}
  commit_limit: ${COMMIT_LIMIT:-50}
projects:
  - name: Demo
    owner: acme
    repo: demo
    path: /tmp/demo
priority_project: Demo
"""
        )

        settings = DashboardSettings.from_yaml(str(config_file))

        assert settings.github.token.get_secret_value() == "ghp_yaml"
        assert settings.github.commit_limit == 50
        assert [p.name for p in settings.projects] == ["Demo"]
        assert settings.priority_project == "Demo"

    def test_missing_file(self, tmp_path):
        """Should raise ConfigurationError for a missing file."""
        with pytest.raises(ConfigurationError, match="not found"):
            DashboardSettings.from_yaml(str(tmp_path / "missing.yaml"))

    def test_missing_env_var(self, tmp_path, monkeypatch):
        """Should raise ConfigurationError for unset required variables."""
        monkeypatch.delenv("DASH_MISSING", raising=False)
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("github:\n  token: ${DASH_MISSING}\n")

        with pytest.raises(ConfigurationError, match="DASH_MISSING"):
            DashboardSettings.from_yaml(str(config_file))

    def test_invalid_yaml(self, tmp_path):
        """Should raise ConfigurationError for broken YAML."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("github: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            DashboardSettings.from_yaml(str(config_file))

    def test_not_a_mapping(self, tmp_path):
        """Should reject a YAML list at the top level."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="YAML object"):
            DashboardSettings.from_yaml(str(config_file))

    def test_invalid_values(self, tmp_path):
        """Should wrap validation errors."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("server:\n  port: 0\n")

        with pytest.raises(ConfigurationError, match="Failed to validate"):
            DashboardSettings.from_yaml(str(config_file))

    def test_empty_file(self, tmp_path):
        """Should fall back to defaults for an empty file."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("")

        assert DashboardSettings.from_yaml(str(config_file)).server.host == "127.0.0.1"


class TestHeuristicsConfig:
    """Tests for HeuristicsConfig validation."""

    def test_defaults(self):
        """Should ship the documented thresholds."""
        config = HeuristicsConfig()

        assert config.base_estimates[ComplexityLevel.MEDIUM].hours == 16
        assert config.stale_days == 7
        assert config.complexity.feature == 2

    def test_levels_must_increase(self):
        """Should reject overlapping complexity thresholds."""
        with pytest.raises(ValidationError):
            ComplexityWeights(simple_max_score=5, medium_max_score=5)

    def test_all_levels_required(self):
        """Should require a base estimate for every level."""
        with pytest.raises(ValidationError, match="missing levels"):
            HeuristicsConfig(base_estimates={"simple": {"hours": 4, "confidence": 0.8}})
