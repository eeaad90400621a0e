"""Current branch and GitHub link for each local project checkout.

Example:
    >>> info = await get_git_info(project)
    >>> info.github_url
    'https://github.com/BaliLove/chat-langchain/tree/main'
"""

import asyncio
from pathlib import Path

import git
import structlog
from git.exc import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

from agent_dashboard.config.settings import ProjectConfig
from agent_dashboard.models.agents import GitInfo

log = structlog.get_logger(__name__)

DEFAULT_BRANCH = "main"
SSH_GITHUB_PREFIX = "git@github.com:"


def github_web_url(remote_url: str, branch: str | None = None) -> str:
    """Browser URL for a remote, pointing at ``branch`` when it is on GitHub.

    Example:
        >>> github_web_url("git@github.com:owner/repo.git", "dev")
        'https://github.com/owner/repo/tree/dev'
    """
    url = remote_url.strip()
    if url.startswith(SSH_GITHUB_PREFIX):
        url = "https://github.com/" + url[len(SSH_GITHUB_PREFIX) :]
        url = url.removesuffix(".git")

    if branch and "github.com" in url:
        url = f"{url}/tree/{branch}"
    return url


def _read_git(path: Path, timeout: float) -> tuple[str, str]:
    repo = git.Repo(path)
    branch = repo.git.branch("--show-current", kill_after_timeout=timeout)
    remote_url = repo.git.config("--get", "remote.origin.url", kill_after_timeout=timeout)
    return branch.strip(), remote_url.strip()


async def get_git_info(project: ProjectConfig, timeout: float = 5.0) -> GitInfo:
    """Read branch and origin of a project checkout.

    Any git failure (missing directory, not a repository, no origin remote,
    timeout) reports ``has_git=False``.
    """
    try:
        branch, remote_url = await asyncio.to_thread(_read_git, project.local_path, timeout)
    except (GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError) as e:
        log.debug("git_info_unavailable", project=project.name, error=str(e))
        return GitInfo(project=project.name, branch=None, github_url=None, has_git=False)

    return GitInfo(
        project=project.name,
        branch=branch or DEFAULT_BRANCH,
        github_url=github_web_url(remote_url, branch) or None,
        has_git=True,
    )


async def collect_git_info(projects: list[ProjectConfig], timeout: float = 5.0) -> list[GitInfo]:
    return list(await asyncio.gather(*(get_git_info(project, timeout) for project in projects)))
