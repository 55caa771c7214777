"""Git host resolution: where the project's repository lives."""

from __future__ import annotations

import re
from typing import Optional, Union

from .models import GitHubHost, GitHost, ProjectOptions, UnknownGitHost

_PROJECT = r"(?P<project>[A-Za-z0-9._-]+?)(?:\.git)?/?(?:#.*)?"

_GITHUB_PATTERNS = [
    re.compile(rf"^github:(?P<user>[^/\s]+)/{_PROJECT}$"),
    re.compile(
        rf"^(?:git\+)?(?:https?|ssh|git)://(?:[^@/]+@)?(?:www\.)?github\.com[:/]"
        rf"(?P<user>[^/]+)/{_PROJECT}$"
    ),
    re.compile(rf"^(?:[^@/\s]+@)?github\.com:(?P<user>[^/]+)/{_PROJECT}$"),
    # npm shorthand: "user/project"
    re.compile(rf"^(?P<user>[A-Za-z0-9][A-Za-z0-9-]*)/{_PROJECT}$"),
]


def create_git_host(options: ProjectOptions, default_owner: str) -> GitHubHost:
    """Resolve the GitHub repository for a new project.

    The owner falls back to the npm scope, then to *default_owner*; the
    repository name falls back to the package name, then to the name of the
    destination directory.
    """
    user = options.git_host.user or options.npm_package.scope or default_owner
    project = (
        options.git_host.project
        or options.npm_package.name
        or options.path.resolve().name
    )
    return GitHubHost(user=user, project=project)


def git_host_from_url(url: Union[str, dict, None]) -> Optional[GitHost]:
    """Interpret a ``repository`` value from package.json.

    Accepts the string forms npm understands and the ``{"type", "url"}``
    object form.  Returns ``None`` when there is no repository at all.
    """
    if isinstance(url, dict):
        url = url.get("url")
    if not isinstance(url, str) or not url.strip():
        return None

    url = url.strip()
    for pattern in _GITHUB_PATTERNS:
        match = pattern.match(url)
        if match:
            return GitHubHost(user=match.group("user"), project=match.group("project"))
    return UnknownGitHost(url=url)


def homepage_url(git_host: GitHost) -> Optional[str]:
    if isinstance(git_host, GitHubHost):
        return f"https://github.com/{git_host.user}/{git_host.project}"
    return None


def bugs_url(git_host: GitHost) -> Optional[str]:
    if isinstance(git_host, GitHubHost):
        return f"https://github.com/{git_host.user}/{git_host.project}/issues"
    return None


def repository_shortcut(git_host: GitHost) -> Optional[str]:
    if isinstance(git_host, GitHubHost):
        return f"github:{git_host.user}/{git_host.project}"
    return None
