"""Shared pytest fixtures for the create-project test suite.

Provides reusable fixtures for:
- Temporary destination directories
- Project descriptors for both target kinds
- The packaged template provider
- Mock subprocess helpers
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from create_project.config import Config
from create_project.project import (
    Author,
    GitHubHost,
    License,
    NpmPackage,
    Project,
    TargetKind,
)
from create_project.project.node_versions import create_node_versions
from create_project.scaffolder import TemplateProvider

TODAY = date(2026, 10, 19)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Destination path that does not exist yet (auto-cleanup)."""
    yield tmp_path / "my-lib"


# ---------------------------------------------------------------------------
# Configuration & templates
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    """Default configuration (packaged templates, yarn commands)."""
    return Config()


@pytest.fixture
def templates() -> TemplateProvider:
    return TemplateProvider()


# ---------------------------------------------------------------------------
# Project descriptors
# ---------------------------------------------------------------------------

def make_project(
    path: Path,
    *,
    name: str = "my-lib",
    scope: str | None = "acme",
    target: TargetKind = TargetKind.NPM,
    git_host: GitHubHost | None = None,
    copyright_holder: str | None = "Acme Ltd",
) -> Project:
    """Build a fully specified project without touching git."""
    return Project(
        path=path,
        npm_package=NpmPackage(name=name, scope=scope),
        git_host=git_host or GitHubHost(user="acme", project=name),
        node=create_node_versions(TODAY),
        target=target,
        author=Author(name="Jane Doe", email="jane@example.com"),
        license=License(year=TODAY.year, copyright_holder=copyright_holder),
    )


@pytest.fixture
def project_factory(tmp_project_dir: Path):
    """``make_project`` bound to the temporary destination."""
    def factory(**kwargs) -> Project:
        return make_project(tmp_project_dir, **kwargs)

    return factory


@pytest.fixture
def npm_project(tmp_project_dir: Path) -> Project:
    return make_project(tmp_project_dir)


@pytest.fixture
def webapp_project(tmp_project_dir: Path) -> Project:
    return make_project(tmp_project_dir, name="my-app", target=TargetKind.WEBAPP)


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def mock_run_command():
    """Factory for an ``AsyncMock`` standing in for ``run_command``.

    Each call returns the next return code from *returncodes* (the last one
    repeats), so tests can script e.g. ``install ok, fix fails``.
    """
    def factory(*returncodes: int) -> AsyncMock:
        codes = list(returncodes) or [0]

        async def _run(cmd, cwd=None, timeout=None, capture=True, env=None):
            code = codes.pop(0) if len(codes) > 1 else codes[0]
            return (code, "", "")

        return AsyncMock(side_effect=_run)

    return factory
