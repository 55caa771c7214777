"""Build a ``Project`` descriptor for a brand-new project."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Optional

from create_project.config import Config
from create_project.utils import CommandError, run_command

from .copyright import guess_copyright_holder
from .git_host import create_git_host
from .models import Author, License, NpmPackage, Project, ProjectOptions, TargetKind
from .node_versions import create_node_versions


async def create_project_descriptor(
    options: ProjectOptions,
    config: Config,
    today: Optional[date] = None,
) -> Project:
    """Fill in everything *options* leaves unset.

    Author name and email fall back to the user's git configuration.  The
    npm package name falls back to the destination directory name.
    """
    today = today or datetime.now(timezone.utc).date()
    path = options.path.resolve()

    author_name, author_email = await asyncio.gather(
        _or_git_config(options.author.name, "user.name"),
        _or_git_config(options.author.email, "user.email"),
    )

    npm_package = NpmPackage(
        name=options.npm_package.name or path.name,
        scope=options.npm_package.scope,
    )
    git_host = create_git_host(options, config.default_github_owner)

    return Project(
        path=path,
        npm_package=npm_package,
        git_host=git_host,
        node=create_node_versions(today),
        target=options.target or TargetKind.NPM,
        author=Author(name=author_name, email=author_email),
        license=License(
            spdx_license=options.spdx_license,
            year=today.year,
            copyright_holder=guess_copyright_holder(
                config.copyright_holders,
                explicit=options.copyright_holder,
                scope=npm_package.scope,
                git_user=git_host.user,
                author_name=author_name,
            ),
        ),
    )


async def _or_git_config(value: Optional[str], key: str) -> Optional[str]:
    if value is not None:
        return value.strip() or None
    return await read_git_config(key)


async def read_git_config(key: str) -> Optional[str]:
    """Return ``git config <key>``, or ``None`` if git is missing or the key unset."""
    try:
        returncode, stdout, _ = await run_command(["git", "config", key])
    except CommandError:
        return None
    if returncode != 0:
        return None
    return stdout.strip() or None
