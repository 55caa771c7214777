"""Read a ``Project`` descriptor back from an existing project directory."""

from __future__ import annotations

import asyncio
import json
import re
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from create_project.config import Config
from create_project.result import Failure, Result, Success, map_result
from create_project.utils import load_json

from .copyright import guess_copyright_holder
from .git_host import git_host_from_url
from .models import Author, GitHubHost, License, NpmPackage, Project, TargetKind
from .node_versions import read_node_versions
from .spdx import correct_spdx_expression

_NAME_RE = re.compile(r"^(?:@(.*?)/)?(.*)$")
_AUTHOR_RE = re.compile(r"^\s*(.*?)(?:\s*<\s*(.*?)\s*>)?\s*$")


class ReadProjectFailureReason(str, Enum):
    """Why an existing project could not be read."""
    FILE_NOT_FOUND = "file-not-found"
    INVALID_JSON = "invalid-json"


async def read_project(
    path: str | Path,
    config: Config,
    today: Optional[date] = None,
) -> Result:
    """Reconstruct the descriptor of the project at *path* from its files.

    Returns ``Success(Project)`` or ``Failure(ReadProjectFailureReason)``.
    """
    root = Path(path).resolve()
    today = today or datetime.now(timezone.utc).date()

    package_json, is_webapp = await asyncio.gather(
        _read_package_json(root),
        asyncio.to_thread((root / "webpack.config.js").is_file),
    )
    return map_result(
        package_json,
        lambda manifest: _project_from_manifest(root, manifest, is_webapp, config, today),
    )


def _project_from_manifest(
    root: Path,
    manifest: dict[str, Any],
    is_webapp: bool,
    config: Config,
    today: date,
) -> Project:
    scope, name = _split_name(manifest.get("name"))
    npm_package = NpmPackage(name=name, scope=scope)
    git_host = git_host_from_url(manifest.get("repository"))
    author = parse_author(manifest.get("author"))

    license_value = manifest.get("license")
    spdx_license = (
        correct_spdx_expression(license_value) if isinstance(license_value, str) else None
    )

    return Project(
        path=root,
        npm_package=npm_package,
        git_host=git_host,
        node=read_node_versions(manifest, today),
        target=TargetKind.WEBAPP if is_webapp else TargetKind.NPM,
        author=author,
        license=License(
            spdx_license=spdx_license,
            year=today.year,
            copyright_holder=guess_copyright_holder(
                config.copyright_holders,
                scope=npm_package.scope,
                git_user=git_host.user if isinstance(git_host, GitHubHost) else None,
                author_name=author.name,
            ),
        ),
    )


async def _read_package_json(root: Path) -> Result:
    try:
        data = await asyncio.to_thread(load_json, root / "package.json")
    except FileNotFoundError:
        return Failure(ReadProjectFailureReason.FILE_NOT_FOUND)
    except json.JSONDecodeError:
        return Failure(ReadProjectFailureReason.INVALID_JSON)
    if not isinstance(data, dict):
        return Failure(ReadProjectFailureReason.INVALID_JSON)
    return Success(data)


def _split_name(value: Any) -> tuple[Optional[str], str]:
    match = _NAME_RE.match(value if isinstance(value, str) else "")
    scope, name = match.groups() if match else (None, "")
    return scope or None, name


def parse_author(value: Any) -> Author:
    """Parse ``"Name <email>"`` or ``{"name", "email"}`` author fields."""
    if isinstance(value, dict):
        name = value.get("name")
        email = value.get("email")
        return Author(
            name=str(name) if name is not None else None,
            email=str(email) if email is not None else None,
        )
    if isinstance(value, str):
        match = _AUTHOR_RE.match(value)
        if match:
            name, email = match.groups()
            return Author(name=name or None, email=email or None)
    return Author()
