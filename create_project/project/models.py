"""Pydantic v2 models describing the project being scaffolded.

A ``Project`` is built once, either fresh from ``ProjectOptions`` or by
reading back an existing directory, and is read-only afterwards.  The
generators consume it; the changeset engine never looks at it.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TargetKind(str, Enum):
    """What kind of artefact the project builds."""
    NPM = "npm"
    WEBAPP = "webapp"


# ---------------------------------------------------------------------------
# Package & host
# ---------------------------------------------------------------------------

class NpmPackage(BaseModel):
    """npm package identity. ``scope`` is stored without the leading ``@``."""

    model_config = ConfigDict(frozen=True)

    name: str
    scope: Optional[str] = None

    @property
    def full_name(self) -> str:
        """The published name, e.g. ``@scope/name``."""
        return f"@{self.scope}/{self.name}" if self.scope else self.name


class GitHubHost(BaseModel):
    """A repository hosted on GitHub."""

    model_config = ConfigDict(frozen=True)

    service: Literal["github"] = "github"
    user: str
    project: str


class UnknownGitHost(BaseModel):
    """A repository URL we cannot interpret."""

    model_config = ConfigDict(frozen=True)

    service: Literal["unknown"] = "unknown"
    url: str


GitHost = Annotated[Union[GitHubHost, UnknownGitHost], Field(discriminator="service")]


class NodeVersions(BaseModel):
    """Node.js major versions the project supports."""

    model_config = ConfigDict(frozen=True)

    target_versions: tuple[int, ...] = ()
    current_releases: tuple[int, ...] = ()


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None


class License(BaseModel):
    model_config = ConfigDict(frozen=True)

    spdx_license: Optional[str] = None
    year: int
    copyright_holder: Optional[str] = None


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------

class Project(BaseModel):
    """Complete, immutable description of the project to scaffold."""

    model_config = ConfigDict(frozen=True)

    path: Path
    npm_package: NpmPackage
    git_host: Optional[GitHost] = None
    node: NodeVersions = Field(default_factory=NodeVersions)
    target: TargetKind = TargetKind.NPM
    author: Author = Field(default_factory=Author)
    license: License


# ---------------------------------------------------------------------------
# Options (user input to the project factory)
# ---------------------------------------------------------------------------

class NpmPackageOptions(BaseModel):
    scope: Optional[str] = None
    name: Optional[str] = None

    @field_validator("scope")
    @classmethod
    def _strip_at(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.lstrip("@") or None


class GitHostOptions(BaseModel):
    user: Optional[str] = None
    project: Optional[str] = None


class ProjectOptions(BaseModel):
    """Everything a caller may specify; unset fields are guessed."""

    path: Path
    npm_package: NpmPackageOptions = Field(default_factory=NpmPackageOptions)
    git_host: GitHostOptions = Field(default_factory=GitHostOptions)
    target: Optional[TargetKind] = None
    author: Author = Field(default_factory=Author)
    spdx_license: Optional[str] = None
    copyright_holder: Optional[str] = None
