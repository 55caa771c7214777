"""Project descriptor: what is being scaffolded, and where.

Quick usage::

    from create_project.project import ProjectOptions, create_project_descriptor

    project = await create_project_descriptor(ProjectOptions(path=dest), config)
"""

from create_project.project.create import create_project_descriptor
from create_project.project.models import (
    Author,
    GitHost,
    GitHubHost,
    License,
    NodeVersions,
    NpmPackage,
    Project,
    ProjectOptions,
    TargetKind,
    UnknownGitHost,
)
from create_project.project.read import ReadProjectFailureReason, read_project

__all__ = [
    "Author",
    "GitHost",
    "GitHubHost",
    "License",
    "NodeVersions",
    "NpmPackage",
    "Project",
    "ProjectOptions",
    "ReadProjectFailureReason",
    "TargetKind",
    "UnknownGitHost",
    "create_project_descriptor",
    "read_project",
]
