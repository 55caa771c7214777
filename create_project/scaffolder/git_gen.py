"""Git repository skeleton (.git/) staged from templates."""

from __future__ import annotations

from create_project.changeset import Changeset, Directory, Step, insert_fn, join_steps
from create_project.result import Result

from .steps import copy_template
from .templates import TemplateProvider

TEMPLATE_DIR = "git.template"

GIT_DIRECTORIES: tuple[str, ...] = (
    ".git/objects/info",
    ".git/objects/pack",
    ".git/refs/heads",
    ".git/refs/tags",
    ".git/hooks",
)


def write_git_skeleton(templates: TemplateProvider) -> Step:
    """Stage the empty directories and template files of a fresh repository."""

    async def _write(changeset: Changeset) -> Result:
        paths = await templates.list_template_tree(TEMPLATE_DIR)
        steps = [insert_fn(directory, Directory()) for directory in GIT_DIRECTORIES]
        steps += [
            copy_template(templates, f"{TEMPLATE_DIR}/{path}", f".git/{path}")
            for path in paths
        ]
        return await join_steps(steps)(changeset)

    return _write
