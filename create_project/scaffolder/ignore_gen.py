"""Ignore-file generation (.gitignore, .eslintignore, .prettierignore).

Each ignore file is a template filtered line by line for the project's
target: build output under ``/dist`` only matters to web applications,
while compiled ``*.js``/``*.d.ts`` files sit next to their sources only in
npm libraries.
"""

from __future__ import annotations

from collections.abc import Callable

from create_project.changeset import Changeset, Step, insert, join_steps
from create_project.project import Project, TargetKind
from create_project.result import Result

from .templates import TemplateProvider

WEBAPP_ONLY_LINES = frozenset({"/dist", "!/webpack.config.js"})
NPM_ONLY_LINES = frozenset({"*.js", "*.d.ts", "*.js.map", "!/types/*.d.ts"})

IGNORE_FILES: tuple[tuple[str, str], ...] = (
    ("gitignore.template", ".gitignore"),
    ("eslintignore.template", ".eslintignore"),
    ("prettierignore.template", ".prettierignore"),
)


def target_line_filter(target: TargetKind) -> Callable[[str], bool]:
    """Return a predicate keeping the ignore lines relevant to *target*."""

    def _keep(line: str) -> bool:
        if line in WEBAPP_ONLY_LINES:
            return target is TargetKind.WEBAPP
        if line in NPM_ONLY_LINES:
            return target is TargetKind.NPM
        return True

    return _keep


def write_ignore_file(
    project: Project, templates: TemplateProvider, template_name: str, dest: str
) -> Step:
    keep = target_line_filter(project.target)

    async def _write(changeset: Changeset) -> Result:
        content = await templates.filter_ignore(template_name, keep)
        return insert(changeset, dest, content)

    return _write


def write_ignore_files(project: Project, templates: TemplateProvider) -> Step:
    """Stage every ignore file concurrently."""
    return join_steps(
        [
            write_ignore_file(project, templates, template_name, dest)
            for template_name, dest in IGNORE_FILES
        ]
    )
