"""TypeScript, Renovate and CI configuration plus the starter sources."""

from __future__ import annotations

from create_project.changeset import Step, join_steps
from create_project.project import Project, TargetKind

from .steps import copy_template, render_template
from .templates import TemplateProvider

STATIC_FILES: tuple[tuple[str, str], ...] = (
    ("tsconfig.template.json", "tsconfig.json"),
    ("tsconfig.test.template.json", "tsconfig.test.json"),
    ("renovate.lib.template.json", "renovate.json"),
    ("index.ts", "index.ts"),
    ("index.test.ts", "index.test.ts"),
)

WEBAPP_FILES: tuple[tuple[str, str], ...] = (
    ("webpack.config.js", "webpack.config.js"),
)


def write_ci_workflow(project: Project, templates: TemplateProvider) -> Step:
    return render_template(
        templates,
        "github.template/workflows/ci.yml.j2",
        ".github/workflows/ci.yml",
        {"node_versions": project.node.target_versions},
    )


def write_config_files(project: Project, templates: TemplateProvider) -> Step:
    """Stage the static configuration files and the CI workflow concurrently."""
    files = list(STATIC_FILES)
    if project.target is TargetKind.WEBAPP:
        files += WEBAPP_FILES
    return join_steps(
        [copy_template(templates, source, dest) for source, dest in files]
        + [write_ci_workflow(project, templates)]
    )
