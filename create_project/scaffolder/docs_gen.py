"""README and LICENSE generation."""

from __future__ import annotations

from create_project.changeset import Step
from create_project.project import Project
from create_project.project.git_host import homepage_url

from .steps import render_template, skip
from .templates import TemplateProvider


def write_license(project: Project, templates: TemplateProvider, default_license: str) -> Step:
    """Render ``LICENSE.md`` when the license has a template and a holder is known."""
    spdx_license = project.license.spdx_license or default_license
    name = f"licenses/{spdx_license}.md.j2"
    holder = project.license.copyright_holder
    if holder is None or not templates.exists(name):
        return skip
    return render_template(
        templates,
        name,
        "LICENSE.md",
        {"year": project.license.year, "copyright_holder": holder},
    )


def write_readme(project: Project, templates: TemplateProvider) -> Step:
    return render_template(
        templates,
        "README.md.j2",
        "README.md",
        {
            "package_name": project.npm_package.full_name,
            "homepage": homepage_url(project.git_host) if project.git_host else None,
            "node_versions": project.node.target_versions,
            "target": project.target.value,
        },
    )
