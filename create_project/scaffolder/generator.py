"""Main scaffolding orchestrator.

Takes a ``Project`` descriptor and composes every generator into a single
step that stages the complete project tree into a ``Changeset``.  Nothing is
written to disk here; see :mod:`create_project.pipeline` for the flush and
the external commands.
"""

from __future__ import annotations

from typing import Optional

from create_project.changeset import Step, chain_steps, empty
from create_project.config import Config
from create_project.project import Project
from create_project.result import Result

from .config_gen import write_config_files
from .docs_gen import write_license, write_readme
from .git_gen import write_git_skeleton
from .idea_gen import write_idea_project_files
from .ignore_gen import write_ignore_files
from .npm_gen import write_npm_files
from .templates import TemplateProvider


class ProjectGenerator:
    """Composes the generators for one project.

    The generated tree contains:
    - TypeScript, Renovate and GitHub Actions configuration
    - .gitignore, .eslintignore and .prettierignore filtered for the target
    - package.json (and .npmignore for npm libraries)
    - JetBrains IDE metadata under .idea/
    - README.md and LICENSE.md
    - a .git/ skeleton, unless git is initialised by running ``git init``
    """

    def __init__(
        self,
        project: Project,
        config: Optional[Config] = None,
        templates: Optional[TemplateProvider] = None,
    ) -> None:
        self.project = project
        self.config = config or Config()
        self.templates = templates or TemplateProvider(self.config.template_dir)

    # -- Public API --------------------------------------------------------

    def step(self) -> Step:
        """Return the step staging the whole project."""
        project, templates = self.project, self.templates
        default_license = self.config.default_license

        steps = [
            write_config_files(project, templates),
            write_ignore_files(project, templates),
            write_npm_files(project, templates, default_license),
            write_idea_project_files(project, templates),
            write_readme(project, templates),
            write_license(project, templates, default_license),
        ]
        if self.config.git_init == "template":
            steps.append(write_git_skeleton(templates))
        return chain_steps(steps)

    async def generate(self) -> Result:
        """Stage the project into a fresh changeset."""
        return await self.step()(empty())
