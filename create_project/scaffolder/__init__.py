"""create-project scaffolder -- stages a TypeScript project tree.

Every generator in this package returns a *step*: an async function taking
a ``Changeset`` and returning ``Result[Changeset]``.  ``ProjectGenerator``
composes them; nothing touches the disk until the changeset is flushed.

Quick usage::

    from create_project.scaffolder import ProjectGenerator

    generator = ProjectGenerator(project, config)
    result = await generator.generate()
"""

from create_project.scaffolder.generator import ProjectGenerator
from create_project.scaffolder.templates import TemplateNotFoundError, TemplateProvider

__all__ = [
    "ProjectGenerator",
    "TemplateNotFoundError",
    "TemplateProvider",
]
