"""create-project: scaffold TypeScript projects through a staged changeset.

Quick usage::

    from create_project.config import Config
    from create_project.pipeline import init_project
    from create_project.project import ProjectOptions, create_project_descriptor

    config = Config()
    project = await create_project_descriptor(ProjectOptions(path=dest), config)
    result = await init_project(project, config)
"""
