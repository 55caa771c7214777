"""Small step builders shared by the generators."""

from __future__ import annotations

from typing import Any, Optional

from create_project.changeset import Changeset, Step, insert
from create_project.result import Result, Success

from .templates import TemplateProvider


def copy_template(
    templates: TemplateProvider, source: str, dest: Optional[str] = None
) -> Step:
    """Stage template *source* verbatim at *dest* (defaults to *source*)."""

    async def _copy(changeset: Changeset) -> Result:
        content = await templates.read_template(source)
        return insert(changeset, dest or source, content)

    return _copy


def render_template(
    templates: TemplateProvider, name: str, dest: str, context: dict[str, Any]
) -> Step:
    """Stage the Jinja2 rendering of template *name* at *dest*."""

    async def _render(changeset: Changeset) -> Result:
        return insert(changeset, dest, templates.render(name, context))

    return _render


async def skip(changeset: Changeset) -> Result:
    """A step that stages nothing."""
    return Success(changeset)
