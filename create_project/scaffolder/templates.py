"""Packaged template access for project scaffolding.

Provides the TemplateProvider class which reads static template files and
directory listings from ``create_project/scaffolder/templates/``, renders
Jinja2 ``.j2`` templates with project-specific context data, and applies
JSON/XML mutations and line filters to templates before they are staged.

A missing or malformed template is a packaging bug, not a user-facing
condition, so those cases raise instead of returning a failure result.
"""

from __future__ import annotations

import asyncio
import json
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from create_project.changeset import JsonDocument, XmlDocument
from create_project.config import DEFAULT_TEMPLATE_DIR
from create_project.project.node_versions import engines_range


class TemplateNotFoundError(Exception):
    """Raised when a named template is not shipped with the package."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template not found: {name}")


# ---------------------------------------------------------------------------
# TemplateProvider
# ---------------------------------------------------------------------------


class TemplateProvider:
    """Reads, lists and renders scaffolding templates.

    Template names are POSIX paths relative to the template directory, e.g.
    ``"idea.template/modules.xml"``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["engines_range"] = engines_range

    # -- Raw access --------------------------------------------------------

    def exists(self, name: str) -> bool:
        """True when *name* resolves to a template file."""
        try:
            return self._resolve(name).is_file()
        except TemplateNotFoundError:
            return False

    async def read_template(self, name: str) -> bytes:
        """Return the raw bytes of template *name*."""
        path = self._resolve(name)
        if not path.is_file():
            raise TemplateNotFoundError(name)
        return await asyncio.to_thread(path.read_bytes)

    async def list_template_tree(self, dir_name: str) -> list[str]:
        """Return every file beneath template directory *dir_name*.

        Paths are relative to *dir_name*, POSIX-style and sorted lexically.
        """
        root = self._resolve(dir_name)
        if not root.is_dir():
            raise TemplateNotFoundError(dir_name)

        def _walk() -> list[str]:
            return sorted(
                p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()
            )

        return await asyncio.to_thread(_walk)

    # -- Rendering ---------------------------------------------------------

    def render(self, name: str, context: dict[str, Any]) -> bytes:
        """Render Jinja2 template *name* with *context*."""
        try:
            template = self.env.get_template(name)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(name) from exc
        return template.render(**context).encode("utf-8")

    # -- Transformations ---------------------------------------------------

    async def modify_json(
        self,
        name: str,
        transform: Callable[[dict[str, Any]], dict[str, Any]],
        *,
        key_order: Sequence[str] = (),
        sorted_keys: Sequence[str] = (),
    ) -> JsonDocument:
        """Parse a JSON template and return the transformed document."""
        data = json.loads(await self.read_template(name))
        return JsonDocument(
            data=transform(data),
            key_order=tuple(key_order),
            sorted_keys=tuple(sorted_keys),
        )

    async def modify_xml(
        self, name: str, transform: Callable[[ET.Element], ET.Element]
    ) -> XmlDocument:
        """Parse an XML template and return the transformed document."""
        root = ET.fromstring(await self.read_template(name))
        return XmlDocument(root=transform(root))

    async def filter_ignore(self, name: str, keep: Callable[[str], bool]) -> bytes:
        """Return an ignore-file template without the lines *keep* rejects."""
        text = (await self.read_template(name)).decode("utf-8")
        lines = [line for line in text.split("\n") if keep(line)]
        return "\n".join(lines).encode("utf-8")

    # -- Utility -----------------------------------------------------------

    def _resolve(self, name: str) -> Path:
        parts = name.split("/")
        if any(part in ("", "..") for part in parts):
            raise TemplateNotFoundError(name)
        return self.template_dir.joinpath(*parts)
