"""JetBrains IDE project metadata (.idea/).

Static files are copied from ``idea.template/``; the module file is renamed
after the package, ``modules.xml`` is patched to point at it, and the
project dictionary is built from ``dictionary.txt``.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from create_project.changeset import Changeset, Step, XmlDocument, chain_steps, insert, join_steps
from create_project.project import Project, TargetKind
from create_project.result import Result

from .steps import copy_template
from .templates import TemplateProvider

TEMPLATE_DIR = "idea.template"
TEMPLATE_MODULE = "create-project.iml"

_EXCLUDED_DIRS = frozenset({"dictionaries", "runConfigurations"})
_EXCLUDED_FILES = frozenset({"workspace.xml", "tasks.xml", "modules.xml"})
_TEMPLATE_MODULE_RE = re.compile(r"create-project\.iml$")

RUN_CONFIGURATIONS: dict[TargetKind, tuple[str, ...]] = {
    TargetKind.NPM: ("build", "test"),
    TargetKind.WEBAPP: ("start", "test"),
}


def is_misc_file(path: str) -> bool:
    """True for template files copied verbatim into ``.idea/``."""
    if path.split("/")[0] in _EXCLUDED_DIRS:
        return False
    if path in _EXCLUDED_FILES:
        return False
    return not path.endswith(".iml")


def write_idea_misc_files(templates: TemplateProvider) -> Step:
    async def _write(changeset: Changeset) -> Result:
        paths = await templates.list_template_tree(TEMPLATE_DIR)
        copies = [
            copy_template(templates, f"{TEMPLATE_DIR}/{path}", f".idea/{path}")
            for path in paths
            if is_misc_file(path)
        ]
        return await join_steps(copies)(changeset)

    return _write


def write_idea_module_iml(project: Project, templates: TemplateProvider) -> Step:
    return copy_template(
        templates,
        f"{TEMPLATE_DIR}/{TEMPLATE_MODULE}",
        f".idea/{project.npm_package.name}.iml",
    )


def write_idea_modules_xml(project: Project, templates: TemplateProvider) -> Step:
    module_file = f"{project.npm_package.name}.iml"

    def _retarget(root: ET.Element) -> ET.Element:
        module = root.find("./component/modules/module")
        if module is None:
            raise ValueError(f"{TEMPLATE_DIR}/modules.xml has no module entry")
        for attribute in ("fileurl", "filepath"):
            module.set(attribute, _TEMPLATE_MODULE_RE.sub(module_file, module.get(attribute, "")))
        return root

    async def _write(changeset: Changeset) -> Result:
        document = await templates.modify_xml(f"{TEMPLATE_DIR}/modules.xml", _retarget)
        return insert(changeset, ".idea/modules.xml", document)

    return _write


def write_idea_dictionaries(templates: TemplateProvider) -> Step:
    async def _write(changeset: Changeset) -> Result:
        text = (await templates.read_template("dictionary.txt")).decode("utf-8")
        words = sorted(word.strip() for word in text.split("\n") if word.strip())
        return insert(changeset, ".idea/dictionaries/project.xml", build_dictionary(words))

    return _write


def build_dictionary(words: list[str]) -> XmlDocument:
    """Build an IDE ``ProjectDictionaryState`` component listing *words*."""
    component = ET.Element("component", {"name": "ProjectDictionaryState"})
    dictionary = ET.SubElement(component, "dictionary", {"name": "project"})
    words_element = ET.SubElement(dictionary, "words")
    for word in words:
        ET.SubElement(words_element, "w").text = word
    ET.indent(component, space="  ")
    return XmlDocument(root=component, declaration=False)


def write_idea_run_configurations(project: Project, templates: TemplateProvider) -> Step:
    return join_steps(
        [
            copy_template(
                templates,
                f"{TEMPLATE_DIR}/runConfigurations/{name}.xml",
                f".idea/runConfigurations/{name}.xml",
            )
            for name in RUN_CONFIGURATIONS[project.target]
        ]
    )


def write_idea_project_files(project: Project, templates: TemplateProvider) -> Step:
    return chain_steps(
        [
            write_idea_misc_files(templates),
            write_idea_modules_xml(project, templates),
            write_idea_module_iml(project, templates),
            write_idea_dictionaries(templates),
            write_idea_run_configurations(project, templates),
        ]
    )
