"""npm manifest generation (package.json, .npmignore).

The packaged ``package.json`` template carries the fields of every target
kind.  :func:`apply_target_profile` strips the optional fields that do not
belong to the project's target, driven by the ``TARGET_PROFILES`` table
rather than per-field conditionals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from create_project.changeset import Changeset, Step, chain_steps, insert
from create_project.project import Project, TargetKind
from create_project.project.git_host import bugs_url, homepage_url, repository_shortcut
from create_project.project.node_versions import engines_range
from create_project.result import Result

from .steps import copy_template, skip
from .templates import TemplateProvider

PACKAGE_JSON_KEY_ORDER: tuple[str, ...] = (
    "private",
    "name",
    "version",
    "description",
    "keywords",
    "author",
    "maintainers",
    "contributors",
    "homepage",
    "bugs",
    "repository",
    "license",
    "scripts",
    "main",
    "module",
    "browser",
    "man",
    "preferGlobal",
    "bin",
    "files",
    "directories",
    "sideEffects",
    "types",
    "typings",
    "dependencies",
    "optionalDependencies",
    "bundleDependencies",
    "bundledDependencies",
    "peerDependencies",
    "devDependencies",
    "engines",
    "engine-strict",
    "engineStrict",
    "os",
    "cpu",
    "eslintConfig",
    "prettier",
    "config",
    "ava",
    "release",
)

PACKAGE_JSON_SORTED_KEYS: tuple[str, ...] = (
    "scripts",
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)


# ---------------------------------------------------------------------------
# Target profiles
# ---------------------------------------------------------------------------

# (section, key); an empty section means a top-level field.
OPTIONAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("", "main"),
    ("", "types"),
    ("scripts", "build"),
    ("scripts", "prepare"),
    ("scripts", "start"),
    ("dependencies", "@types/webpack-env"),
    ("devDependencies", "@softwareventures/tsconfig"),
    ("devDependencies", "@softwareventures/webpack-config"),
    ("devDependencies", "ts-loader"),
    ("devDependencies", "webpack"),
    ("devDependencies", "webpack-cli"),
    ("devDependencies", "webpack-dev-server"),
)


@dataclass(frozen=True)
class TargetProfile:
    """The optional manifest fields a target kind keeps."""

    target: TargetKind
    kept: frozenset[tuple[str, str]]


TARGET_PROFILES: dict[TargetKind, TargetProfile] = {
    TargetKind.NPM: TargetProfile(
        target=TargetKind.NPM,
        kept=frozenset(
            {
                ("", "main"),
                ("", "types"),
                ("scripts", "prepare"),
                ("devDependencies", "@softwareventures/tsconfig"),
            }
        ),
    ),
    TargetKind.WEBAPP: TargetProfile(
        target=TargetKind.WEBAPP,
        kept=frozenset(
            {
                ("scripts", "build"),
                ("scripts", "start"),
                ("dependencies", "@types/webpack-env"),
                ("devDependencies", "@softwareventures/webpack-config"),
                ("devDependencies", "ts-loader"),
                ("devDependencies", "webpack"),
                ("devDependencies", "webpack-cli"),
                ("devDependencies", "webpack-dev-server"),
            }
        ),
    ),
}


def apply_target_profile(manifest: dict[str, Any], target: TargetKind) -> dict[str, Any]:
    """Return a copy of *manifest* without the optional fields *target* drops."""
    kept = TARGET_PROFILES[target].kept
    result = dict(manifest)
    for section, key in OPTIONAL_FIELDS:
        if (section, key) in kept:
            continue
        if not section:
            result.pop(key, None)
        elif isinstance(result.get(section), dict):
            result[section] = {k: v for k, v in result[section].items() if k != key}
    return result


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------


def package_json_transform(project: Project, default_license: str):
    """Return the function that fills the manifest template for *project*."""
    git_host = project.git_host
    links = {
        "homepage": homepage_url(git_host) if git_host else None,
        "bugs": bugs_url(git_host) if git_host else None,
        "repository": repository_shortcut(git_host) if git_host else None,
    }

    def _transform(manifest: dict[str, Any]) -> dict[str, Any]:
        result = {**manifest, "name": project.npm_package.full_name}
        for key, value in links.items():
            _set_or_drop(result, key, value)
        _set_or_drop(result, "author", format_author(project))
        result["license"] = project.license.spdx_license or default_license
        result["engines"] = {
            **manifest.get("engines", {}),
            "node": engines_range(project.node.target_versions),
        }
        return apply_target_profile(result, project.target)

    return _transform


def format_author(project: Project) -> Optional[str]:
    """``Name <email>``, or whichever half is known."""
    name, email = project.author.name, project.author.email
    if name and email:
        return f"{name} <{email}>"
    if email:
        return f"<{email}>"
    return name or None


def _set_or_drop(manifest: dict[str, Any], key: str, value: Optional[str]) -> None:
    if value is None:
        manifest.pop(key, None)
    else:
        manifest[key] = value


def write_package_json(
    project: Project, templates: TemplateProvider, default_license: str = "ISC"
) -> Step:
    transform = package_json_transform(project, default_license)

    async def _write(changeset: Changeset) -> Result:
        document = await templates.modify_json(
            "package.json",
            transform,
            key_order=PACKAGE_JSON_KEY_ORDER,
            sorted_keys=PACKAGE_JSON_SORTED_KEYS,
        )
        return insert(changeset, "package.json", document)

    return _write


def write_npm_ignore(project: Project, templates: TemplateProvider) -> Step:
    if project.target is TargetKind.NPM:
        return copy_template(templates, "npmignore.template", ".npmignore")
    return skip


def write_npm_files(
    project: Project, templates: TemplateProvider, default_license: str = "ISC"
) -> Step:
    return chain_steps(
        [
            write_package_json(project, templates, default_license),
            write_npm_ignore(project, templates),
        ]
    )
