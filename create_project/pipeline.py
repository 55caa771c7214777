"""create-project pipeline orchestrator.

Drives one scaffolding run through its phases:

STAGING  -- Check the destination, then stage every generated file.
FLUSHING -- Write the staged changeset to disk with exclusive creates.
GIT_INIT -- Run ``git init`` (only when the .git skeleton is not staged).
INSTALL  -- Install dependencies with the package manager.
FIX      -- Apply code style fixes with the package manager.

Any failure moves the run to FAILED and nothing further happens.  Files
already written stay on disk.

Usage::

    create-project init ./my-project --scope acme
    python -m create_project.pipeline init --webapp
"""

from __future__ import annotations

import asyncio
import sys
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

from create_project.changeset import Changeset, flush
from create_project.config import Config
from create_project.project import (
    Project,
    ProjectOptions,
    TargetKind,
    create_project_descriptor,
)
from create_project.project.models import GitHostOptions, NpmPackageOptions
from create_project.result import Failure, FailureReason, Result, Success, chain_async
from create_project.scaffolder import ProjectGenerator
from create_project.utils import (
    console,
    print_error,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
)

FAILURE_MESSAGES: dict[FailureReason, str] = {
    FailureReason.NOT_DIRECTORY: "Target exists and is not a directory",
    FailureReason.NOT_EMPTY: "Directory not empty",
    FailureReason.GIT_INIT_FAILED: "git init failed",
    FailureReason.INSTALL_FAILED: "yarn install failed",
    FailureReason.FIX_FAILED: "Failed to apply code style rules",
}


class Phase(str, Enum):
    """Where a run currently is (or where it stopped)."""
    STAGING = "staging"
    FLUSHING = "flushing"
    GIT_INIT = "git-init"
    INSTALL = "install"
    FIX = "fix"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs the staging, flush and external-command phases for one project.

    Attributes:
        project: The project being scaffolded.
        config: Commands and generator settings.
        phase: Current phase; ``DONE`` or ``FAILED`` once ``run`` returns.
        failed_phase: The phase that produced the failure, if any.
        changeset: The staged changeset, once staging succeeded.
    """

    def __init__(
        self,
        project: Project,
        config: Config,
        generator: Optional[ProjectGenerator] = None,
    ) -> None:
        self.project = project
        self.config = config
        self.generator = generator or ProjectGenerator(project, config)
        self.phase = Phase.STAGING
        self.failed_phase: Optional[Phase] = None
        self.changeset: Optional[Changeset] = None

    @property
    def destination(self) -> Path:
        return self.project.path

    async def run(self) -> Result:
        """Run every phase, stopping at the first failure."""
        result = await self._prepare_destination()
        result = await chain_async(result, self._stage)
        result = await chain_async(result, self._flush)
        if self.config.git_init == "command":
            result = await chain_async(result, self._git_init)
        result = await chain_async(result, self._install)
        result = await chain_async(result, self._fix)

        if isinstance(result, Failure):
            self.failed_phase = self.phase
            self.phase = Phase.FAILED
        else:
            self.phase = Phase.DONE
        return result

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    async def _prepare_destination(self) -> Result:
        self.phase = Phase.STAGING
        reason = await asyncio.to_thread(_prepare_directory, self.destination)
        if reason is not None:
            return Failure(reason)
        return Success(None)

    async def _stage(self, _: None) -> Result:
        print_step(f"Staging project files for [bold]{self.project.npm_package.full_name}[/bold]")
        result = await self.generator.generate()
        if isinstance(result, Success):
            self.changeset = result.value
        return result

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    async def _flush(self, changeset: Changeset) -> Result:
        self.phase = Phase.FLUSHING
        print_step(f"Writing {len(changeset)} entries to {self.destination}")
        return await flush(changeset, self.destination)

    # ------------------------------------------------------------------
    # External commands
    # ------------------------------------------------------------------

    async def _git_init(self, changeset: Changeset) -> Result:
        return await self._run_command(
            Phase.GIT_INIT, self.config.commands.git_init, FailureReason.GIT_INIT_FAILED, changeset
        )

    async def _install(self, changeset: Changeset) -> Result:
        return await self._run_command(
            Phase.INSTALL, self.config.commands.install, FailureReason.INSTALL_FAILED, changeset
        )

    async def _fix(self, changeset: Changeset) -> Result:
        return await self._run_command(
            Phase.FIX, self.config.commands.fix, FailureReason.FIX_FAILED, changeset
        )

    async def _run_command(
        self,
        phase: Phase,
        cmd: list[str],
        reason: FailureReason,
        changeset: Changeset,
    ) -> Result:
        self.phase = phase
        print_step(f"Running [bold]{' '.join(cmd)}[/bold]")
        returncode, _, _ = await run_command(
            cmd,
            cwd=self.destination,
            timeout=self.config.commands.timeout,
            capture=False,
        )
        if returncode != 0:
            return Failure(reason)
        return Success(changeset)


def _prepare_directory(path: Path) -> Optional[FailureReason]:
    """Create *path* if needed; report why it cannot be scaffolded into."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError):
        return FailureReason.NOT_DIRECTORY
    if not is_empty_dir(path):
        return FailureReason.NOT_EMPTY
    return None


def is_empty_dir(path: Path) -> bool:
    """True when *path* contains no files at any depth."""
    return all(entry.is_dir() for entry in path.rglob("*"))


async def init_project(project: Project, config: Config) -> Result:
    """Scaffold *project* and run the external commands."""
    return await Pipeline(project, config).run()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _package_version() -> str:
    try:
        return version("create-project")
    except PackageNotFoundError:
        return "0.0.0"


async def _init(options: ProjectOptions, config: Config) -> Result:
    project = await create_project_descriptor(options, config)
    if project.license.copyright_holder is None:
        print_warning("No copyright holder found; LICENSE.md will not be written")
    print_summary_table(
        {
            "Package": project.npm_package.full_name,
            "Target": project.target.value,
            "Destination": str(project.path),
        },
        title="create-project",
    )
    return await init_project(project, config)


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``create-project``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="create-project",
        description="Scaffold a new TypeScript project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-project init\n"
            "  create-project init ./my-lib --scope acme\n"
            "  create-project init ./my-app --webapp --github-owner acme\n"
        ),
    )
    parser.add_argument("--version", action="version", version=_package_version())
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create a project in a new or empty directory")
    init_parser.add_argument(
        "destination",
        nargs="?",
        default=None,
        help="Destination directory (default: current directory)",
    )
    init_parser.add_argument("--scope", default=None, help="npm scope, with or without '@'")
    init_parser.add_argument("--name", default=None, help="npm package name")
    init_parser.add_argument("--github-owner", default=None, help="GitHub user or organisation")
    init_parser.add_argument("--github-project", default=None, help="GitHub repository name")
    init_parser.add_argument(
        "--webapp", action="store_true", help="Create a web application instead of an npm library"
    )

    args = parser.parse_args(argv)

    options = ProjectOptions(
        path=Path(args.destination) if args.destination else Path.cwd(),
        npm_package=NpmPackageOptions(scope=args.scope, name=args.name),
        git_host=GitHostOptions(user=args.github_owner, project=args.github_project),
        target=TargetKind.WEBAPP if args.webapp else None,
    )

    try:
        config = Config.from_env()
        result = asyncio.run(_init(options, config))
    except Exception as exc:
        print_error(str(exc) or type(exc).__name__)
        sys.exit(1)

    if isinstance(result, Failure):
        print_error(FAILURE_MESSAGES[result.reason])
        if result.reason.is_external_command:
            print_warning(f"Project files were written to {options.path}")
        sys.exit(1)

    print_success("Project created successfully!")
    console.print(f"  [dim]{options.path}[/dim]")


if __name__ == "__main__":
    main()
