"""create-project configuration.

Centralised, typed configuration for a scaffolding run.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"

DEFAULT_COPYRIGHT_HOLDERS: dict[str, str] = {
    "softwareventures": "Software Ventures Limited",
    "eccosolutions": "ecco solutions ltd",
}


class CommandConfig(BaseModel):
    """External commands run after the project files are written."""

    install: list[str] = Field(default_factory=lambda: ["yarn"])
    fix: list[str] = Field(default_factory=lambda: ["yarn", "fix"])
    git_init: list[str] = Field(default_factory=lambda: ["git", "init"])
    timeout: Optional[int] = Field(
        default=None, ge=1, description="Per-command timeout in seconds (None waits forever)"
    )


class Config(BaseModel):
    """Global create-project configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the project factory, the generators, and the ``Pipeline``.
    """

    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    default_github_owner: str = Field(default="softwareventures")
    copyright_holders: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_COPYRIGHT_HOLDERS),
        description="Maps a scope or GitHub user to the copyright holder name",
    )
    default_license: str = Field(default="ISC")
    commands: CommandConfig = Field(default_factory=CommandConfig)

    # "template" stages a .git skeleton from templates; "command" runs git init.
    git_init: Literal["template", "command"] = Field(default="template")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_PROJECT_TEMPLATE_DIR, CREATE_PROJECT_GITHUB_OWNER,
            CREATE_PROJECT_LICENSE, CREATE_PROJECT_GIT_INIT,
            CREATE_PROJECT_INSTALL_COMMAND, CREATE_PROJECT_FIX_COMMAND,
            CREATE_PROJECT_COMMAND_TIMEOUT.

        Command variables are split with shell quoting rules.
        """
        command_kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_PROJECT_INSTALL_COMMAND"):
            command_kwargs["install"] = shlex.split(os.environ["CREATE_PROJECT_INSTALL_COMMAND"])
        if os.environ.get("CREATE_PROJECT_FIX_COMMAND"):
            command_kwargs["fix"] = shlex.split(os.environ["CREATE_PROJECT_FIX_COMMAND"])
        if os.environ.get("CREATE_PROJECT_COMMAND_TIMEOUT"):
            command_kwargs["timeout"] = int(os.environ["CREATE_PROJECT_COMMAND_TIMEOUT"])

        kwargs: dict[str, Any] = {"commands": CommandConfig(**command_kwargs)}
        if os.environ.get("CREATE_PROJECT_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["CREATE_PROJECT_TEMPLATE_DIR"])
        if os.environ.get("CREATE_PROJECT_GITHUB_OWNER"):
            kwargs["default_github_owner"] = os.environ["CREATE_PROJECT_GITHUB_OWNER"]
        if os.environ.get("CREATE_PROJECT_LICENSE"):
            kwargs["default_license"] = os.environ["CREATE_PROJECT_LICENSE"]
        if os.environ.get("CREATE_PROJECT_GIT_INIT"):
            kwargs["git_init"] = os.environ["CREATE_PROJECT_GIT_INIT"]

        return cls(**kwargs)
