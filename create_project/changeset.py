"""Staged, immutable set of pending file writes.

Generators never touch the disk directly.  Each one contributes entries to a
``Changeset`` through :func:`insert`, which is the only place where path
collisions are detected.  A completed changeset is written out by
:func:`flush`, which uses exclusive file creation so pre-existing files on
disk are reported rather than overwritten.

Steps are async callables ``Changeset -> Result[Changeset]``.  They compose
sequentially with :func:`chain_steps` and concurrently with
:func:`join_steps`.
"""

from __future__ import annotations

import asyncio
import copy
import json
import xml.etree.ElementTree as ET
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from create_project.result import Failure, FailureReason, Result, Success, all_async_results


# ---------------------------------------------------------------------------
# Pending content
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JsonDocument:
    """A JSON object serialized at flush time.

    Top-level keys named in *key_order* come first, in that order; remaining
    keys keep their original order.  Nested objects named in *sorted_keys*
    have their own keys sorted alphabetically.
    """

    data: dict[str, Any]
    key_order: tuple[str, ...] = ()
    sorted_keys: tuple[str, ...] = ()

    def serialize(self) -> bytes:
        ordered: dict[str, Any] = {}
        for key in self.key_order:
            if key in self.data:
                ordered[key] = self.data[key]
        for key, value in self.data.items():
            if key not in ordered:
                ordered[key] = value
        for key in self.sorted_keys:
            value = ordered.get(key)
            if isinstance(value, dict):
                ordered[key] = dict(sorted(value.items()))
        text = json.dumps(ordered, indent=2, ensure_ascii=False)
        return (text + "\n").encode("utf-8")


@dataclass(frozen=True)
class XmlDocument:
    """An XML element tree serialized at flush time."""

    root: ET.Element
    declaration: bool = True

    def serialize(self) -> bytes:
        text = ET.tostring(self.root, encoding="unicode")
        if self.declaration:
            text = '<?xml version="1.0" encoding="UTF-8"?>\n' + text
        if not text.endswith("\n"):
            text += "\n"
        return text.encode("utf-8")


@dataclass(frozen=True)
class Directory:
    """An (initially empty) directory."""


FileContent = Union[bytes, JsonDocument, XmlDocument, Directory]


def serialize_content(content: FileContent) -> bytes:
    """Return the bytes that will be written for a file entry."""
    if isinstance(content, bytes):
        return content
    if isinstance(content, (JsonDocument, XmlDocument)):
        return content.serialize()
    raise TypeError(f"Content of type {type(content).__name__} has no byte representation")


# ---------------------------------------------------------------------------
# Changeset
# ---------------------------------------------------------------------------


class Changeset(Mapping[str, FileContent]):
    """Immutable mapping of relative POSIX paths to pending content.

    Entries keep insertion order.  There are no mutating methods: use
    :func:`insert` to obtain a new changeset with one more entry.  JSON and
    XML documents are copied on insert, so later changes to the caller's
    dict or element tree do not reach the staged entry.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, FileContent] | None = None) -> None:
        self._entries: dict[str, FileContent] = dict(entries or {})

    def __getitem__(self, path: str) -> FileContent:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Changeset({list(self._entries)!r})"

    @property
    def paths(self) -> list[str]:
        """Paths in insertion order."""
        return list(self._entries)

    def added_since(self, base: Changeset) -> list[tuple[str, FileContent]]:
        """Entries present here but not in an earlier snapshot *base*."""
        return [
            (path, content)
            for path, content in self._entries.items()
            if path not in base
        ]


Step = Callable[[Changeset], Awaitable[Result]]


def empty() -> Changeset:
    """Return a changeset with no entries."""
    return Changeset()


def insert(changeset: Changeset, path: str, content: FileContent) -> Result:
    """Add one entry, returning ``Failure(NOT_EMPTY)`` on a path collision.

    A collision is an identical path, a file entry standing where a parent
    directory of *path* is needed, or a file at *path* when entries already
    live beneath it.  The input changeset is never modified.

    Raises:
        ValueError: If *path* is not a normalized relative POSIX path.
    """
    _check_path(path)
    if path in changeset or _blocks_tree(changeset, path, content):
        return Failure(FailureReason.NOT_EMPTY)
    entries = dict(changeset.items())
    if isinstance(content, (JsonDocument, XmlDocument)):
        content = copy.deepcopy(content)
    entries[path] = content
    return Success(Changeset(entries))


def insert_fn(path: str, content: FileContent) -> Step:
    """Return a step that inserts a single entry."""

    async def _insert(changeset: Changeset) -> Result:
        return insert(changeset, path, content)

    return _insert


def _check_path(path: str) -> None:
    if not isinstance(path, str) or not path:
        raise ValueError("Changeset paths must be non-empty strings")
    if path.startswith("/") or "\\" in path:
        raise ValueError(f"Changeset paths must be relative POSIX paths: {path!r}")
    if any(part in ("", ".", "..") for part in path.split("/")):
        raise ValueError(f"Changeset path is not normalized: {path!r}")


def _blocks_tree(changeset: Changeset, path: str, content: FileContent) -> bool:
    parts = path.split("/")
    for i in range(1, len(parts)):
        parent = "/".join(parts[:i])
        existing = changeset.get(parent)
        if existing is not None and not isinstance(existing, Directory):
            return True
    if isinstance(content, Directory):
        return False
    prefix = path + "/"
    return any(other.startswith(prefix) for other in changeset)


# ---------------------------------------------------------------------------
# Step combinators
# ---------------------------------------------------------------------------


def chain_steps(steps: Iterable[Step]) -> Step:
    """Compose steps sequentially.

    Each step receives the changeset produced by the previous one.  The first
    failure is returned as-is and no later step is invoked.
    """
    steps = list(steps)

    async def _chain(changeset: Changeset) -> Result:
        result: Result = Success(changeset)
        for step in steps:
            result = await step(result.value)
            if isinstance(result, Failure):
                return result
        return result

    return _chain


def join_steps(steps: Sequence[Step]) -> Step:
    """Compose independent steps concurrently.

    Every step runs against the same input snapshot and all of them are
    awaited before anything is merged; the first failure in step order wins.
    If every step succeeds, the entries each one added are folded into the
    snapshot in step order, so two steps that add the same path produce
    ``Failure(NOT_EMPTY)``.
    """
    steps = list(steps)

    async def _join(changeset: Changeset) -> Result:
        combined = await all_async_results(step(changeset) for step in steps)
        if isinstance(combined, Failure):
            return combined

        merged: Result = Success(changeset)
        for candidate in combined.value:
            for path, content in candidate.added_since(changeset):
                merged = insert(merged.value, path, content)
                if isinstance(merged, Failure):
                    return merged
        return merged

    return _join


# ---------------------------------------------------------------------------
# Flush
# ---------------------------------------------------------------------------


async def flush(changeset: Changeset, root: str | Path) -> Result:
    """Write every entry beneath *root*, one at a time, in insertion order.

    Files are created exclusively.  The first entry that meets existing
    content on disk stops the flush with ``Failure(NOT_EMPTY)``; entries
    written before it are left in place.
    """
    root_path = Path(root)
    for path, content in changeset.items():
        target = root_path.joinpath(*path.split("/"))
        written = await asyncio.to_thread(_write_entry, target, content)
        if not written:
            return Failure(FailureReason.NOT_EMPTY)
    return Success(changeset)


def _write_entry(target: Path, content: FileContent) -> bool:
    """Synchronous helper: returns ``False`` when *target* or a parent is already taken."""
    try:
        if isinstance(content, Directory):
            target.mkdir(parents=True, exist_ok=True)
            return True
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "xb") as fh:
            fh.write(serialize_content(content))
    except (FileExistsError, NotADirectoryError):
        return False
    return True
