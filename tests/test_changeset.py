"""Unit tests for the staged changeset engine (create_project.changeset).

Tests cover:
- empty / insert / insert_fn, including collision handling and immutability
- path validation
- chain_steps ordering and short-circuiting
- join_steps concurrency and re-validation of merged paths
- flush to disk, including pre-existing files
- JsonDocument / XmlDocument serialisation
"""

from __future__ import annotations

import asyncio
import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from create_project.changeset import (
    Changeset,
    Directory,
    JsonDocument,
    XmlDocument,
    chain_steps,
    empty,
    flush,
    insert,
    insert_fn,
    join_steps,
    serialize_content,
)
from create_project.result import Failure, FailureReason, Success

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _counting_step(calls: list[str], name: str, path: str | None = None):
    """A step that records its invocation and optionally inserts *path*."""

    async def _step(changeset: Changeset):
        calls.append(name)
        if path is None:
            return Success(changeset)
        return insert(changeset, path, name.encode())

    return _step


async def _failing_step(changeset: Changeset):
    return Failure(FailureReason.NOT_EMPTY)


# ---------------------------------------------------------------------------
# insert
# ---------------------------------------------------------------------------

class TestInsert:
    def test_empty_has_no_entries(self):
        assert len(empty()) == 0
        assert empty() == Changeset()

    def test_insert_adds_entry(self):
        result = insert(empty(), "a.txt", b"a")
        assert isinstance(result, Success)
        assert result.value["a.txt"] == b"a"
        assert result.value.paths == ["a.txt"]

    def test_insert_returns_new_value(self):
        original = empty()
        result = insert(original, "a.txt", b"a")
        assert len(original) == 0
        assert result.value is not original

    def test_documents_are_copied_on_insert(self):
        data = {"name": "x"}
        root = ET.Element("project")
        changeset = _build(("package.json", JsonDocument(data)), ("modules.xml", XmlDocument(root)))

        data["name"] = "changed"
        ET.SubElement(root, "component")

        assert changeset["package.json"].data == {"name": "x"}
        assert len(changeset["modules.xml"].root) == 0

    def test_duplicate_is_not_empty_failure(self):
        first = insert(empty(), "a.txt", b"first").value
        snapshot = Changeset(first)

        result = insert(first, "a.txt", b"second")

        assert result == Failure(FailureReason.NOT_EMPTY)
        assert first == snapshot
        assert first["a.txt"] == b"first"

    def test_sequence_of_inserts_has_unique_paths(self):
        changeset = empty()
        paths = ["a", "b/c", "b/d", "e/f/g", "a", "b/c"]
        outcomes = []
        for path in paths:
            result = insert(changeset, path, path.encode())
            outcomes.append(result.is_success)
            if result.is_success:
                changeset = result.value
        assert outcomes == [True, True, True, True, False, False]
        assert len(changeset.paths) == len(set(changeset.paths)) == 4

    def test_old_value_remains_usable(self):
        base = insert(empty(), "shared", b"x").value
        left = insert(base, "left", b"l").value
        right = insert(base, "right", b"r").value
        assert sorted(left) == ["left", "shared"]
        assert sorted(right) == ["right", "shared"]
        assert sorted(base) == ["shared"]

    def test_file_cannot_shadow_parent_directory(self):
        changeset = insert(empty(), "docs", b"file").value
        assert insert(changeset, "docs/readme.md", b"x") == Failure(FailureReason.NOT_EMPTY)

    def test_file_cannot_replace_populated_directory(self):
        changeset = insert(empty(), "docs/readme.md", b"x").value
        assert insert(changeset, "docs", b"file") == Failure(FailureReason.NOT_EMPTY)

    def test_directory_entries_may_contain_files(self):
        changeset = insert(empty(), ".git/hooks", Directory()).value
        result = insert(changeset, ".git/hooks/pre-commit", b"#!/bin/sh\n")
        assert result.is_success

    @pytest.mark.parametrize(
        "path",
        ["", "/etc/passwd", "a//b", "./a", "a/../b", "a/", "a\\b"],
    )
    def test_rejects_unnormalized_paths(self, path):
        with pytest.raises(ValueError):
            insert(empty(), path, b"")

    async def test_insert_fn(self):
        result = await insert_fn("x.txt", b"x")(empty())
        assert result.value["x.txt"] == b"x"

    def test_added_since(self):
        base = insert(empty(), "a", b"a").value
        later = insert(insert(base, "b", b"b").value, "c", b"c").value
        assert later.added_since(base) == [("b", b"b"), ("c", b"c")]


# ---------------------------------------------------------------------------
# chain_steps
# ---------------------------------------------------------------------------

class TestChainSteps:
    async def test_zero_steps_returns_input(self):
        result = await chain_steps([])(empty())
        assert result == Success(empty())

    async def test_runs_in_order_and_accumulates(self):
        calls: list[str] = []
        step = chain_steps(
            [
                _counting_step(calls, "one", "1.txt"),
                _counting_step(calls, "two", "2.txt"),
                _counting_step(calls, "three", "3.txt"),
            ]
        )
        result = await step(empty())
        assert calls == ["one", "two", "three"]
        assert result.value.paths == ["1.txt", "2.txt", "3.txt"]

    async def test_later_step_sees_earlier_entries(self):
        seen: list[list[str]] = []

        async def observe(changeset):
            seen.append(changeset.paths)
            return Success(changeset)

        await chain_steps([insert_fn("first", b""), observe])(empty())
        assert seen == [["first"]]

    @pytest.mark.parametrize("failing_index", [0, 2, 4])
    async def test_short_circuits_after_failure(self, failing_index):
        calls: list[str] = []
        steps = [_counting_step(calls, f"step{i}") for i in range(5)]
        steps[failing_index] = _failing_step

        result = await chain_steps(steps)(empty())

        assert result == Failure(FailureReason.NOT_EMPTY)
        assert calls == [f"step{i}" for i in range(failing_index)]

    async def test_collision_between_steps(self):
        calls: list[str] = []
        step = chain_steps(
            [
                _counting_step(calls, "webapp", ".gitignore"),
                _counting_step(calls, "npm", ".gitignore"),
                _counting_step(calls, "never"),
            ]
        )
        assert await step(empty()) == Failure(FailureReason.NOT_EMPTY)
        assert calls == ["webapp", "npm"]

    async def test_next_step_waits_for_previous(self):
        events: list[str] = []

        async def slow(changeset):
            events.append("slow-start")
            await asyncio.sleep(0.01)
            events.append("slow-end")
            return Success(changeset)

        async def fast(changeset):
            events.append("fast")
            return Success(changeset)

        await chain_steps([slow, fast])(empty())
        assert events == ["slow-start", "slow-end", "fast"]


# ---------------------------------------------------------------------------
# join_steps
# ---------------------------------------------------------------------------

class TestJoinSteps:
    async def test_zero_steps_returns_input(self):
        base = insert(empty(), "a", b"a").value
        assert await join_steps([])(base) == Success(base)

    async def test_merges_independent_insertions(self):
        calls: list[str] = []
        step = join_steps(
            [
                _counting_step(calls, "b", "b.txt"),
                _counting_step(calls, "a", "a.txt"),
            ]
        )
        base = insert(empty(), "base", b"").value
        result = await step(base)
        assert result.value.paths == ["base", "b.txt", "a.txt"]

    async def test_siblings_see_same_snapshot(self):
        seen: list[list[str]] = []

        def observer(path):
            async def _step(changeset):
                seen.append(changeset.paths)
                return insert(changeset, path, b"")
            return _step

        base = insert(empty(), "base", b"").value
        await join_steps([observer("x"), observer("y")])(base)
        assert seen == [["base"], ["base"]]

    async def test_revalidates_duplicate_paths_across_siblings(self):
        calls: list[str] = []
        step = join_steps(
            [
                _counting_step(calls, "first", "same.txt"),
                _counting_step(calls, "second", "same.txt"),
            ]
        )
        individually = [await s(empty()) for s in (insert_fn("same.txt", b"1"), insert_fn("same.txt", b"2"))]
        assert all(r.is_success for r in individually)

        assert await step(empty()) == Failure(FailureReason.NOT_EMPTY)
        assert sorted(calls) == ["first", "second"]

    async def test_runs_siblings_concurrently(self):
        events: list[str] = []

        def sibling(name):
            async def _step(changeset):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")
                return insert(changeset, name, b"")
            return _step

        await join_steps([sibling("a"), sibling("b")])(empty())
        assert events[:2] == ["a-start", "b-start"]

    async def test_failure_waits_for_other_siblings(self):
        finished: list[str] = []

        async def slow(changeset):
            await asyncio.sleep(0.01)
            finished.append("slow")
            return insert(changeset, "slow", b"")

        result = await join_steps([_failing_step, slow])(empty())
        assert result == Failure(FailureReason.NOT_EMPTY)
        assert finished == ["slow"]

    async def test_sibling_colliding_with_snapshot_fails(self):
        base = insert(empty(), "taken", b"").value
        result = await join_steps([insert_fn("free", b""), insert_fn("taken", b"")])(base)
        assert result == Failure(FailureReason.NOT_EMPTY)

    async def test_nested_in_chain(self):
        step = chain_steps(
            [
                join_steps([insert_fn("a", b""), insert_fn("b", b"")]),
                join_steps([insert_fn("c", b""), insert_fn("a", b"")]),
            ]
        )
        assert await step(empty()) == Failure(FailureReason.NOT_EMPTY)


# ---------------------------------------------------------------------------
# flush
# ---------------------------------------------------------------------------

def _build(*entries) -> Changeset:
    changeset = empty()
    for path, content in entries:
        changeset = insert(changeset, path, content).value
    return changeset


class TestFlush:
    async def test_writes_files_and_parents(self, tmp_path: Path):
        changeset = _build(("a.txt", b"a"), ("deep/nested/b.txt", b"b"))
        result = await flush(changeset, tmp_path)
        assert result == Success(changeset)
        assert (tmp_path / "a.txt").read_bytes() == b"a"
        assert (tmp_path / "deep" / "nested" / "b.txt").read_bytes() == b"b"

    async def test_creates_directories(self, tmp_path: Path):
        await flush(_build((".git/refs/heads", Directory())), tmp_path)
        assert (tmp_path / ".git" / "refs" / "heads").is_dir()

    async def test_existing_file_is_not_empty_failure(self, tmp_path: Path):
        (tmp_path / "c.txt").write_bytes(b"original")
        changeset = _build(("a.txt", b"a"), ("b.txt", b"b"), ("c.txt", b"c"), ("d.txt", b"d"))

        result = await flush(changeset, tmp_path)

        assert result == Failure(FailureReason.NOT_EMPTY)
        assert (tmp_path / "c.txt").read_bytes() == b"original"
        assert (tmp_path / "a.txt").exists()
        assert (tmp_path / "b.txt").exists()
        assert not (tmp_path / "d.txt").exists()

    async def test_file_where_directory_needed(self, tmp_path: Path):
        (tmp_path / "docs").write_bytes(b"")
        result = await flush(_build(("docs/readme.md", b"x")), tmp_path)
        assert result == Failure(FailureReason.NOT_EMPTY)

    async def test_file_at_grandparent(self, tmp_path: Path):
        (tmp_path / ".idea").write_bytes(b"")
        result = await flush(_build((".idea/runConfigurations/build.xml", b"x")), tmp_path)
        assert result == Failure(FailureReason.NOT_EMPTY)
        assert (tmp_path / ".idea").is_file()

    async def test_directory_entry_under_file(self, tmp_path: Path):
        (tmp_path / ".git").write_bytes(b"gitdir: elsewhere\n")
        result = await flush(_build((".git/refs/heads", Directory())), tmp_path)
        assert result == Failure(FailureReason.NOT_EMPTY)
        assert (tmp_path / ".git").read_bytes() == b"gitdir: elsewhere\n"

    async def test_serialises_documents(self, tmp_path: Path):
        changeset = _build(
            ("package.json", JsonDocument({"name": "x"})),
            ("modules.xml", XmlDocument(ET.Element("project"))),
        )
        await flush(changeset, tmp_path)
        assert json.loads((tmp_path / "package.json").read_text()) == {"name": "x"}
        assert (tmp_path / "modules.xml").read_text().startswith("<?xml")


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

class TestSerialisation:
    def test_json_key_order(self):
        document = JsonDocument(
            {"version": "1", "zeta": 1, "name": "x", "alpha": 2},
            key_order=("name", "version"),
        )
        assert list(json.loads(document.serialize())) == ["name", "version", "zeta", "alpha"]

    def test_json_sorted_nested_keys(self):
        document = JsonDocument(
            {"dependencies": {"b": "1", "a": "2"}}, sorted_keys=("dependencies",)
        )
        assert list(json.loads(document.serialize())["dependencies"]) == ["a", "b"]

    def test_json_ends_with_newline(self):
        assert JsonDocument({}).serialize().endswith(b"\n")

    def test_xml_without_declaration(self):
        document = XmlDocument(ET.Element("component"), declaration=False)
        assert document.serialize() == b"<component />\n"

    def test_bytes_pass_through(self):
        assert serialize_content(b"raw") == b"raw"

    def test_directory_has_no_bytes(self):
        with pytest.raises(TypeError):
            serialize_content(Directory())
