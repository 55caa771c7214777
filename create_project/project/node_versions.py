"""Supported Node.js versions.

The release schedule below is the Node.js project's published one.  A
release counts as supported on any day between its initial release and its
end of life, inclusive.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, NamedTuple

from .models import NodeVersions


class NodeRelease(NamedTuple):
    major: int
    start: date
    end: date


NODE_RELEASES: tuple[NodeRelease, ...] = (
    NodeRelease(14, date(2020, 4, 21), date(2023, 4, 30)),
    NodeRelease(15, date(2020, 10, 20), date(2021, 6, 1)),
    NodeRelease(16, date(2021, 4, 20), date(2023, 9, 11)),
    NodeRelease(17, date(2021, 10, 19), date(2022, 6, 1)),
    NodeRelease(18, date(2022, 4, 19), date(2025, 4, 30)),
    NodeRelease(19, date(2022, 10, 18), date(2023, 6, 1)),
    NodeRelease(20, date(2023, 4, 18), date(2026, 4, 30)),
    NodeRelease(21, date(2023, 10, 17), date(2024, 6, 1)),
    NodeRelease(22, date(2024, 4, 24), date(2027, 4, 30)),
    NodeRelease(23, date(2024, 10, 16), date(2025, 6, 1)),
    NodeRelease(24, date(2025, 5, 6), date(2028, 4, 30)),
    NodeRelease(25, date(2025, 10, 15), date(2026, 6, 1)),
    NodeRelease(26, date(2026, 4, 22), date(2029, 4, 30)),
)

_MAJOR_RE = re.compile(r"(\d+)")


def node_releases_supported_in_date_range(start: date, end: date) -> list[int]:
    """Major versions supported at any point between *start* and *end*."""
    return [
        release.major
        for release in NODE_RELEASES
        if release.start <= end and release.end >= start
    ]


def create_node_versions(today: date) -> NodeVersions:
    current = tuple(node_releases_supported_in_date_range(today, today))
    return NodeVersions(target_versions=current, current_releases=current)


def read_node_versions(package_json: dict[str, Any], today: date) -> NodeVersions:
    """Derive target versions from ``engines.node`` of an existing manifest.

    Each ``||`` alternative contributes its leading major version.  Without
    a usable ``engines.node`` the currently supported releases are targeted.
    """
    current = tuple(node_releases_supported_in_date_range(today, today))
    engines = package_json.get("engines")
    spec = engines.get("node") if isinstance(engines, dict) else None

    targets: list[int] = []
    if isinstance(spec, str):
        for alternative in spec.split("||"):
            match = _MAJOR_RE.search(alternative)
            if match and int(match.group(1)) not in targets:
                targets.append(int(match.group(1)))

    return NodeVersions(
        target_versions=tuple(sorted(targets)) or current,
        current_releases=current,
    )


def engines_range(versions: tuple[int, ...]) -> str:
    """Render an ``engines.node`` range, e.g. ``^22 || ^24 || >=26``."""
    if not versions:
        return "*"
    ordered = sorted(versions)
    return " || ".join([f"^{v}" for v in ordered[:-1]] + [f">={ordered[-1]}"])
