"""Copyright holder guessing."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional


def guess_copyright_holder(
    holders: Mapping[str, str],
    *,
    explicit: Optional[str] = None,
    scope: Optional[str] = None,
    git_user: Optional[str] = None,
    author_name: Optional[str] = None,
) -> Optional[str]:
    """Pick the copyright holder for a project.

    An explicit holder wins.  Otherwise the npm scope, then the git host
    user, are looked up in *holders* (organisation name by username).  The
    author's name is the last resort.
    """
    if explicit:
        return explicit
    for key in (scope, git_user):
        if key and key in holders:
            return holders[key]
    return author_name or None
