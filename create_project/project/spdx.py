"""Light-weight correction of SPDX license expressions found in package.json."""

from __future__ import annotations

import re

KNOWN_LICENSES: tuple[str, ...] = (
    "0BSD",
    "AGPL-3.0-only",
    "AGPL-3.0-or-later",
    "Apache-2.0",
    "BSD-2-Clause",
    "BSD-3-Clause",
    "BSL-1.0",
    "CC0-1.0",
    "EPL-2.0",
    "GPL-2.0-only",
    "GPL-2.0-or-later",
    "GPL-3.0-only",
    "GPL-3.0-or-later",
    "ISC",
    "LGPL-2.1-only",
    "LGPL-2.1-or-later",
    "LGPL-3.0-only",
    "LGPL-3.0-or-later",
    "MIT",
    "MPL-2.0",
    "Unlicense",
)

_BY_UPPER = {license_id.upper(): license_id for license_id in KNOWN_LICENSES}

_ALIASES: dict[str, str] = {
    "APACHE2": "Apache-2.0",
    "APACHE 2": "Apache-2.0",
    "APACHE 2.0": "Apache-2.0",
    "APACHE-2": "Apache-2.0",
    "GPL-2.0": "GPL-2.0-only",
    "GPL-3.0": "GPL-3.0-only",
    "GPL2": "GPL-2.0-only",
    "GPL3": "GPL-3.0-only",
    "LGPL-2.1": "LGPL-2.1-only",
    "LGPL-3.0": "LGPL-3.0-only",
    "AGPL-3.0": "AGPL-3.0-only",
    "BSD": "BSD-3-Clause",
    "MIT LICENSE": "MIT",
}

_OPERATORS = {"AND", "OR", "WITH"}

_TOKEN_RE = re.compile(r"(\s+|\(|\))")


def correct_spdx_identifier(identifier: str) -> str:
    """Return the canonical spelling of a single license identifier.

    Unknown identifiers are returned unchanged (trimmed).
    """
    key = identifier.strip()
    upper = key.upper()
    return _ALIASES.get(upper) or _BY_UPPER.get(upper) or key


def correct_spdx_expression(expression: str) -> str:
    """Correct every identifier in an expression such as ``mit or apache2``.

    Operators are upper-cased; parentheses and identifier order are kept.
    """
    stripped = expression.strip()
    if stripped.upper() in _ALIASES:
        return _ALIASES[stripped.upper()]

    out: list[str] = []
    for token in _TOKEN_RE.split(stripped):
        if not token:
            continue
        if token.isspace():
            out.append(" ")
        elif token in ("(", ")"):
            out.append(token)
        elif token.upper() in _OPERATORS:
            out.append(token.upper())
        else:
            out.append(correct_spdx_identifier(token))
    return "".join(out)
