"""SQL placeholder normalization.

Statements are written with positional ``?`` placeholders. Drivers using the
``format`` paramstyle (psycopg, mysql-connector) expect ``%s`` instead.
String literals and quoted identifiers are left untouched.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

# Single-quoted literals, double-quoted and backtick-quoted identifiers
_QUOTED_PATTERN = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|`(?:[^`]|``)*`")


def normalize_placeholders(sql: str, paramstyle: str) -> str:
    """Convert ``?`` placeholders to the target param style.

    Args:
        sql: SQL string with ``?`` placeholders.
        paramstyle: Target style - 'qmark' (no conversion) or 'format' (%s).

    Returns:
        SQL with placeholders converted to the target style.
    """
    if paramstyle == "qmark":
        return sql
    return _convert_to_format(sql)


def _convert_segment(segment: str) -> str:
    # A literal % must be doubled once the driver interpolates %s
    return segment.replace("%", "%%").replace("?", "%s")


@lru_cache(maxsize=256)
def _convert_to_format(sql: str) -> str:
    """Convert ? to %s, preserving quoted literals and identifiers."""
    parts: list[str] = []
    last_end = 0

    for match in _QUOTED_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_convert_segment(sql[last_end:start]))
        parts.append(match.group().replace("%", "%%"))
        last_end = end

    if last_end < len(sql):
        parts.append(_convert_segment(sql[last_end:]))

    return "".join(parts)


def coerce_params(params: tuple[Any, ...] | list[Any] | Any | None) -> tuple[Any, ...]:
    """Normalize *params* to a tuple for positional binding.

    * ``None`` → empty tuple.
    * ``tuple`` / ``list`` → ``tuple``.
    * Any other scalar → wrapped in a single-element tuple.
    """
    if params is None:
        return ()
    if isinstance(params, (tuple, list)):
        return tuple(params)
    return (params,)


def count_placeholders(sql: str) -> int:
    """Count ``?`` placeholders outside quoted literals and identifiers."""
    return _QUOTED_PATTERN.sub("", sql).count("?")
