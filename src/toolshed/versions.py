"""Version ordering, fuzzy matching and bang arithmetic.

Versions are compared chunk by chunk (split on ``.``, ``-``, ``+`` and
letter/digit boundaries) so that ``9.2`` sorts before ``10.1``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .errors import InvalidVersionError

_CHUNK = re.compile(r"\d+|[^\W\d_]+")

# entries that should never be picked as "latest" or by a fuzzy prefix
_PRERELEASE = re.compile(
    r"(^Available versions:|-src|-dev|-latest|-stm|[-.]rc|-milestone|-alpha|-beta"
    r"|[-.]pre|-next|(a|b|c)[0-9]+|snapshot|master)"
)


def version_key(version: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key: numeric chunks compare as integers and sort after text chunks."""
    return tuple(
        (1, int(chunk), "") if chunk.isdigit() else (0, 0, chunk.lower())
        for chunk in _CHUNK.findall(version)
    )


def sort_versions(versions: Iterable[str]) -> list[str]:
    return sorted(versions, key=version_key)


def fuzzy_match_filter(versions: Iterable[str], query: str) -> list[str]:
    """Return the entries of ``versions`` matched by ``query``, oldest first.

    An exact match is always kept. Otherwise prerelease-looking entries are
    dropped and the rest must start with ``query`` followed by the end of the
    string or a ``.``/``-``/``+`` separated suffix. ``latest`` matches every
    entry that starts with a digit.
    """
    if query == "latest":
        pattern = re.compile(r"^\s*[0-9].*$")
    else:
        pattern = re.compile(rf"^\s*{re.escape(query)}([+\-.].+)?$")
    matches = [
        v for v in versions if v == query or (not _PRERELEASE.search(v) and pattern.match(v))
    ]
    return sort_versions(matches)


def find_latest(versions: Iterable[str]) -> str | None:
    ordered = sort_versions(versions)
    return ordered[-1] if ordered else None


def version_sub(orig: str, sub: str) -> str:
    """Subtract ``sub`` from ``orig`` chunk by chunk, keeping ``sub``'s length.

    >>> version_sub("18.2.3", "2")
    '16'
    >>> version_sub("18.2.3", "0.1")
    '18.1'
    """
    orig_chunks = _numeric_chunks(orig)[: len(_numeric_chunks(sub))]
    sub_chunks = _numeric_chunks(sub)
    result = []
    for o, s in zip(orig_chunks, sub_chunks):
        if o < s:
            raise InvalidVersionError(orig, f"Cannot subtract {sub} from {orig}")
        result.append(str(o - s))
    return ".".join(result)


def _numeric_chunks(version: str) -> list[int]:
    parts = version.strip().split(".")
    if not all(p.isdigit() for p in parts):
        raise InvalidVersionError(version)
    return [int(p) for p in parts]
