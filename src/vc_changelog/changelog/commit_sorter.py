"""
Deterministic ordering of parsed commits.

Commits are ordered by type priority, then scope priority, then newest
first, then by description. Priorities are the positions in the
configured type and scope lists; values missing from a list rank after
every listed value.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from vc_changelog.changelog.commit_model import ParsedCommit


def rank(value: str, order: Sequence[str]) -> int:
    """Return the index of ``value`` in ``order``, or ``len(order)``."""
    try:
        return order.index(value)
    except ValueError:
        return len(order)


def commit_sort_key(
    commit: ParsedCommit, types: Sequence[str], scopes: Sequence[str]
) -> Tuple[int, int, float, str]:
    return (
        rank(commit.type, types),
        rank(commit.scope, scopes),
        -commit.timestamp.timestamp(),
        commit.description,
    )


def sort_commits(
    commits: Iterable[ParsedCommit], types: Sequence[str], scopes: Sequence[str]
) -> List[ParsedCommit]:
    """Return ``commits`` as a new list in changelog order."""
    return sorted(commits, key=lambda commit: commit_sort_key(commit, types, scopes))
