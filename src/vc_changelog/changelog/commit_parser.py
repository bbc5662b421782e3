"""
Parsing of conventional commit headers.

A commit message is conventional when it contains a header of the form
``type(scope): description``, where ``type`` and ``scope`` are word
characters only. Messages without such a header (merge commits, ad hoc
messages) are not errors for the changelog: callers skip them.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from vc_changelog.changelog.commit_model import ParsedCommit
from vc_changelog.vcs.git_client import RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ``.`` stops at the end of the line, so only the header line is captured.
CONVENTIONAL_HEADER_RE = re.compile(r"(\w+)\((\w+)\):\s?(.*)")


class NotConventional(ValueError):
    """Raised when a message has no ``type(scope): description`` header."""

    pass


def parse_commit_message(message: str) -> Tuple[str, str, str]:
    """Extract ``(type, scope, description)`` from a commit message.

    Parameters
    ----------
    message : str
        Full commit message, or an override replacement text.

    Returns
    -------
    Tuple[str, str, str]
        The type, the scope and the description trimmed of surrounding
        whitespace.

    Raises
    ------
    NotConventional
        If the message contains no conventional header.

    Examples
    --------
    >>> parse_commit_message("feat(editor): add dark theme \\n\\nbody")
    ('feat', 'editor', 'add dark theme')
    """
    match = CONVENTIONAL_HEADER_RE.search(message)
    if match is None:
        raise NotConventional(message)
    commit_type, scope, description = match.groups()
    return commit_type, scope, description.strip()


def parse_raw_commit(raw: RawCommit, types: Iterable[str]) -> Optional[ParsedCommit]:
    """Turn a raw commit into a :class:`ParsedCommit`.

    Returns ``None`` when the message is not conventional or its type is
    not one of ``types``.
    """
    try:
        commit_type, scope, description = parse_commit_message(raw.message)
    except NotConventional:
        logger.debug("Skipping non-conventional commit %s", raw.short_sha)
        return None
    if commit_type not in types:
        logger.debug("Skipping commit %s with type '%s'", raw.short_sha, commit_type)
        return None
    return ParsedCommit(
        type=commit_type,
        scope=scope,
        description=description,
        sha=raw.sha,
        short_sha=raw.short_sha,
        timestamp=raw.author_date,
    )
