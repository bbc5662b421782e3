"""
Manual corrections of commits before they reach the changelog.

Maintainers fix up or suppress commits by listing them in a
``changelog_modify`` block embedded in a larger document (by default the
repository's ``commitlint.config.js``)::

    changelog_modify = {
        'a1b2c3d4': 'fix(runtime): corrected leak',
        'e5f6a7b8': '',
    }

Keys are short hashes. An empty value deletes the commit from the
changelog; any other value replaces its header and is parsed with the
same grammar as a commit message. Once applied, the body of the block is
removed from the document so the same corrections are not replayed on
the next release.

Only this one block shape is recognized: the ``changelog_modify`` header,
``=``, a brace-delimited body, and quoted ``'key': 'value'`` pairs.
Braces inside quoted values do not end the block. Keys are compared
lower-cased, like the short hashes they refer to.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Tuple

from vc_changelog.changelog.commit_model import CommitSet
from vc_changelog.changelog.commit_parser import NotConventional, parse_commit_message


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


OVERRIDE_BLOCK_RE = re.compile(r"""changelog_modify\s*=\s*\{((?:'[^']*'|"[^"]*"|[^'"}])*)\}""")
OVERRIDE_PAIR_RE = re.compile(r"""(['"])([^'"]+)\1\s*:\s*(['"])(.*?)\3""")

BLOCK_NOT_FOUND_MARKER = "/* changelog_modify block not found. */"


class OverrideBlockNotFound(Exception):
    """Raised when a document has no ``changelog_modify`` block."""

    pass


def extract_overrides(text: str) -> Tuple[Dict[str, str], str]:
    """Extract the override mapping from ``text``.

    Parameters
    ----------
    text : str
        The document holding the ``changelog_modify`` block.

    Returns
    -------
    Tuple[Dict[str, str], str]
        The short hash to replacement mapping, and the document with the
        block body removed (``changelog_modify = {}``).

    Raises
    ------
    OverrideBlockNotFound
        If the document contains no ``changelog_modify`` block.
    """
    match = OVERRIDE_BLOCK_RE.search(text)
    if match is None:
        raise OverrideBlockNotFound("changelog_modify block not found")

    overrides: Dict[str, str] = {}
    for pair in OVERRIDE_PAIR_RE.finditer(match.group(1)):
        key, value = pair.group(2).strip().lower(), pair.group(4)
        if key in overrides:
            logger.warning("Duplicate override for %s; using the last one", key)
        overrides[key] = value

    consumed = text[: match.start(1)] + text[match.end(1):]
    logger.debug("Extracted %d override(s)", len(overrides))
    return overrides, consumed


def read_override_document(path: Path) -> Tuple[Dict[str, str], str, str]:
    """Read the override document at ``path``.

    Returns the overrides, the document as read, and the new document
    text to write back once the changelog has been produced. When the
    block is missing, no overrides are returned and the new text carries
    a visible failure marker.

    Raises
    ------
    OSError
        If the document cannot be read.
    """
    text = path.read_text(encoding="utf-8")
    try:
        overrides, consumed = extract_overrides(text)
    except OverrideBlockNotFound:
        logger.warning("No changelog_modify block in %s; no overrides applied", path)
        return {}, text, f"{BLOCK_NOT_FOUND_MARKER}\n{text}"
    return overrides, text, consumed


def write_override_document(path: Path, original: str, text: str) -> bool:
    """Write ``text`` to ``path`` unless it equals ``original``.

    Returns True if the file was rewritten.
    """
    if text == original:
        return False
    path.write_text(text, encoding="utf-8")
    logger.debug("Rewrote override document %s", path)
    return True


def apply_overrides(commits: CommitSet, overrides: Dict[str, str], types: Iterable[str]) -> CommitSet:
    """Apply ``overrides`` to ``commits`` in place.

    Parameters
    ----------
    commits : CommitSet
        Parsed commits keyed by short hash. Modified in place.
    overrides : Dict[str, str]
        Replacement header per short hash; blank means delete.
    types : Iterable[str]
        Recognized commit types. A replacement with any other type is
        ignored.

    Returns
    -------
    CommitSet
        ``commits``, for chaining.
    """
    allowed = set(types)
    unmatched = sorted(set(overrides) - set(commits))
    if unmatched:
        logger.debug("Overrides with no commit in range: %s", ", ".join(unmatched))
    for short_sha in list(commits):
        if short_sha not in overrides:
            continue
        replacement = overrides[short_sha].strip()

        if not replacement:
            logger.debug("Override deletes commit %s", short_sha)
            del commits[short_sha]
            continue

        try:
            commit_type, scope, description = parse_commit_message(replacement)
        except NotConventional:
            logger.warning("Ignoring override for %s: %r is not a conventional header", short_sha, replacement)
            continue
        if commit_type not in allowed:
            logger.warning("Ignoring override for %s: unknown type '%s'", short_sha, commit_type)
            continue

        commit = commits[short_sha]
        commit.type = commit_type
        commit.scope = scope
        commit.description = description
        logger.debug("Override rewrites commit %s as %s(%s)", short_sha, commit_type, scope)
    return commits
