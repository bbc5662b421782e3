"""
Changelog generation pipeline.

This module provides the :class:`ChangelogGenerator` class, which turns
the raw commits of a release window into Markdown: commits are parsed
and filtered, manual overrides are applied, the result is sorted and
finally rendered. :func:`prepend_changelog` writes the rendered text in
front of an existing changelog file.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from vc_changelog.changelog.commit_model import CommitSet, ParsedCommit
from vc_changelog.changelog.commit_parser import parse_raw_commit
from vc_changelog.changelog.commit_sorter import sort_commits
from vc_changelog.changelog.markdown_renderer import render_changelog, render_heading
from vc_changelog.changelog.override_list import apply_overrides
from vc_changelog.config.loader import ChangelogConfig
from vc_changelog.vcs.git_client import RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class ShortHashCollisionError(Exception):
    """Raised when two commits in one window share a short hash."""

    pass


class ChangelogIOError(Exception):
    """Raised when the changelog file cannot be read or written."""

    pass


class ChangelogGenerator:
    """Generate changelog Markdown from raw commits."""

    def __init__(self, config: Optional[ChangelogConfig] = None) -> None:
        self.config = config if config is not None else ChangelogConfig()

    def build_commit_set(self, raw_commits: Iterable[RawCommit]) -> CommitSet:
        """Parse ``raw_commits`` into a commit set keyed by short hash.

        Non-conventional commits and commits of unrecognized types are
        skipped.

        Raises
        ------
        ShortHashCollisionError
            If two different commits share a short hash.
        """
        commits: CommitSet = {}
        for raw in raw_commits:
            parsed = parse_raw_commit(raw, self.config.types)
            if parsed is None:
                continue
            existing = commits.get(parsed.short_sha)
            if existing is not None and existing.sha != parsed.sha:
                logger.error(
                    "Short hash %s is shared by %s and %s", parsed.short_sha, existing.sha, parsed.sha
                )
                raise ShortHashCollisionError(
                    f"Commits {existing.sha} and {parsed.sha} share the short hash {parsed.short_sha}"
                )
            commits[parsed.short_sha] = parsed
        logger.debug("Parsed %d conventional commit(s)", len(commits))
        return commits

    def order(self, commits: Iterable[ParsedCommit]) -> List[ParsedCommit]:
        return sort_commits(commits, self.config.types, self.config.scopes)

    def render(self, commits: List[ParsedCommit]) -> str:
        return render_changelog(commits, self.config.type_titles, self.config.link_template)

    def generate(self, raw_commits: Iterable[RawCommit], overrides: Optional[Dict[str, str]] = None) -> str:
        """Run the whole pipeline and return the Markdown text."""
        commits = self.build_commit_set(raw_commits)
        if overrides:
            apply_overrides(commits, overrides, self.config.types)
        ordered = self.order(commits.values())
        logger.info("Rendering %d changelog entr%s", len(ordered), "y" if len(ordered) == 1 else "ies")
        return self.render(ordered)


def prepend_changelog(path: Path, text: str, until: datetime) -> None:
    """Write the date heading and ``text`` in front of the file at ``path``.

    Raises
    ------
    ChangelogIOError
        If the file does not exist or cannot be read or written.
    """
    if not path.is_file():
        logger.error("Changelog file '%s' does not exist", path)
        raise ChangelogIOError(f"Changelog file not found: {path}")
    try:
        original = path.read_text(encoding="utf-8")
        path.write_text(render_heading(until) + text + original, encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to update changelog %s: %s", path, exc)
        raise ChangelogIOError(f"Failed to update {path}: {exc}") from exc
    logger.debug("Prepended %d character(s) to %s", len(text), path)
