"""
Git client implementation for vc_changelog.

This module wraps the Git operations required to collect the commit
history of a release window. It is intentionally minimal: the changelog
pipeline only needs the full hash, the author date and the full message
of every commit. All subprocess calls go through :meth:`GitClient._run`
so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


SHORT_SHA_LENGTH = 8

# Field and record separators for ``git log --format``. Commit messages
# never contain these control characters.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%aI{_FIELD_SEP}%B{_RECORD_SEP}"


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from the repository."""

    sha: str
    author_date: datetime
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH].lower()


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


def _as_aware(moment: datetime) -> datetime:
    """Interpret naive datetimes as local time."""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


class GitClient:
    """Client for reading commit history from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if ``path`` is the root of a Git working tree."""
        return (path / ".git").exists()

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If Git cannot be started, or the command exits with a non-zero
            status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid characters instead of failing
            )
        except OSError as e:
            logger.error("Unable to run git: %s", e)
            raise GitError(f"Unable to run git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    def has_commits(self) -> bool:
        """Return True if HEAD points at a commit."""
        result = self._run(["rev-parse", "--verify", "--quiet", "HEAD"], check=False)
        return result.returncode == 0

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def get_commits(self, since: datetime, until: datetime) -> List[RawCommit]:
        """Return the commits reachable from HEAD authored in a time window.

        Parameters
        ----------
        since : datetime
            Start of the window, inclusive. Naive values are local time.
        until : datetime
            End of the window, inclusive. Naive values are local time.

        Returns
        -------
        List[RawCommit]
            Matching commits, newest first as listed by ``git log``.

        Raises
        ------
        GitError
            If the log cannot be read or contains a malformed record.
        """
        if not self.has_commits():
            logger.debug("Repository at %s has no commits yet", self.repo_root)
            return []

        lower = _as_aware(since)
        upper = _as_aware(until)

        # The author date is filtered here rather than with --since/--until,
        # which compare against the committer date.
        result = self._run(["log", f"--format={_LOG_FORMAT}"], check=True)

        commits: List[RawCommit] = []
        for record in result.stdout.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record.strip():
                continue
            parts = record.split(_FIELD_SEP, 2)
            if len(parts) != 3:
                raise GitError(f"Unexpected git log record: {record[:80]!r}")
            sha, date_text, message = parts
            try:
                author_date = datetime.fromisoformat(date_text.strip())
            except ValueError as exc:
                raise GitError(f"Invalid author date {date_text!r} for {sha}") from exc
            if lower <= author_date <= upper:
                commits.append(RawCommit(sha=sha.strip(), author_date=author_date, message=message))

        logger.debug(
            "Collected %d commit(s) between %s and %s", len(commits), lower.isoformat(), upper.isoformat()
        )
        return commits
