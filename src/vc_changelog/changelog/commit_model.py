"""
Data models for changelog generation.

The :class:`ParsedCommit` holds the structured information extracted from
a conventional commit message together with the identity of the commit
it came from. A :data:`CommitSet` maps short hashes to parsed commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict


@dataclass
class ParsedCommit:
    """Representation of a conventional commit.

    Attributes
    ----------
    type : str
        The commit type (feat, fix, perf, ...).
    scope : str
        The parenthesized scope of the commit header.
    description : str
        The header text after the colon, trimmed.
    sha : str
        Full commit hash.
    short_sha : str
        First eight characters of ``sha``.
    timestamp : datetime
        Author date of the commit.
    """

    type: str
    scope: str
    description: str
    sha: str
    short_sha: str
    timestamp: datetime


CommitSet = Dict[str, ParsedCommit]
