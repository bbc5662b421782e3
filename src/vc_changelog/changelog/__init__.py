"""
Changelog pipeline.

Commits flow through :mod:`commit_parser`, :mod:`override_list`,
:mod:`commit_sorter` and :mod:`markdown_renderer`; :mod:`generator`
ties the steps together.
"""

from .commit_model import CommitSet, ParsedCommit  # noqa: F401
from .commit_parser import NotConventional, parse_commit_message  # noqa: F401
from .generator import ChangelogGenerator, ChangelogIOError, ShortHashCollisionError  # noqa: F401
