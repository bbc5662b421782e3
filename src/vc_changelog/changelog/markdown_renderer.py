"""
Markdown rendering of sorted commits.

Each commit type becomes a level-3 section and each commit a bullet::

    ### Features

    * **editor:** add dark theme ([a1b2c3d4](http://your-link))

Adjacent commits with the same description share one bullet listing all
of their links. Only the immediately preceding bullet is considered, so
duplicates separated by other commits stay separate.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from vc_changelog.changelog.commit_model import ParsedCommit


def render_heading(until: datetime) -> str:
    """Return the date heading placed above a release's sections."""
    return f"#  {until.year}-{until.month}-{until.day}\n"


def render_link(commit: ParsedCommit, link_template: str) -> str:
    url = link_template.format(sha=commit.sha, short_sha=commit.short_sha)
    return f"[{commit.short_sha}]({url})"


def _bullet(scope: str, description: str, links: List[str]) -> str:
    return f"* **{scope}:** {description} ({', '.join(links)})\n"


def render_changelog(
    commits: Sequence[ParsedCommit],
    type_titles: Mapping[str, str],
    link_template: str,
) -> str:
    """Render already sorted commits as Markdown.

    Parameters
    ----------
    commits : Sequence[ParsedCommit]
        Commits in changelog order (see :func:`sort_commits`).
    type_titles : Mapping[str, str]
        Section heading per type. Types without a title use their name.
    link_template : str
        ``str.format`` template for commit links.

    Returns
    -------
    str
        The Markdown text, ending with two newlines.
    """
    parts: List[str] = []
    current_type: Optional[str] = None
    # Scope, description and links of the bullet being built.
    bullet: Optional[tuple] = None

    for commit in commits:
        if commit.type != current_type:
            if bullet is not None:
                parts.append(_bullet(*bullet))
                bullet = None
            parts.append(f"\n\n### {type_titles.get(commit.type, commit.type)}\n\n")
            current_type = commit.type

        link = render_link(commit, link_template)
        if bullet is not None and commit.description == bullet[1]:
            bullet[2].append(link)
            continue

        if bullet is not None:
            parts.append(_bullet(*bullet))
        bullet = (commit.scope, commit.description, [link])

    if bullet is not None:
        parts.append(_bullet(*bullet))

    return "".join(parts) + "\n\n"
