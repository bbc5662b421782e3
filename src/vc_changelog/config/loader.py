"""
Configuration loader for vc_changelog.

The tool reads an optional JSON configuration file named
``.changelog_config.json`` located in the repository root. Every key is
optional; anything left out falls back to the built-in defaults below.
This loader validates the structure of the file and returns a frozen
:class:`ChangelogConfig`.

If an explicitly requested configuration file is missing, or any
configuration file is malformed or has fields of the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where the CLI has not configured logging.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


CONFIG_FILE_NAME = ".changelog_config.json"

DEFAULT_TYPES: Tuple[str, ...] = ("feat", "fix", "perf")

DEFAULT_SCOPES: Tuple[str, ...] = (
    "runtime",
    "editor",
    "sample",
    "cppast",
    "export",
    "toolchain",
    "debugging",
    "dotnet",
    "workflow",
)

DEFAULT_TYPE_TITLES: Dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance Improvements",
}

DEFAULT_CHANGELOG_PATH = "Docs/CHANGELOG.md"
DEFAULT_MODIFY_LIST_PATH = "commitlint.config.js"
DEFAULT_LINK_TEMPLATE = "http://your-link"

KNOWN_KEYS = frozenset(
    {"types", "scopes", "type_titles", "changelog_path", "modify_list_path", "link_template"}
)


class ConfigError(Exception):
    """Raised when the changelog configuration file is missing or invalid."""

    pass


@dataclass(frozen=True)
class ChangelogConfig:
    """Settings shared by the parser, sorter and renderer.

    Attributes
    ----------
    types : Tuple[str, ...]
        Recognized commit types in priority order. Commits of any other
        type are dropped.
    scopes : Tuple[str, ...]
        Known scopes in priority order. Unknown scopes sort last.
    type_titles : Dict[str, str]
        Section heading for each type.
    changelog_path : str
        Changelog file, relative to the repository root.
    modify_list_path : str
        Document holding the ``changelog_modify`` block, relative to the
        repository root.
    link_template : str
        ``str.format`` template for commit links. ``{sha}`` and
        ``{short_sha}`` are available.
    """

    types: Tuple[str, ...] = DEFAULT_TYPES
    scopes: Tuple[str, ...] = DEFAULT_SCOPES
    type_titles: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_TITLES))
    changelog_path: str = DEFAULT_CHANGELOG_PATH
    modify_list_path: str = DEFAULT_MODIFY_LIST_PATH
    link_template: str = DEFAULT_LINK_TEMPLATE


def _string_list(data: Dict[str, Any], key: str) -> Optional[Tuple[str, ...]]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(value)


def _string(data: Dict[str, Any], key: str) -> Optional[str]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value


def load_config(repo_root: Path, config_path: Optional[Path] = None) -> ChangelogConfig:
    """Load the changelog configuration for ``repo_root``.

    Parameters
    ----------
    repo_root : Path
        Root of the repository the changelog is generated for.
    config_path : Path, optional
        Explicit configuration file. When omitted,
        ``<repo_root>/.changelog_config.json`` is used if it exists and the
        defaults are returned otherwise.

    Returns
    -------
    ChangelogConfig
        The validated configuration.

    Raises
    ------
    ConfigError
        If an explicit file is missing, or the file is malformed or invalid.
    """
    path = config_path if config_path is not None else repo_root / CONFIG_FILE_NAME

    if not path.exists():
        if config_path is not None:
            logger.error("Configuration file '%s' does not exist", path)
            raise ConfigError(f"Missing configuration file: {path}")
        logger.debug("No configuration file at %s, using defaults", path)
        return ChangelogConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object")

    overrides: Dict[str, Any] = {}

    types = _string_list(data, "types")
    if types is not None:
        if not types:
            raise ConfigError("'types' must not be empty")
        overrides["types"] = types
    scopes = _string_list(data, "scopes")
    if scopes is not None:
        overrides["scopes"] = scopes

    if "type_titles" in data:
        titles = data["type_titles"]
        if not isinstance(titles, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in titles.items()
        ):
            raise ConfigError("'type_titles' must map strings to strings")
        merged = dict(DEFAULT_TYPE_TITLES)
        merged.update(titles)
        overrides["type_titles"] = merged

    for key in ("changelog_path", "modify_list_path", "link_template"):
        value = _string(data, key)
        if value is not None:
            overrides[key] = value

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    config = ChangelogConfig(**overrides)
    logger.debug("Loaded changelog configuration from: %s", path)
    logger.debug("Configuration data: %s", config)
    return config
