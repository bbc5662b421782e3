"""
Top-level package for vc_changelog.

This package exposes the main CLI entry point via the
``vc_changelog.cli`` module. The changelog pipeline itself lives in
:mod:`vc_changelog.changelog`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
