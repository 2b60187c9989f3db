"""
quicktype_cli
=============

Command-line front end that gathers JSON samples from files, URLs, standard
input, or a URL grammar and hands them to a rendering engine for type
inference and code generation.
"""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Return the installed package version or '0.0.0' when unavailable."""
    try:
        return version("quicktype-cli")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
