"""Installed distribution version (the import name differs from the dist name)."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DIST_NAME = "hearth-heat"


def packageVersion() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "unknown"


__version__ = packageVersion()
