"""Version string reported by the API and the health check."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Final

DISTRIBUTION_NAME: Final[str] = "breaddie-backend"
UNKNOWN_VERSION: Final[str] = "0.0.0"

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _source_tree_version() -> str:
    # Running from a checkout without `pip install`: fall back to pyproject.toml.
    try:
        with _PYPROJECT.open("rb") as fp:
            project = tomllib.load(fp).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return UNKNOWN_VERSION
    value = project.get("version") if isinstance(project, dict) else None
    return value if isinstance(value, str) else UNKNOWN_VERSION


def resolve_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _source_tree_version()


APP_VERSION: Final[str] = resolve_version()

__all__ = ["APP_VERSION", "DISTRIBUTION_NAME", "resolve_version"]
