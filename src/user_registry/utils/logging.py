"""
Project metadata helpers used by the log formatters.

Installed distribution metadata wins; when running from a source checkout
without installation, values are read from the nearest pyproject.toml.
"""

from pathlib import Path
from importlib import metadata as importlib_metadata
from typing import Any

DISTRIBUTION_NAME = "user-registry"


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def load_pyproject_data(pyproject_path: Path) -> dict:
    # tomllib is stdlib from Python 3.11; tomli is the declared backport for older versions.
    try:
        import tomllib as _toml_loader
    except ImportError:
        import tomli as _toml_loader

    with pyproject_path.open("rb") as f:
        return _toml_loader.load(f)


def get_pyproject_value(key: str, start: Path | None = None, default: Any = None) -> Any:
    """
    Return the value for a dot-separated `key` (e.g. "project.version") from
    the nearest pyproject.toml, or `default` when the file or key is missing.
    """
    pyproject = find_pyproject(start or Path(__file__).resolve().parent)
    if pyproject is None:
        return default

    try:
        data = load_pyproject_data(pyproject)
    except (OSError, ValueError):
        return default

    cur = data
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(default: str | None = None) -> str | None:
    try:
        return importlib_metadata.metadata(DISTRIBUTION_NAME)["Name"]
    except importlib_metadata.PackageNotFoundError:
        return get_pyproject_value("project.name", default=default)


def get_project_version(default: str = "unknown") -> str:
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        return get_pyproject_value("project.version", default=default)


__all__ = [
    "find_pyproject",
    "load_pyproject_data",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
]
