"""Locations of dotling's global state under ``~/.dotling``."""

from __future__ import annotations

import os
from pathlib import Path

from dotling import paths
from dotling.errors import FileOperationError, UserError
from dotling.fsutil import atomic_write

_STATE_FILE = "state.toml"
_FINGERPRINTS_FILE = "fingerprints.toml"
_SNAPSHOTS_DIR = "snapshots"
_VARS_FILE = "vars.toml"


def state_dir() -> Path:
    """Return the global state directory, ``~/.dotling``."""
    return paths.home_dir() / ".dotling"


def _state_path() -> Path:
    return state_dir() / _STATE_FILE


def fingerprint_path() -> Path:
    """Return the path of the fingerprint store."""
    return state_dir() / _FINGERPRINTS_FILE


def vars_path() -> Path:
    """Return the path of the machine-local variable store."""
    return state_dir() / _VARS_FILE


def snapshot_dir() -> Path:
    """Return the root directory for plaintext snapshots."""
    return state_dir() / _SNAPSHOTS_DIR


def snapshot_path(source: str) -> Path:
    """Return the snapshot path for a repo-relative ``source``."""
    return snapshot_dir() / source


def get_repo_root() -> Path | None:
    """Return the registered repo root, or None if none is registered."""
    path = _state_path()
    if not path.exists():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOperationError(path, "read state", exc) from exc

    for raw_line in content.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        key, sep, value = line.partition("=")
        if sep and key.strip() == "repo":
            return paths.expand_tilde(value.strip().strip('"'))
    return None


def set_repo_root(repo_root: str | os.PathLike[str]) -> None:
    """Register ``repo_root`` in the global state file."""
    directory = state_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(directory, "create state directory", exc) from exc

    display_path = paths.collapse_tilde(repo_root)
    content = (
        "# dotling global state — managed by dotling\n"
        f'repo = "{display_path.as_posix()}"\n'
    )
    atomic_write(_state_path(), content.encode("utf-8"))


def require_repo_root() -> Path:
    """Return the registered repo root or raise a user-facing error."""
    root = get_repo_root()
    if root is None:
        raise UserError("no dotfiles repository found — run `dotling init <path>` first")
    return root


def config_path(repo_root: str | os.PathLike[str]) -> Path:
    """Return the path of ``dotling.toml`` inside ``repo_root``."""
    return Path(repo_root) / "dotling.toml"