"""Path helpers: home directory, tilde handling and repo layout mapping."""

from __future__ import annotations

import os
from pathlib import Path

from dotling.errors import FileOperationError, UserError

PathLike = str | os.PathLike[str]

# How home-directory names map to repo subdirectories.
_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "shell",
        (
            ".zshrc",
            ".zshenv",
            ".zprofile",
            ".bashrc",
            ".bash_profile",
            ".profile",
            ".fishrc",
        ),
    ),
    ("git", (".gitconfig", ".gitignore_global")),
    ("vim", (".vimrc", ".gvimrc")),
    ("tmux", (".tmux.conf",)),
    ("ssh", (".ssh",)),
    ("gnupg", (".gnupg",)),
)


def home_dir() -> Path:
    """Return the user's home directory from ``$HOME`` (``%USERPROFILE%`` on Windows)."""
    if os.name == "nt":
        value = os.environ.get("USERPROFILE")
        if value is None:
            raise UserError("could not determine home directory (%USERPROFILE% is unset)")
    else:
        value = os.environ.get("HOME")
        if value is None:
            raise UserError("could not determine home directory ($HOME is unset)")
    return Path(value)


def expand_tilde(path: PathLike) -> Path:
    """Expand a leading ``~`` to the home directory."""
    text = os.fspath(path)
    if text == "~":
        return home_dir()
    if text.startswith("~/"):
        return home_dir() / text[2:]
    return Path(text)


def collapse_tilde(path: PathLike) -> Path:
    """Replace a home-directory prefix with ``~``."""
    path = Path(path)
    try:
        home = home_dir()
    except UserError:
        return path
    try:
        rest = path.relative_to(home)
    except ValueError:
        return path
    return Path("~") / rest


def relative_to(target: PathLike, base: PathLike) -> Path | None:
    """Return the relative path from ``base`` to ``target``, or None unless both are absolute."""
    target, base = Path(target), Path(base)
    if not target.is_absolute() or not base.is_absolute():
        return None

    target_parts = target.parts
    base_parts = base.parts
    common = 0
    for left, right in zip(target_parts, base_parts):
        if left != right:
            break
        common += 1

    ups = [".."] * (len(base_parts) - common)
    return Path(*ups, *target_parts[common:])


def map_to_repo(home_path: PathLike) -> Path:
    """Map a path inside the home directory to its repo-relative location."""
    home_path = Path(home_path)
    home = home_dir()
    try:
        rel = home_path.relative_to(home)
    except ValueError:
        raise UserError(f"`{home_path}` is not inside the home directory") from None

    rel_str = rel.as_posix()
    if rel_str == ".":
        rel_str = ""

    if rel_str.startswith(".config/"):
        return Path("config") / rel_str[len(".config/"):]
    if rel_str == ".config":
        return Path("config")

    file_name = rel.name
    for category, patterns in _CATEGORY_RULES:
        for pattern in patterns:
            if rel_str == pattern.lstrip(".") or file_name == pattern:
                return Path(category) / file_name.lstrip(".")

    return Path("home") / rel_str.lstrip(".")


def resolve(path: PathLike) -> Path:
    """Return an absolute, normalised path with ``~`` expanded."""
    expanded = expand_tilde(path)
    if expanded.is_absolute():
        return normalize(expanded)
    try:
        cwd = Path.cwd()
    except OSError as exc:
        raise FileOperationError(".", "get current directory", exc) from exc
    return normalize(cwd / expanded)


def normalize(path: PathLike) -> Path:
    """Resolve ``.`` and ``..`` components lexically, without touching the filesystem."""
    parts: list[str] = []
    for part in Path(path).parts:
        if part == "..":
            if parts:
                parts.pop()
        elif part != ".":
            parts.append(part)
    return Path(*parts)