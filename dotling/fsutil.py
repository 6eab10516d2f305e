"""Filesystem helpers: atomic writes, symlinks, directory walking."""

from __future__ import annotations

import os
from pathlib import Path

from dotling.errors import FileOperationError

_TEMP_SUFFIX = ".dotling-tmp"


def _temp_path(path: Path) -> Path:
    try:
        return path.with_suffix(_TEMP_SUFFIX)
    except ValueError:
        return path.with_name(path.name + _TEMP_SUFFIX)


def _ensure_parent(path: Path) -> None:
    parent = path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(parent, "create directory", exc) from exc


def walk_dir(root: str | os.PathLike[str], include_hidden: bool = False) -> list[Path]:
    """Return every file below ``root``, sorted; hidden names skipped unless asked for."""
    results: list[Path] = []

    def walk(directory: Path) -> None:
        try:
            children = list(directory.iterdir())
        except OSError as exc:
            raise FileOperationError(directory, "read directory", exc) from exc
        for child in children:
            if not include_hidden and child.name.startswith("."):
                continue
            if child.is_dir():
                walk(child)
            else:
                results.append(child)

    walk(Path(root))
    return sorted(results)


def _write_then_rename(path: Path, data: bytes) -> None:
    tmp = _temp_path(path)
    try:
        with open(tmp, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        raise FileOperationError(tmp, "write temp file", exc) from exc
    try:
        os.replace(tmp, path)
    except OSError as exc:
        raise FileOperationError(path, "rename temp file", exc) from exc


def copy_file(src: str | os.PathLike[str], dst: str | os.PathLike[str]) -> None:
    """Copy ``src`` to ``dst`` through a temporary file and a rename."""
    src, dst = Path(src), Path(dst)
    _ensure_parent(dst)
    try:
        content = src.read_bytes()
    except OSError as exc:
        raise FileOperationError(src, "read", exc) from exc
    _write_then_rename(dst, content)


def atomic_write(path: str | os.PathLike[str], data: bytes) -> None:
    """Write ``data`` to ``path`` atomically, creating parent directories."""
    path = Path(path)
    _ensure_parent(path)
    _write_then_rename(path, bytes(data))


def create_symlink(target: str | os.PathLike[str], link: str | os.PathLike[str]) -> None:
    """Create ``link`` pointing at ``target``, creating parent directories."""
    target, link = Path(target), Path(link)
    _ensure_parent(link)
    try:
        os.symlink(target, link, target_is_directory=target.is_dir())
    except OSError as exc:
        raise FileOperationError(link, "create symlink", exc) from exc


def remove_symlink(path: str | os.PathLike[str]) -> None:
    """Remove a symlink without touching what it points to."""
    path = Path(path)
    if os.name == "nt":
        try:
            is_dir_link = path.lstat()
        except OSError as exc:
            raise FileOperationError(path, "read metadata", exc) from exc
        import stat

        if stat.S_ISDIR(is_dir_link.st_mode) or path.is_dir():
            try:
                os.rmdir(path)
            except OSError as exc:
                raise FileOperationError(path, "remove symlink", exc) from exc
            return
    try:
        os.remove(path)
    except OSError as exc:
        raise FileOperationError(path, "remove symlink", exc) from exc


def is_symlink(path: str | os.PathLike[str]) -> bool:
    """Return True if ``path`` is a symlink (broken ones included)."""
    try:
        return Path(path).is_symlink()
    except OSError:
        return False


def read_link(path: str | os.PathLike[str]) -> Path:
    """Return the target a symlink points to."""
    try:
        return Path(os.readlink(path))
    except OSError as exc:
        raise FileOperationError(path, "read symlink target", exc) from exc


def files_identical(a: str | os.PathLike[str], b: str | os.PathLike[str]) -> bool:
    """Return True if both files hold the same bytes."""
    contents = []
    for path in (Path(a), Path(b)):
        try:
            contents.append(path.read_bytes())
        except OSError as exc:
            raise FileOperationError(path, "read", exc) from exc
    return contents[0] == contents[1]


def cleanup_empty_parents(path: str | os.PathLike[str], stop_at: str | os.PathLike[str]) -> None:
    """Remove empty parent directories of ``path`` up to, not including, ``stop_at``."""
    stop = Path(stop_at)
    directory = Path(path).parent
    while directory != stop and len(directory.parts) > 1:
        try:
            directory.rmdir()
        except OSError:
            break
        directory = directory.parent


def set_permissions(path: str | os.PathLike[str], mode: int) -> None:
    """Set the file mode; does nothing outside POSIX systems."""
    if os.name != "posix":
        return
    try:
        os.chmod(path, mode)
    except OSError as exc:
        raise FileOperationError(path, "set permissions", exc) from exc


def get_permissions(path: str | os.PathLike[str]) -> int | None:
    """Return the permission bits, or None outside POSIX systems."""
    if os.name != "posix":
        return None
    try:
        return os.stat(path).st_mode & 0o777
    except OSError as exc:
        raise FileOperationError(path, "read metadata", exc) from exc