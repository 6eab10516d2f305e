"""Machine-local template variables kept in ``~/.dotling/vars.toml``."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from dotling import store
from dotling.errors import FileOperationError
from dotling.fsutil import atomic_write

_UNESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


def _unescape(text: str) -> str:
    result: list[str] = []
    chars = iter(text)
    for char in chars:
        if char != "\\":
            result.append(char)
            continue
        following = next(chars, None)
        if following is None:
            result.append("\\")
        elif following in _UNESCAPES:
            result.append(_UNESCAPES[following])
        else:
            result.append("\\" + following)
    return "".join(result)


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'"


def _parse_pairs(content: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    in_vars_section = False
    for raw_line in content.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            in_vars_section = line[1:-1].strip() == "vars"
            continue
        if not in_vars_section:
            continue
        key, sep, rest = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        raw_value = rest.strip()
        value = _unescape(raw_value[1:-1]) if _is_quoted(raw_value) else raw_value
        if key:
            pairs.append((key, value))
    return pairs


class VarStore:
    """Ordered key/value variables that override the shared defaults in ``dotling.toml``."""

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._vars: dict[str, str] = {}
        for key, value in pairs:
            self._vars.setdefault(key, value)

    @classmethod
    def load(cls) -> "VarStore":
        """Load the store; a missing file gives an empty store."""
        path = store.vars_path()
        if not path.exists():
            return cls()
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileOperationError(path, "read vars", exc) from exc
        return cls.parse(content)

    @classmethod
    def parse(cls, content: str) -> "VarStore":
        """Build a store from the ``[vars]`` section of TOML-like text."""
        return cls(_parse_pairs(content))

    @classmethod
    def store_path(cls) -> Path:
        """Return the path where the store is persisted."""
        return store.vars_path()

    def save(self) -> None:
        """Write the store to disk, creating the state directory if needed."""
        path = store.vars_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileOperationError(path.parent, "create state directory", exc) from exc
        atomic_write(path, self.serialize().encode("utf-8"))

    def serialize(self) -> str:
        """Return the file contents for this store."""
        lines = [
            "# ~/.dotling/vars.toml — machine-local variables, NOT committed to git",
            "",
            "[vars]",
        ]
        lines.extend(f'{key} = "{_escape(value)}"' for key, value in self._vars.items())
        return "\n".join(lines) + "\n"

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None if unset."""
        return self._vars.get(key)

    def set(self, key: str, value: str) -> None:
        """Set ``key``, keeping its position if it already exists."""
        self._vars[key] = value

    def remove(self, key: str) -> bool:
        """Remove ``key``; return True if it was present."""
        return self._vars.pop(key, None) is not None

    def items(self) -> Iterator[tuple[str, str]]:
        """Iterate over ``(key, value)`` pairs in insertion order."""
        return iter(self._vars.items())

    def as_pairs(self) -> list[tuple[str, str]]:
        """Return a list copy of all ``(key, value)`` pairs."""
        return list(self._vars.items())

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __repr__(self) -> str:
        return f"VarStore({self.as_pairs()!r})"


def parse_env_file(content: str) -> list[tuple[str, str]]:
    """Parse ``KEY=value`` lines of a ``.env`` file."""
    pairs: list[tuple[str, str]] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            pairs.append((key, value))
    return pairs


def import_from_file(store: VarStore, path: str | os.PathLike[str]) -> int:
    """Import variables from a ``.env`` file or a TOML ``[vars]`` section; return the count."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOperationError(path, "read import file", exc) from exc

    if path.suffix.lower() == ".env" or path.name == ".env":
        pairs = parse_env_file(content)
    else:
        pairs = _parse_pairs(content)

    for key, value in pairs:
        store.set(key, value)
    return len(pairs)


def looks_like_real_value(key: str, value: str, local_store: VarStore) -> str | None:
    """Return a warning if a committed default looks like a real, machine-specific value."""
    if local_store.get(key) == value:
        return (
            f'`{key} = "{value}"` matches your local vars.toml — use a placeholder instead'
        )

    if "@" in value and "." in value:
        return f"`{key}` value looks like an email address — move to vars.toml"

    size = len(value.encode("utf-8"))
    if size > 40:
        return (
            f"`{key}` value is very long ({size} chars) — may be a secret, move to vars.toml"
        )

    username = os.environ.get("USER")
    if username is None:
        username = os.environ.get("USERNAME")
    if username and value == username:
        return (
            f'`{key} = "{value}"` matches current username — use a placeholder like "user"'
        )

    return None