"""Data model of a dotfiles repository's ``dotling.toml``."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotling import paths
from dotling.errors import DotlingError, UserError


class DeployMethod(Enum):
    """How an entry is placed on the filesystem."""

    SYMLINK = "symlink"
    COPY = "copy"

    @classmethod
    def parse(cls, text: str) -> "DeployMethod | None":
        """Parse a method name case-insensitively; return None if unknown."""
        try:
            return cls(text.lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


@dataclass
class Entry:
    """A single tracked dotfile or directory."""

    source: str
    target: str
    method: DeployMethod | None = None
    encrypted: bool = False
    directory: bool = False
    template: bool = False
    os: str | None = None
    permissions: int | None = None
    before: str | None = None
    after: str | None = None


@dataclass
class Settings:
    """Repository-wide settings."""

    method: DeployMethod = DeployMethod.SYMLINK


@dataclass
class Hooks:
    """Global lifecycle hook commands."""

    init: str | None = None
    before: str | None = None
    after: str | None = None


def _try_resolve(path: str | os.PathLike[str]) -> Path | None:
    try:
        return paths.resolve(path)
    except DotlingError:
        return None


@dataclass
class Config:
    """The contents of ``dotling.toml`` together with where it lives."""

    path: Path
    settings: Settings = field(default_factory=Settings)
    entries: list[Entry] = field(default_factory=list)
    hooks: Hooks = field(default_factory=Hooks)
    vars: list[tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def add_entry(self, entry: Entry) -> None:
        """Track ``entry``; raise if its source or target is already in use."""
        if any(existing.source == entry.source for existing in self.entries):
            raise UserError(f"`{entry.source}` is already tracked")
        owner = next((e for e in self.entries if e.target == entry.target), None)
        if owner is not None:
            raise UserError(
                f"target `{entry.target}` is already in use by `{owner.source}`"
            )
        self.entries.append(entry)

    def remove_entry(self, source: str) -> Entry | None:
        """Stop tracking the entry with ``source``; return it, or None if absent."""
        for index, entry in enumerate(self.entries):
            if entry.source == source:
                return self.entries.pop(index)
        return None

    def find_entry(self, query: str) -> Entry | None:
        """Find an entry by its source or target, literally or as a resolved path."""
        resolved_query = _try_resolve(query)
        repo_root = self.path.parent

        for entry in self.entries:
            if entry.source == query or entry.target == query:
                return entry
            if resolved_query is None:
                continue
            if _try_resolve(entry.target) == resolved_query:
                return entry
            if _try_resolve(repo_root / entry.source) == resolved_query:
                return entry
        return None