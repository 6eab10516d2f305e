"""Reading and writing ``dotling.toml``, a small TOML subset."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotling.config import Config, DeployMethod, Entry, Hooks, Settings
from dotling.errors import ConfigError, FileOperationError
from dotling.fsutil import atomic_write

_HEADER = "# dotling.toml — managed by dotling, safe to hand-edit"
_VARS_COMMENT = "# Shared defaults — override in ~/.dotling/vars.toml on each machine"
_OCTAL = re.compile(r"\+?[0-7]+")
_UNESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


@dataclass
class _EntryBuilder:
    source: str | None = None
    target: str | None = None
    method: str | None = None
    encrypted: bool = False
    directory: bool = False
    template: bool = False
    os: str | None = None
    permissions: int | None = None
    before: str | None = None
    after: str | None = None

    def build(self, line: int) -> Entry:
        if self.source is None:
            raise ConfigError("entry missing `source`", line)
        if self.target is None:
            raise ConfigError(f"entry `{self.source}` missing `target`", line)
        method = None
        if self.method is not None:
            method = DeployMethod.parse(self.method)
            if method is None:
                raise ConfigError(
                    f"invalid method `{self.method}` for entry `{self.source}`", line
                )
        return Entry(
            source=self.source,
            target=self.target,
            method=method,
            encrypted=self.encrypted,
            directory=self.directory,
            template=self.template,
            os=self.os,
            permissions=self.permissions,
            before=self.before,
            after=self.after,
        )


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


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


def _parse_kv(line: str) -> tuple[str, str] | None:
    key, sep, rest = line.partition("=")
    if not sep:
        return None
    value = rest.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = _unescape(value[1:-1])
    return key.strip(), value


def _parse_bool(text: str) -> bool:
    return text.lower() in ("true", "1", "yes")


def _parse_permissions(value: str, line: int) -> int:
    if _OCTAL.fullmatch(value):
        mode = int(value, 8)
        if mode < 2**32:
            return mode
    raise ConfigError(f"invalid permissions `{value}`", line)


def _apply_entry_field(builder: _EntryBuilder, key: str, value: str, line: int) -> None:
    if key in ("source", "target", "method", "os", "before", "after"):
        setattr(builder, key, value)
    elif key in ("encrypted", "directory", "template"):
        setattr(builder, key, _parse_bool(value))
    elif key == "permissions":
        builder.permissions = _parse_permissions(value, line)
    else:
        raise ConfigError(f"unknown entry field `{key}`", line)


def parse_config(text: str, path: str | os.PathLike[str]) -> Config:
    """Parse the text of a ``dotling.toml`` file."""
    settings = Settings()
    hooks = Hooks()
    entries: list[Entry] = []
    variables: list[tuple[str, str]] = []

    section: str | None = None
    builder: _EntryBuilder | None = None
    lines = _lines(text)

    for line_num, raw_line in enumerate(lines, start=1):
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue

        if line.startswith("[[") and line.endswith("]]") and len(line) >= 4:
            if builder is not None:
                entries.append(builder.build(line_num))
                builder = None
            name = line[2:-2].strip()
            if name != "entries":
                raise ConfigError(f"unknown section `[[{name}]]`", line_num)
            builder = _EntryBuilder()
            section = "entries"
            continue

        if line.startswith("[") and line.endswith("]") and len(line) >= 2:
            if builder is not None:
                entries.append(builder.build(line_num))
                builder = None
            section = line[1:-1].strip()
            continue

        pair = _parse_kv(line)
        if pair is None:
            continue
        key, value = pair

        if section == "vars":
            variables.append((key, value))
        elif section == "settings":
            if key != "method":
                raise ConfigError(f"unknown setting `{key}`", line_num)
            method = DeployMethod.parse(value)
            if method is None:
                raise ConfigError(f"invalid method `{value}`", line_num)
            settings.method = method
        elif section == "hooks":
            if key not in ("init", "before", "after"):
                raise ConfigError(f"unknown hook `{key}`", line_num)
            setattr(hooks, key, value)
        elif section == "entries":
            if builder is None:
                raise ConfigError("key-value outside [[entries]]", line_num)
            _apply_entry_field(builder, key, value, line_num)

    if builder is not None:
        entries.append(builder.build(len(lines)))

    return Config(
        path=Path(path),
        settings=settings,
        entries=entries,
        hooks=hooks,
        vars=variables,
    )


def serialize_config(config: Config) -> str:
    """Return the ``dotling.toml`` text for ``config``."""
    out: list[str] = [_HEADER, ""]

    if config.settings.method is not DeployMethod.SYMLINK:
        out += ["[settings]", f'method = "{config.settings.method.value}"', ""]

    hook_lines = [
        f'{name} = "{_escape(value)}"'
        for name, value in (
            ("init", config.hooks.init),
            ("before", config.hooks.before),
            ("after", config.hooks.after),
        )
        if value is not None
    ]
    if hook_lines:
        out += ["[hooks]", *hook_lines, ""]

    if config.vars:
        out += ["[vars]", _VARS_COMMENT]
        out += [f'{key} = "{_escape(value)}"' for key, value in config.vars]
        out.append("")

    for entry in config.entries:
        out.append("[[entries]]")
        out.append(f'source = "{_escape(entry.source)}"')
        out.append(f'target = "{_escape(entry.target)}"')
        if entry.method is not None:
            out.append(f'method = "{entry.method.value}"')
        if entry.encrypted:
            out.append("encrypted = true")
        if entry.directory:
            out.append("directory = true")
        if entry.template:
            out.append("template = true")
        if entry.os is not None:
            out.append(f'os = "{entry.os}"')
        if entry.permissions is not None:
            out.append(f'permissions = "{entry.permissions:04o}"')
        if entry.before is not None:
            out.append(f'before = "{_escape(entry.before)}"')
        if entry.after is not None:
            out.append(f'after = "{_escape(entry.after)}"')
        out.append("")

    return "\n".join(out) + "\n"


def load_config(path: str | os.PathLike[str]) -> Config:
    """Read and parse the config file at ``path``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOperationError(path, "read config", exc) from exc
    return parse_config(text, path)


def save_config(config: Config) -> None:
    """Write ``config`` atomically to its own path."""
    atomic_write(config.path, serialize_config(config).encode("utf-8"))