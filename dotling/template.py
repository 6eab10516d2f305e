"""Variable substitution for ``{{ namespace.key | filter }}`` templates."""

from __future__ import annotations

import os
import platform
import socket
from dataclasses import dataclass, field
from typing import Iterable

from dotling import paths
from dotling.errors import DotlingError, TemplateError
from dotling.platforms import Platform

_NAMESPACES = ("dotling", "var", "env")
_UNRESOLVED = "unresolved variable (use `| default \"fallback\"` to make it optional)"
_FILTERS = {
    "upper": str.upper,
    "lower": str.lower,
    "trim": str.strip,
    "quote": lambda value: f'"{value}"',
    "squote": lambda value: f"'{value}'",
}


@dataclass(frozen=True)
class TemplateVar:
    """A variable reference found inside a template."""

    raw: str
    namespace: str
    key: str


def _hostname() -> str | None:
    try:
        name = socket.gethostname().strip()
    except OSError:
        name = ""
    if name:
        return name
    return os.environ.get("COMPUTERNAME" if os.name == "nt" else "HOSTNAME")


def _arch() -> str:
    machine = platform.machine().lower()
    if machine in ("aarch64", "arm64"):
        return "aarch64"
    if machine.startswith("arm"):
        return "arm"
    return "x86_64"


def _username() -> str:
    for name in ("USER", "USERNAME"):
        value = os.environ.get(name)
        if value is not None:
            return value
    return "unknown"


def _home() -> str:
    try:
        return str(paths.home_dir())
    except DotlingError:
        return "~"


@dataclass
class RenderContext:
    """Values available to templates, by namespace."""

    builtins: dict[str, str] = field(default_factory=dict)
    vars: list[tuple[str, str]] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_environment(
        cls,
        repo_root: str,
        config_vars: Iterable[tuple[str, str]],
        local_vars: Iterable[tuple[str, str]],
    ) -> "RenderContext":
        """Build a context from this machine, config defaults and local overrides."""
        builtins = {
            "hostname": _hostname() or "unknown",
            "username": _username(),
            "os": Platform.current().value,
            "arch": _arch(),
            "home": _home(),
            "repo": str(repo_root),
        }
        merged = list(local_vars)
        known = {key for key, _ in merged}
        for key, value in config_vars:
            if key not in known:
                merged.append((key, value))
                known.add(key)
        return cls(builtins=builtins, vars=merged, env=dict(os.environ))

    def resolve(self, namespace: str, key: str) -> str | None:
        """Return the value of ``namespace.key``, or None if it is not set."""
        if namespace == "dotling":
            return self.builtins.get(key)
        if namespace == "var":
            return next((value for name, value in self.vars if name == key), None)
        if namespace == "env":
            return self.env.get(key)
        return None


def _strip_markers(tag_inner: str) -> str:
    return tag_inner.lstrip("-").rstrip("-").strip()


def _parse_var_ref(var_part: str, source_name: str) -> tuple[str, str]:
    namespace, sep, key = var_part.partition(".")
    if not sep:
        raise TemplateError(
            source_name,
            f"invalid variable `{var_part}` — expected `namespace.key` (e.g. `var.hostname`)",
        )
    namespace, key = namespace.strip(), key.strip()
    if namespace not in _NAMESPACES:
        raise TemplateError(
            source_name,
            f"unknown namespace `{namespace}` in `{var_part}` — "
            "valid namespaces: dotling, var, env",
        )
    return namespace, key


def _apply_filters(value: str | None, filters: str | None, source_name: str) -> str:
    if filters is not None:
        for raw_filter in filters.split("|"):
            name = raw_filter.strip()
            if not name:
                continue
            if name.startswith("default"):
                fallback = name[len("default"):].strip().strip('"').strip("'")
                if value is None:
                    value = fallback
                continue
            if value is None:
                raise TemplateError(
                    source_name,
                    "unresolved variable — cannot apply filter (use `| default \"\"` first)",
                )
            transform = _FILTERS.get(name)
            if transform is None:
                raise TemplateError(
                    source_name,
                    f"unknown filter `{name}` — valid filters: "
                    "upper, lower, trim, quote, squote, default",
                )
            value = transform(value)
    if value is None:
        raise TemplateError(source_name, _UNRESOLVED)
    return value


def _eval_expr(expr: str, ctx: RenderContext, source_name: str) -> str:
    var_part, sep, filters = expr.partition("|")
    namespace, key = _parse_var_ref(var_part.strip(), source_name)
    return _apply_filters(
        ctx.resolve(namespace, key), filters.strip() if sep else None, source_name
    )


def render(template_text: str, ctx: RenderContext, source_name: str) -> str:
    """Render ``template_text``; raise TemplateError on any unresolved or invalid tag."""
    output: list[str] = []
    remaining = template_text

    while (open_pos := remaining.find("{{")) != -1:
        before = remaining[:open_pos]
        after_open = remaining[open_pos + 2:]
        close_pos = after_open.find("}}")
        if close_pos == -1:
            raise TemplateError(source_name, "unclosed `{{` — missing `}}`")

        tag_inner = after_open[:close_pos]
        trim_left = tag_inner.startswith("-")
        trim_right = tag_inner.endswith("-")

        output.append(before.rstrip() if trim_left else before)
        output.append(_eval_expr(_strip_markers(tag_inner), ctx, source_name))

        remaining = after_open[close_pos + 2:]
        if trim_right:
            remaining = remaining.lstrip(" \t")

    output.append(remaining)
    return "".join(output)


def scan_variables(template_text: str) -> list[TemplateVar]:
    """Return each distinct ``namespace.key`` referenced, in order of first use."""
    found: list[TemplateVar] = []
    seen: set[tuple[str, str]] = set()
    remaining = template_text

    while (open_pos := remaining.find("{{")) != -1:
        after_open = remaining[open_pos + 2:]
        close_pos = after_open.find("}}")
        if close_pos == -1:
            break
        expr = _strip_markers(after_open[:close_pos])
        var_part = expr.split("|", 1)[0].strip()
        namespace, sep, key = var_part.partition(".")
        if sep:
            identity = (namespace.strip(), key.strip())
            if identity not in seen:
                seen.add(identity)
                found.append(TemplateVar(raw=expr, namespace=identity[0], key=identity[1]))
        remaining = after_open[close_pos + 2:]

    return found