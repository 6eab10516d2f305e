# dotling

The core of a dotfiles manager: a small library with no dependencies for
describing configuration files kept in a repository, rendering templates
for them, and handling the files and paths involved.

It provides:

- **Configuration** (`dotling.config`, `dotling.configfile`): the
  `dotling.toml` model (`Config`, `Entry`, `Settings`, `Hooks` and
  `DeployMethod`) and `parse_config`, `serialize_config`, `load_config` and
  `save_config` for the file format.
- **Templates** (`dotling.template`): `render` for
  `{{ namespace.key | filter }}` tags with the `dotling`, `var` and `env`
  namespaces, the filters `upper`, `lower`, `trim`, `quote`, `squote` and
  `default "..."`, and `{{-` / `-}}` whitespace trimming; `scan_variables`
  lists the distinct variables a template refers to.
- **Machine-local variables** (`dotling.varstore`): `VarStore`, kept in
  `~/.dotling/vars.toml`, whose values take priority over the shared
  `[vars]` defaults of `dotling.toml`; `import_from_file` reads a `.env`
  file or the `[vars]` section of a TOML file, and `looks_like_real_value`
  warns about committed defaults that look like an e-mail address, a long
  secret, a local value or the current user name.
- **State and paths** (`dotling.store`, `dotling.paths`): the registered
  repository root (`get_repo_root`, `set_repo_root`, `require_repo_root`),
  the `~/.dotling/` layout, `~` expansion and collapsing, lexical path
  normalisation, and `map_to_repo`, which maps home-directory paths to
  repository paths (`~/.zshrc` → `shell/zshrc`, `~/.config/nvim` →
  `config/nvim`, `~/.somerc` → `home/somerc`).
- **Filesystem helpers** (`dotling.fsutil`): atomic writes and copies,
  creating, reading and removing symlinks, sorted recursive walks,
  content comparison, removal of empty parent directories and permission
  bits.
- **Platforms** (`dotling.platforms`): `Platform` detection and
  `should_deploy`, which checks an entry's `os` restriction against the
  running machine.

Errors are raised as subclasses of `dotling.errors.DotlingError`:
`FileOperationError`, `ConfigError`, `TemplateError`, `UserError`,
`DeployError`, `CryptoError` and `VaultError`.

## The config file

```toml
[settings]
method = "symlink"

[hooks]
before = "echo starting"

[vars]
email = "user@example.com"

[[entries]]
source = "shell/zshrc"
target = "~/.zshrc"

[[entries]]
source = "config/nvim"
target = "~/.config/nvim"
directory = true
method = "copy"
os = "macos"
```

Entries may also set `encrypted`, `template`, `permissions` (octal, e.g.
`"0600"`), `before` and `after`. Unknown settings, hooks, entry fields or
`[[...]]` sections, invalid methods or permissions, and entries without a
`source` or `target` raise `ConfigError` with the line number.

## Reading and editing a config

```python
from pathlib import Path

from dotling.config import Entry
from dotling.configfile import load_config, save_config

config = load_config(Path("~/dotfiles/dotling.toml").expanduser())
config.add_entry(Entry(source="git/gitconfig", target="~/.gitconfig"))
print(config.find_entry("~/.zshrc"))
save_config(config)
```

`add_entry` raises a `UserError` when the source is already tracked or the
target is already in use. `find_entry` matches a source or target as
written, or as a resolved path; `remove_entry` returns the removed entry
or `None`.

## Rendering a template

```python
from dotling.template import RenderContext, render, scan_variables
from dotling.varstore import VarStore

local = VarStore.load()
ctx = RenderContext.from_environment(
    "/home/me/dotfiles",
    [("editor", "vim")],
    local.as_pairs(),
)

text = "editor={{ var.editor | upper }}\nhost={{ dotling.hostname }}\n"
print(render(text, ctx, "shell/env.dtmpl"))
print([v.key for v in scan_variables(text)])
```

The `dotling` namespace holds `hostname`, `username`, `os`, `arch`, `home`
and `repo`; `env` holds the process environment. An unresolved variable,
an unknown namespace or filter, or a missing `}}` raises `TemplateError`.

## Local variables

```python
from dotling.varstore import VarStore

store = VarStore.load()
store.set("email", "user@example.com")
store.remove("old_key")
store.save()
```

## What this package does not do

This is a library only. It has no command-line tool, and it does not
deploy, sync or pull entries, encrypt files or manage a vault, record
fingerprints or snapshots, or run the hook commands stored in the config.
The `encrypted`, `before` and `after` fields and the `[hooks]` table are
read and written, but nothing in the package acts on them.