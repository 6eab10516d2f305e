from pathlib import Path

import pytest

from dotling.config import Config, DeployMethod, Entry, Hooks, Settings
from dotling.errors import UserError


def make_entry(source: str, target: str) -> Entry:
    return Entry(source=source, target=target)


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


def test_deploy_method_parse_known_names():
    assert DeployMethod.parse("symlink") is DeployMethod.SYMLINK
    assert DeployMethod.parse("copy") is DeployMethod.COPY


def test_deploy_method_parse_is_case_insensitive():
    assert DeployMethod.parse("COPY") is DeployMethod.COPY
    assert DeployMethod.parse("SymLink") is DeployMethod.SYMLINK


def test_deploy_method_parse_unknown_returns_none():
    assert DeployMethod.parse("hardlink") is None


def test_deploy_method_str():
    assert str(DeployMethod.parse("COPY")) == "copy"
    assert str(DeployMethod.parse("SymLink")) == "symlink"


def test_new_config_defaults():
    config = Config(Path("test.toml"))
    assert config.entries == []
    assert config.settings.method is DeployMethod.SYMLINK
    assert config.hooks == Hooks()
    assert config.vars == []


def test_config_path_is_converted():
    config = Config("test.toml")
    assert config.path == Path("test.toml")


def test_entry_defaults():
    entry = make_entry("shell/zshrc", "~/.zshrc")
    assert entry.method is None
    assert not entry.encrypted
    assert not entry.directory
    assert not entry.template
    assert entry.os is None
    assert entry.permissions is None


def test_settings_default_is_symlink():
    assert Settings().method is DeployMethod.SYMLINK


def test_duplicate_source_rejected():
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("a", "~/.a"))
    with pytest.raises(UserError, match="already tracked"):
        config.add_entry(make_entry("a", "~/.b"))
    assert len(config.entries) == 1


def test_duplicate_target_rejected():
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("a", "~/.a"))
    with pytest.raises(UserError) as info:
        config.add_entry(make_entry("b", "~/.a"))
    assert "already in use" in str(info.value)
    assert "`a`" in str(info.value)


def test_add_entry_preserves_order():
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("b", "~/.b"))
    config.add_entry(make_entry("a", "~/.a"))
    assert [e.source for e in config.entries] == ["b", "a"]


def test_find_by_source_or_target(fake_home):
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("shell/zshrc", "~/.zshrc"))
    assert config.find_entry("shell/zshrc").source == "shell/zshrc"
    assert config.find_entry("~/.zshrc").source == "shell/zshrc"
    assert config.find_entry("nope") is None


def test_find_by_resolved_target(fake_home):
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("shell/zshrc", "~/.zshrc"))
    found = config.find_entry(str(fake_home / ".zshrc"))
    assert found is not None
    assert found.source == "shell/zshrc"


def test_find_by_resolved_source(fake_home, tmp_path):
    repo = tmp_path / "repo"
    config = Config(repo / "dotling.toml")
    config.add_entry(make_entry("shell/zshrc", "~/.zshrc"))
    found = config.find_entry(str(repo / "shell" / "x" / ".." / "zshrc"))
    assert found is not None
    assert found.target == "~/.zshrc"


def test_remove_entry():
    config = Config(Path("test.toml"))
    config.add_entry(make_entry("a", "~/.a"))
    removed = config.remove_entry("a")
    assert removed is not None
    assert removed.target == "~/.a"
    assert config.entries == []
    assert config.remove_entry("a") is None