import pytest

from dotling.errors import FileOperationError
from dotling.fsutil import (
    atomic_write,
    cleanup_empty_parents,
    copy_file,
    create_symlink,
    files_identical,
    get_permissions,
    is_symlink,
    read_link,
    remove_symlink,
    set_permissions,
    walk_dir,
)


def test_walk_finds_files(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "file1.txt").write_text("hello")
    (tmp_path / "a" / "b" / "file2.txt").write_text("world")
    (tmp_path / "a" / ".hidden").write_text("secret")

    assert len(walk_dir(tmp_path, False)) == 2
    assert len(walk_dir(tmp_path, True)) == 3


def test_atomic_write_roundtrip(tmp_path):
    path = tmp_path / "dotling_test_atomic"
    atomic_write(path, b"test data")
    assert path.read_text() == "test data"


def test_copy_file_preserves_content(tmp_path):
    src, dst = tmp_path / "src.txt", tmp_path / "dst.txt"
    src.write_text("hello world")
    copy_file(src, dst)
    assert dst.read_text() == "hello world"


def test_copy_file_creates_parent_dirs(tmp_path):
    src = tmp_path / "src.txt"
    dst = tmp_path / "deep" / "nested" / "dir" / "dst.txt"
    src.write_text("data")
    copy_file(src, dst)
    assert dst.read_text() == "data"


def test_copy_file_overwrites_existing(tmp_path):
    src, dst = tmp_path / "src.txt", tmp_path / "dst.txt"
    src.write_text("new content")
    dst.write_text("old content")
    copy_file(src, dst)
    assert dst.read_text() == "new content"


def test_copy_file_missing_source(tmp_path):
    with pytest.raises(FileOperationError):
        copy_file(tmp_path / "missing", tmp_path / "dst")


def test_create_symlink_and_read_link(tmp_path):
    target, link = tmp_path / "target", tmp_path / "link"
    target.write_text("data")
    create_symlink(target, link)
    assert is_symlink(link)
    assert read_link(link) == target


def test_create_symlink_creates_parent_dirs(tmp_path):
    target = tmp_path / "target"
    link = tmp_path / "deep" / "nested" / "link"
    target.write_text("data")
    create_symlink(target, link)
    assert is_symlink(link)


def test_remove_symlink_preserves_target(tmp_path):
    target, link = tmp_path / "target", tmp_path / "link"
    target.write_text("data")
    create_symlink(target, link)
    remove_symlink(link)
    assert not is_symlink(link)
    assert target.exists(), "target should be preserved"


def test_is_symlink_true_for_symlink(tmp_path):
    target, link = tmp_path / "target", tmp_path / "link"
    target.write_text("data")
    create_symlink(target, link)
    assert is_symlink(link) is True


def test_is_symlink_false_for_regular_file(tmp_path):
    path = tmp_path / "file"
    path.write_text("data")
    assert is_symlink(path) is False


def test_is_symlink_false_for_nonexistent(tmp_path):
    assert is_symlink(tmp_path / "nonexistent") is False


def test_files_identical_same_content(tmp_path):
    a, b = tmp_path / "a.txt", tmp_path / "b.txt"
    a.write_text("same")
    b.write_text("same")
    assert files_identical(a, b) is True


def test_files_identical_different_content(tmp_path):
    a, b = tmp_path / "a.txt", tmp_path / "b.txt"
    a.write_text("foo")
    b.write_text("bar")
    assert files_identical(a, b) is False


def test_files_identical_nonexistent(tmp_path):
    a = tmp_path / "a.txt"
    a.write_text("data")
    with pytest.raises(FileOperationError):
        files_identical(a, tmp_path / "missing.txt")


def test_atomic_write_creates_parent(tmp_path):
    path = tmp_path / "deep" / "nested" / "file.txt"
    atomic_write(path, b"data")
    assert path.read_text() == "data"


def test_atomic_write_overwrites(tmp_path):
    path = tmp_path / "file.txt"
    atomic_write(path, b"first")
    atomic_write(path, b"second")
    assert path.read_text() == "second"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["file.txt"]


def test_set_and_get_permissions_roundtrip(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("data")
    set_permissions(path, 0o755)
    assert get_permissions(path) == 0o755
    set_permissions(path, 0o600)
    assert get_permissions(path) == 0o600


def test_walk_dir_nested_with_hidden(tmp_path):
    (tmp_path / "a" / ".hidden_dir").mkdir(parents=True)
    (tmp_path / "a" / "visible.txt").write_text("v")
    (tmp_path / "a" / ".hidden_dir" / "secret.txt").write_text("s")

    assert len(walk_dir(tmp_path, False)) == 1
    assert len(walk_dir(tmp_path, True)) == 2


def test_walk_dir_sorted_output(tmp_path):
    for name in ("z.txt", "a.txt", "m.txt"):
        (tmp_path / name).write_text("")
    names = [p.name for p in walk_dir(tmp_path, False)]
    assert names == ["a.txt", "m.txt", "z.txt"]


def test_walk_dir_missing_root(tmp_path):
    with pytest.raises(FileOperationError):
        walk_dir(tmp_path / "missing", False)


def test_cleanup_empty_parents_removes_chain(tmp_path):
    stop = tmp_path / "repo"
    file = stop / "a" / "b" / "c" / "file.txt"
    file.parent.mkdir(parents=True)
    file.write_text("data")
    file.unlink()
    cleanup_empty_parents(file, stop)
    assert not (stop / "a").exists()
    assert stop.exists()


def test_cleanup_empty_parents_stops_at_nonempty(tmp_path):
    stop = tmp_path / "repo"
    file = stop / "a" / "b" / "c" / "file.txt"
    sibling = stop / "a" / "b" / "keep.txt"
    file.parent.mkdir(parents=True)
    file.write_text("data")
    sibling.write_text("keep")
    file.unlink()
    cleanup_empty_parents(file, stop)
    assert not file.parent.exists()
    assert sibling.exists()