import os

import pytest

from scribekeep.documentfiles import (
    DocumentFileError,
    backup_file,
    ensure_directory,
    file_chooser_filter,
    is_draft,
    is_writable,
    next_draft_path,
    read_text,
    write_text,
)


def test_file_chooser_filter_lists_markdown_text_and_all():
    assert file_chooser_filter() == (
        "Markdown (*.md *.markdown *.mdown *.mkdn *.mkd *.mdwn *.mdtxt "
        "*.mdtext *.text *.Rmd *.txt);;Text (*.txt);;All (*)"
    )


def test_ensure_directory_creates_nested(tmp_path):
    target = tmp_path / "a" / "b"
    result = ensure_directory(str(target))
    assert result == os.path.abspath(str(target))
    assert target.is_dir()


def test_ensure_directory_existing_is_kept(tmp_path):
    (tmp_path / "keep.txt").write_text("x")
    assert ensure_directory(str(tmp_path)) == str(tmp_path)
    assert (tmp_path / "keep.txt").read_text() == "x"


def test_write_then_read_round_trip(tmp_path):
    path = str(tmp_path / "doc.md")
    text = "abcdefg\nxyz\n\u00e9\u4e2d"
    write_text(path, text)
    assert read_text(path) == text


def test_write_replaces_contents(tmp_path):
    path = str(tmp_path / "inprogress.txt")
    write_text(path, "Hello, world!\n")
    write_text(path, "12345\n6789\n0")
    assert read_text(path) == "12345\n6789\n0"


def test_write_is_utf8_on_disk(tmp_path):
    path = tmp_path / "enc.md"
    write_text(str(path), "\u00e9")
    assert path.read_bytes() == "\u00e9".encode("utf-8")


@pytest.mark.parametrize("path", [None, ""])
def test_write_without_path_fails(path):
    with pytest.raises(DocumentFileError) as info:
        write_text(path, "empty")
    assert info.value.detail == "No file path specified"


def test_write_into_missing_parent_fails(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(DocumentFileError):
        write_text(str(blocker / "newfile.txt"), "text")


@pytest.mark.parametrize("encoding", ["utf-8-sig", "utf-16", "utf-32"])
def test_read_detects_byte_order_mark(tmp_path, encoding):
    path = tmp_path / "bom.txt"
    path.write_bytes("abc\nxyz".encode(encoding))
    assert read_text(str(path)) == "abc\nxyz"


def test_read_missing_file_fails(tmp_path):
    missing = str(tmp_path / "foo.txt")
    with pytest.raises(DocumentFileError) as info:
        read_text(missing)
    assert info.value.title == f"Could not read {missing}"


def test_backup_copies_file(tmp_path):
    source = tmp_path / "note.md"
    source.write_text("content")
    backups = tmp_path / "backups"
    result = backup_file(str(source), str(backups))
    assert result == os.path.join(str(backups), "note.md.backup")
    assert (backups / "note.md.backup").read_text() == "content"


def test_backup_replaces_previous(tmp_path):
    source = tmp_path / "note.md"
    backups = tmp_path / "backups"
    source.write_text("first")
    backup_file(str(source), str(backups))
    source.write_text("second")
    backup_file(str(source), str(backups))
    assert (backups / "note.md.backup").read_text() == "second"


def test_backup_of_missing_file_removes_stale_backup(tmp_path):
    backups = tmp_path / "backups"
    backups.mkdir()
    stale = backups / "gone.md.backup"
    stale.write_text("old")
    assert backup_file(str(tmp_path / "gone.md"), str(backups)) is None
    assert not stale.exists()


def test_backup_location_blocked_fails(tmp_path):
    source = tmp_path / "note.md"
    source.write_text("content")
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    with pytest.raises(DocumentFileError) as info:
        backup_file(str(source), str(blocker / "sub"))
    assert info.value.title == "File backup failed"


def test_next_draft_path_first(tmp_path):
    assert next_draft_path(str(tmp_path)) == f"{tmp_path}/untitled-1.md"


def test_next_draft_path_skips_taken(tmp_path):
    (tmp_path / "untitled-1.md").write_text("")
    (tmp_path / "untitled-2.md").write_text("")
    path = next_draft_path(str(tmp_path), "untitled")
    assert path == f"{tmp_path}/untitled-3.md"
    assert not os.path.exists(path)


def test_draft_path_is_recognised_as_draft(tmp_path):
    path = next_draft_path(str(tmp_path))
    assert is_draft(path, str(tmp_path))


def test_is_draft_rejects_other_directory(tmp_path):
    other = tmp_path / "other"
    assert not is_draft(str(other / "untitled-1.md"), str(tmp_path))


def test_is_draft_rejects_other_name(tmp_path):
    assert not is_draft(str(tmp_path / "notes.md"), str(tmp_path))


@pytest.mark.parametrize("path", [None, ""])
def test_is_draft_rejects_no_path(tmp_path, path):
    assert is_draft(path, str(tmp_path)) is False


def test_is_writable(tmp_path):
    path = tmp_path / "w.md"
    assert is_writable(str(path)) is False
    path.write_text("x")
    assert is_writable(str(path)) is True
    assert is_writable(None) is False