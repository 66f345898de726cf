# scribekeep

scribekeep manages the life cycle of one text document in an editor. It
opens, reloads, renames, saves and closes the document. It saves untitled
work as drafts when auto-save is on, and writes `.backup` copies before
each save. It has no user interface. Questions and error reports go
through a `Prompter`. Recently closed files are kept in a `RecentHistory`.

## Installation

```
pip install scribekeep
```

To run the test suite:

```
pip install "scribekeep[test]"
pytest
```

## Modules

### `scribekeep.bookmark`

`Bookmark(file_path=None, position=0)` holds a file's absolute path and a
cursor position.

- A negative position is stored as 0.
- A bookmark made without a path is null, and `is_null()` returns True.
- `is_valid()` is True when the path names an existing regular file.
- `last_read()` returns the file's last access time, or None.
- Two bookmarks are equal when their paths are equal, whatever their
  cursor positions.

### `scribekeep.documentfiles`

File helpers. Failures raise `DocumentFileError`, which carries a `title`
and a `detail`.

- `read_text(file_path)` reads UTF-8. It also honours UTF-8, UTF-16 and
  UTF-32 byte-order marks.
- `write_text(file_path, text)` writes UTF-8. It raises when no path is
  given.
- `backup_file(file_path, backup_location)` copies the file to
  `<backup_location>/<name>.backup`, replacing any earlier backup. It
  returns the backup path, or None if the file does not exist.
- `next_draft_path(draft_location, draft_name="untitled")` returns the
  first free `untitled-N.md`.
- `is_draft(file_path, draft_location, draft_name="untitled")` tells
  whether a path is such a draft.
- `ensure_directory`, `is_writable` and `file_chooser_filter` complete the
  module.

### `scribekeep.manager`

- `Document`: a dataclass with the fields `file_path`, `text`, `modified`,
  `read_only`, `timestamp` and `cursor_position`.
- `Signal`: has `connect(callback)` and `emit(*args)`.
- `Response`: the possible answers `YES`, `NO`, `SAVE`, `DISCARD` and
  `CANCEL`.
- `Prompter(answers=(), open_paths=(), save_paths=())`: gives its answers
  and paths in order. When they run out, a question gets its default
  answer and a path request counts as cancelled. The questions asked are
  recorded in `questions`, and the errors reported in `errors`. Subclass
  it to connect a real user interface.
- `RecentHistory`: an in-memory list of bookmarks, newest first. It
  provides `add_recent`, `remove_recent`, `recent_files(max_count=-1)` and
  `lookup`. Files that do not exist are not added, and are left out of
  `recent_files`.
- `DocumentManager(prompter=None, history=None, draft_location=None,
  document=None)`: provides `open`, `reopen_last_closed_file`, `reload`,
  `rename`, `save`, `save_as`, `save_file`, `close`, `auto_save` and
  `on_file_changed_externally`.
  - It emits these signals: `document_display_name_changed`,
    `document_modified_changed`, `operation_started`, `operation_update`,
    `operation_finished`, `document_loaded` and `document_closed`.
  - The draft location defaults to `~/Documents`.
  - Backups go to the location set with `set_backup_location`. If none is
    set, they go next to the file.

## Example

```python
from pathlib import Path

from scribekeep.manager import DocumentManager, Prompter, Response

Path("notes.md").write_text("First line.\n", encoding="utf-8")

prompter = Prompter(answers=[Response.SAVE], save_paths=["renamed.md"])
manager = DocumentManager(prompter, draft_location="drafts")
manager.document_display_name_changed.connect(print)

manager.open("notes.md")
manager.document().text += "More text.\n"
manager.set_modified(True)
manager.save()        # writes notes.md, after copying it to notes.md.backup
manager.close()       # notes.md goes into the recent history
manager.reopen_last_closed_file()
```

## Auto-save and drafts

Auto-save is off at first. Turn it on with `set_auto_save_enabled(True)`.
When it is on and an untitled document with text becomes modified, the
manager saves it as `untitled-N.md` in the draft location. `save_file()`
asks for a new name for a draft and removes the draft file and its backup.

## What the package does not do

- It runs no timer. Call `auto_save()` yourself, for example once a
  minute.
- It does not watch files. Call `on_file_changed_externally(path)` when
  your own watcher reports a change.
- `RecentHistory` lives only in memory and is not written to disk.
- There is no editor widget, no dialog and no export to other formats.