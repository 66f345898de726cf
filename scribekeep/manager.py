"""Life cycle of a single open document: open, reload, rename, save, close."""

from __future__ import annotations

import enum
import os
import stat
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from scribekeep.bookmark import Bookmark
from scribekeep.documentfiles import (
    BACKUP_SUFFIX,
    DEFAULT_DRAFT_NAME,
    DocumentFileError,
    backup_file,
    ensure_directory,
    is_draft,
    is_writable,
    next_draft_path,
    read_text,
    write_text,
)


class Response(enum.Enum):
    """Answers a user may give to a question."""

    YES = "yes"
    NO = "no"
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


class Signal:
    """A list of callbacks that are called, in order, when the signal is emitted."""

    def __init__(self) -> None:
        self._callbacks: List[Callable[..., object]] = []

    def connect(self, callback: Callable[..., object]) -> None:
        """Call ``callback`` on every later emission."""
        self._callbacks.append(callback)

    def emit(self, *args: object) -> None:
        """Call every connected callback with the given arguments."""
        for callback in list(self._callbacks):
            callback(*args)


@dataclass
class Document:
    """The text being edited, with the state of the file behind it."""

    file_path: Optional[str] = None
    text: str = ""
    modified: bool = False
    read_only: bool = False
    timestamp: Optional[datetime] = None
    cursor_position: int = 0

    def is_new(self) -> bool:
        """Return True if the document is not yet tied to a file."""
        return not self.file_path

    def is_empty(self) -> bool:
        """Return True if the document holds no text."""
        return not self.text

    def display_name(self) -> str:
        """Return the name to show for the document."""
        if self.is_new():
            return DEFAULT_DRAFT_NAME
        return os.path.basename(self.file_path)

    def clear(self) -> None:
        """Remove all text and put the cursor at the start."""
        self.text = ""
        self.cursor_position = 0


class Prompter:
    """Asks the user questions and reports errors.

    Answers and chosen paths are taken, in order, from the sequences given
    at construction. Once a sequence runs out, questions get their default
    answer and path requests are treated as cancelled. Questions asked are
    kept in ``questions`` and errors shown in ``errors``.
    """

    def __init__(
        self,
        answers: Iterable[Response] = (),
        open_paths: Iterable[Optional[str]] = (),
        save_paths: Iterable[Optional[str]] = (),
    ) -> None:
        self.errors: List[tuple] = []
        self.questions: List[tuple] = []
        self._answers = deque(answers)
        self._open_paths = deque(open_paths)
        self._save_paths = deque(save_paths)

    def question(
        self,
        text: str,
        informative: str,
        choices: Iterable[Response],
        default: Response,
    ) -> Response:
        """Ask a question offering ``choices`` and return the answer."""
        choices = tuple(choices)
        self.questions.append((text, informative))
        if not self._answers:
            return default
        answer = self._answers.popleft()
        if answer not in choices:
            raise ValueError(f"{answer!r} is not one of the offered choices")
        return answer

    def critical(self, text: str, informative: str) -> None:
        """Report an error to the user."""
        self.errors.append((text, informative))

    def open_path(self, starting_directory: Optional[str]) -> Optional[str]:
        """Ask for a file to open; None means the user cancelled."""
        return self._open_paths.popleft() if self._open_paths else None

    def save_path(self, starting_directory: Optional[str]) -> Optional[str]:
        """Ask for a file to save to; None means the user cancelled."""
        return self._save_paths.popleft() if self._save_paths else None


class RecentHistory:
    """Recently closed files with their cursor positions, most recent first."""

    def __init__(self) -> None:
        self._bookmarks: List[Bookmark] = []

    def add_recent(self, file_path: Optional[str], cursor_position: int = 0) -> None:
        """Put a file at the front of the history; missing files are ignored."""
        bookmark = Bookmark(file_path, cursor_position)
        if not bookmark.is_valid():
            return
        self._bookmarks = [b for b in self._bookmarks if b != bookmark]
        self._bookmarks.insert(0, bookmark)

    def remove_recent(self, file_path: Optional[str]) -> None:
        """Drop a file from the history, if it is there."""
        if file_path is None:
            return
        bookmark = Bookmark(file_path)
        self._bookmarks = [b for b in self._bookmarks if b != bookmark]

    def recent_files(self, max_count: int = -1) -> List[Bookmark]:
        """Return bookmarks of files that still exist, at most ``max_count`` if not negative."""
        valid = [b for b in self._bookmarks if b.is_valid()]
        return valid if max_count < 0 else valid[:max_count]

    def lookup(self, file_path: Optional[str]) -> Bookmark:
        """Return the bookmark for a file, or a null bookmark if there is none."""
        if file_path is None:
            return Bookmark()
        wanted = Bookmark(file_path)
        return next((b for b in self._bookmarks if b == wanted), Bookmark())


def _modification_time(path: str) -> datetime:
    return datetime.fromtimestamp(os.path.getmtime(path))


class DocumentManager:
    """Opens, saves, reloads, renames and closes one document, asking the user when needed.

    Backups go to the backup location if one is set, otherwise next to the file.
    """

    def __init__(
        self,
        prompter: Optional[Prompter] = None,
        history: Optional[RecentHistory] = None,
        draft_location: Optional[str] = None,
        document: Optional[Document] = None,
    ) -> None:
        self._prompter = prompter if prompter is not None else Prompter()
        self._history = history if history is not None else RecentHistory()
        self._document = document if document is not None else Document()
        if draft_location is None:
            draft_location = os.path.join(os.path.expanduser("~"), "Documents")
        self._draft_location = os.path.abspath(draft_location)
        self._backup_location: Optional[str] = None
        self._file_history_enabled = True
        self._backup_on_save = True
        self._auto_save_enabled = False
        self._notification_visible = False
        self._watched: set = set()

        self.document_display_name_changed = Signal()
        self.document_modified_changed = Signal()
        self.operation_started = Signal()
        self.operation_update = Signal()
        self.operation_finished = Signal()
        self.document_loaded = Signal()
        self.document_closed = Signal()

    # Settings

    def document(self) -> Document:
        """Return the open document."""
        return self._document

    def auto_save_enabled(self) -> bool:
        return self._auto_save_enabled

    def set_auto_save_enabled(self, enabled: bool) -> None:
        self._auto_save_enabled = enabled
        doc = self._document
        if enabled:
            if doc.is_new() and not doc.is_empty() and doc.modified:
                self._create_draft()
            self.document_modified_changed.emit(False)
        elif doc.modified:
            self.set_modified(False)

    def file_backup_enabled(self) -> bool:
        return self._backup_on_save

    def set_file_backup_enabled(self, enabled: bool) -> None:
        self._backup_on_save = enabled

    def set_file_history_enabled(self, enabled: bool) -> None:
        self._file_history_enabled = enabled

    def set_draft_location(self, directory: str) -> None:
        """Use ``directory`` for drafts, creating it if needed."""
        self._draft_location = ensure_directory(directory)

    def set_backup_location(self, directory: str) -> None:
        """Use ``directory`` for backups, creating it if needed."""
        self._backup_location = ensure_directory(directory)

    def set_modified(self, modified: bool) -> None:
        """Change the document's modified state, reacting as the state changes."""
        doc = self._document
        if doc.modified == modified:
            return
        doc.modified = modified
        if doc.read_only or not self._auto_save_enabled:
            self.document_modified_changed.emit(modified)
        if modified and self._auto_save_enabled and doc.is_new() and not doc.is_empty():
            self._create_draft()

    # Operations

    def _starting_directory(self) -> Optional[str]:
        if self._document.is_new():
            return None
        return os.path.dirname(self._document.file_path)

    def open(self, file_path: Optional[str] = None) -> None:
        """Open a file, asking for one if no path is given."""
        if not self._check_save_changes():
            return
        path = file_path or self._prompter.open_path(self._starting_directory())
        if not path:
            return
        if not os.access(path, os.R_OK):
            self._prompter.critical(f"Could not open {path}", "Permission denied.")
            return

        doc = self._document
        old_path = doc.file_path
        old_cursor = doc.cursor_position
        old_was_new = doc.is_new()

        if not self._load_file(path):
            return
        if old_path == doc.file_path:
            doc.cursor_position = min(old_cursor, len(doc.text))
        elif self._file_history_enabled and not old_was_new:
            self._history.add_recent(old_path, old_cursor)

    def reopen_last_closed_file(self) -> None:
        """Open the most recent file in the history, if any."""
        if not self._file_history_enabled:
            return
        if not self._document.is_new():
            self._history.remove_recent(self._document.file_path)
        recent = self._history.recent_files(1)
        if recent:
            self.open(recent[0].file_path)
            self.document_closed.emit()

    def reload(self) -> None:
        """Read the document again from disk, after confirming that changes may be lost."""
        doc = self._document
        if doc.is_new():
            return
        if doc.modified:
            response = self._prompter.question(
                "The document has been modified.",
                "Discard changes?",
                (Response.YES, Response.NO),
                Response.NO,
            )
            if response == Response.NO:
                return
        position = doc.cursor_position
        if self._load_file(doc.file_path):
            doc.cursor_position = min(position, len(doc.text))

    def rename(self) -> None:
        """Move the document's file to a path the user chooses, then save."""
        doc = self._document
        if doc.is_new():
            self.save_as()
            return
        path = self._prompter.save_path(None)
        if not path:
            return
        title = f"Failed to rename {doc.file_path}"
        if os.path.lexists(path):
            try:
                os.remove(path)
            except OSError as exc:
                self._prompter.critical(title, exc.strerror or str(exc))
                return
        try:
            os.rename(doc.file_path, path)
        except OSError as exc:
            self._prompter.critical(title, exc.strerror or str(exc))
            return
        self._set_file_path(path)
        self.save()

    def save_file(self) -> bool:
        """Save; a draft is saved under a new name chosen by the user."""
        if self._is_draft():
            return self.save_as()
        return self.save()

    def save(self) -> bool:
        """Save to the document's file, asking for a path if there is none."""
        if self._document.is_new() or not self._check_permissions_before_save():
            return self.save_as()
        self._save()
        return True

    def save_as(self) -> bool:
        """Save to a path the user chooses; False if the user cancels."""
        path = self._prompter.save_path(self._starting_directory())
        if not path:
            return False
        if self._is_draft():
            draft_path = self._document.file_path
            for leftover in (draft_path, draft_path + BACKUP_SUFFIX):
                try:
                    os.remove(leftover)
                except OSError:
                    pass
        self._set_file_path(path)
        self._save()
        return True

    def close(self) -> bool:
        """Close the document, leaving a new empty one; False if the user cancels."""
        if not self._check_save_changes():
            return False
        doc = self._document
        file_path = doc.file_path
        cursor_position = doc.cursor_position
        was_new = doc.is_new()

        doc.clear()
        doc.read_only = False
        self._set_file_path(None)
        self.set_modified(False)

        if self._file_history_enabled and (not was_new or self._auto_save_enabled):
            self._history.add_recent(file_path, cursor_position)

        self.document_closed.emit()
        return True

    def auto_save(self) -> None:
        """Save if auto-save is on and the document has unsaved changes."""
        doc = self._document
        if (
            self._auto_save_enabled
            and not doc.is_new()
            and not doc.read_only
            and doc.modified
        ):
            self.save()

    def on_file_changed_externally(self, path: str) -> None:
        """React to another program changing or removing the document's file."""
        doc = self._document
        if not os.path.exists(path):
            self.document_modified_changed.emit(True)
            self.set_modified(True)
            return

        writable = os.access(path, os.W_OK)
        if writable and doc.read_only:
            doc.read_only = False
            if self._auto_save_enabled:
                self.document_modified_changed.emit(False)
        elif not writable and not doc.read_only:
            doc.read_only = True
            if doc.modified:
                self.document_modified_changed.emit(True)

        newer = doc.timestamp is None or _modification_time(path) > doc.timestamp
        if newer and not self._notification_visible:
            self._notification_visible = True
            response = self._prompter.question(
                "The document has been modified by another program.",
                "Would you like to reload the document?",
                (Response.YES, Response.NO),
                Response.YES,
            )
            self._notification_visible = False
            if response == Response.YES:
                self.reload()

    # Internals

    def _save(self) -> None:
        doc = self._document
        self.set_modified(False)
        self.document_modified_changed.emit(False)
        doc.timestamp = datetime.now()

        if self._backup_on_save and doc.file_path:
            location = self._backup_location or os.path.dirname(doc.file_path)
            try:
                backup_file(doc.file_path, location)
            except DocumentFileError as exc:
                self._prompter.critical(exc.title, exc.detail)

        try:
            write_text(doc.file_path, doc.text)
        except DocumentFileError as exc:
            self._prompter.critical(exc.title, exc.detail)
            return
        doc.timestamp = datetime.now()
        self._watched.add(doc.file_path)

    def _load_file(self, path: str) -> bool:
        try:
            text = read_text(path)
        except DocumentFileError as exc:
            self._prompter.critical(exc.title, exc.detail)
            return False

        doc = self._document
        doc.clear()
        self.operation_started.emit(f"opening {path}")
        self._set_file_path(path)
        doc.text = text
        self.operation_update.emit("")

        position = 0
        if self._file_history_enabled:
            position = self._history.lookup(path).cursor_position
        doc.cursor_position = min(position, len(text))

        doc.read_only = not is_writable(path)
        self.set_modified(False)
        doc.timestamp = _modification_time(path)
        self._watched = {doc.file_path}

        self.operation_finished.emit()
        self.document_modified_changed.emit(False)
        self.document_loaded.emit()
        return True

    def _set_file_path(self, path: Optional[str]) -> None:
        doc = self._document
        if not doc.is_new():
            self._watched.discard(doc.file_path)
        doc.file_path = os.path.abspath(path) if path else None
        if doc.file_path and os.path.exists(doc.file_path):
            doc.read_only = not is_writable(doc.file_path)
        else:
            doc.read_only = False
        self.document_display_name_changed.emit(doc.display_name())

    def _check_save_changes(self) -> bool:
        doc = self._document
        if not doc.modified:
            return True
        if self._auto_save_enabled and not doc.is_new() and not doc.read_only:
            return self.save()

        if doc.is_new():
            text = "File has been modified."
        else:
            text = f"{doc.display_name()} has been modified."
        response = self._prompter.question(
            text,
            "Would you like to save your changes?",
            (Response.SAVE, Response.DISCARD, Response.CANCEL),
            Response.SAVE,
        )
        if response == Response.SAVE:
            return self.save_as() if doc.is_new() else self.save()
        if response == Response.CANCEL:
            return False
        return True

    def _check_permissions_before_save(self) -> bool:
        doc = self._document
        if not doc.read_only:
            return True
        response = self._prompter.question(
            f"{doc.file_path} is read only.",
            "Overwrite protected file?",
            (Response.YES, Response.NO),
            Response.YES,
        )
        if response == Response.NO:
            return False

        self._watched.discard(doc.file_path)
        try:
            os.remove(doc.file_path)
        except OSError:
            try:
                os.chmod(doc.file_path, stat.S_IRUSR | stat.S_IWUSR)
                os.remove(doc.file_path)
            except OSError:
                self._prompter.critical(
                    "Overwrite failed.", "Please save file to another location."
                )
                self._watched.add(doc.file_path)
                return False
        doc.read_only = False
        return True

    def _is_draft(self) -> bool:
        doc = self._document
        if doc.is_new():
            return False
        return is_draft(doc.file_path, self._draft_location, DEFAULT_DRAFT_NAME)

    def _create_draft(self) -> None:
        if not self._document.is_new():
            return
        path = next_draft_path(self._draft_location, DEFAULT_DRAFT_NAME)
        self._set_file_path(path)
        self._save()