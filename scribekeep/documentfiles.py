"""File operations behind the document manager: reading, writing, backups and drafts."""

from __future__ import annotations

import os
import shutil
from typing import Optional

DEFAULT_DRAFT_NAME = "untitled"
BACKUP_SUFFIX = ".backup"

_MARKDOWN_PATTERNS = (
    "*.md *.markdown *.mdown *.mkdn *.mkd *.mdwn *.mdtxt *.mdtext *.text *.Rmd *.txt"
)

# Longer marks first: the UTF-32 little-endian mark begins with the UTF-16 one.
_BYTE_ORDER_MARKS = (
    (b"\xff\xfe\x00\x00", "utf-32-le"),
    (b"\x00\x00\xfe\xff", "utf-32-be"),
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


class DocumentFileError(Exception):
    """Raised when a document file cannot be read, written or backed up."""

    def __init__(self, title: str, detail: str = "") -> None:
        super().__init__(f"{title}: {detail}" if detail else title)
        self.title = title
        self.detail = detail


def file_chooser_filter() -> str:
    """Return the name filter offered by open and save file choosers."""
    return f"Markdown ({_MARKDOWN_PATTERNS});;Text (*.txt);;All (*)"


def ensure_directory(directory: str) -> str:
    """Create the directory if it is missing and return its absolute path."""
    path = os.path.abspath(os.fspath(directory))
    os.makedirs(path, exist_ok=True)
    return path


def _decode(data: bytes) -> str:
    for mark, encoding in _BYTE_ORDER_MARKS:
        if data.startswith(mark):
            return data[len(mark):].decode(encoding, errors="replace")
    return data.decode("utf-8", errors="replace")


def read_text(file_path: str) -> str:
    """Read a text file as UTF-8, honouring a UTF-8, UTF-16 or UTF-32 byte order mark."""
    try:
        with open(file_path, "rb") as stream:
            data = stream.read()
    except OSError as exc:
        raise DocumentFileError(
            f"Could not read {file_path}", exc.strerror or str(exc)
        ) from exc
    return _decode(data)


def write_text(file_path: Optional[str], text: str) -> None:
    """Write text to a file in UTF-8, replacing any previous contents."""
    if not file_path:
        raise DocumentFileError(f"Error saving {file_path or ''}".rstrip(),
                                "No file path specified")
    try:
        with open(file_path, "w", encoding="utf-8", newline="") as stream:
            stream.write(text)
    except OSError as exc:
        raise DocumentFileError(
            f"Error saving {file_path}", exc.strerror or str(exc)
        ) from exc


def backup_file(file_path: str, backup_location: str) -> Optional[str]:
    """Copy a file to ``<backup_location>/<name>.backup``.

    Any earlier backup is replaced. Returns the backup's path, or None when
    the file to back up does not exist.
    """
    name = os.path.basename(os.fspath(file_path))
    backup_path = os.path.join(backup_location, name + BACKUP_SUFFIX)

    try:
        os.makedirs(backup_location, exist_ok=True)
    except OSError as exc:
        raise DocumentFileError(
            "File backup failed", "Error creating backup location!"
        ) from exc

    if os.path.lexists(backup_path):
        try:
            os.remove(backup_path)
        except OSError as exc:
            raise DocumentFileError(
                "File backup failed", exc.strerror or str(exc)
            ) from exc

    if not os.path.exists(file_path):
        return None

    try:
        shutil.copyfile(file_path, backup_path)
    except OSError as exc:
        raise DocumentFileError(
            "File backup failed", exc.strerror or str(exc)
        ) from exc
    return backup_path


def next_draft_path(draft_location: str, draft_name: str = DEFAULT_DRAFT_NAME) -> str:
    """Return the first ``<draft_name>-<n>.md`` path in the draft location not yet taken."""
    number = 1
    while True:
        candidate = f"{draft_location}/{draft_name}-{number}.md"
        if not os.path.exists(candidate):
            return candidate
        number += 1


def is_draft(
    file_path: Optional[str],
    draft_location: str,
    draft_name: str = DEFAULT_DRAFT_NAME,
) -> bool:
    """Return True if the file lies in the draft location and is named like a draft."""
    if not file_path:
        return False
    directory = os.path.dirname(os.path.abspath(file_path))
    base_name = os.path.basename(file_path).split(".", 1)[0]
    return (
        directory == os.path.abspath(draft_location)
        and base_name.startswith(draft_name)
    )


def is_writable(file_path: Optional[str]) -> bool:
    """Return True if the file exists and may be written to."""
    if not file_path:
        return False
    return os.path.exists(file_path) and os.access(file_path, os.W_OK)