"""A file path paired with its last known cursor position."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional


class Bookmark:
    """A file and its last known cursor position, as kept in recent file history.

    A bookmark made without a file path is null. A negative cursor position
    is stored as 0. Two bookmarks are equal when they share the same absolute
    file path, whatever their cursor positions.
    """

    __slots__ = ("_file_path", "_position")

    def __init__(self, file_path: Optional[str] = None, position: int = 0) -> None:
        if file_path is None:
            self._file_path: Optional[str] = None
            self._position = 0
            return

        path = os.fspath(file_path)
        self._file_path = os.path.abspath(path) if path else path
        self._position = max(position, 0)

    @property
    def file_path(self) -> Optional[str]:
        """The absolute file path, or None for a null bookmark."""
        return self._file_path

    @property
    def cursor_position(self) -> int:
        """The cursor position within the file; never negative."""
        return self._position

    def last_read(self) -> Optional[datetime]:
        """Return the file's last access time, or None if it cannot be read."""
        if not self._file_path:
            return None
        try:
            stat = os.stat(self._file_path)
        except OSError:
            return None
        return datetime.fromtimestamp(stat.st_atime)

    def is_valid(self) -> bool:
        """Return True if the bookmark's path names an existing regular file."""
        if self.is_null():
            return False
        return os.path.isfile(self._file_path)

    def is_null(self) -> bool:
        """Return True if the bookmark has no file path."""
        return self._file_path is None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bookmark):
            return NotImplemented
        return self._file_path == other._file_path

    def __hash__(self) -> int:
        return hash(self._file_path)

    def __repr__(self) -> str:
        return f"Bookmark({self._file_path!r}, {self._position!r})"