"""Document life-cycle management for text editors: bookmarks, file helpers and the document manager."""

__version__ = "0.1.0"
__all__ = ["bookmark", "documentfiles", "manager"]