"""
Archive domain objects for tagbuild.

Contains the format selector, the per-entry record written into an archive
and the explicit result of listing a tag's tree.
"""

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ArchiveFormat(Enum):
    """Supported archive formats."""
    TGZ = "tar.gz"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: str) -> 'ArchiveFormat':
        """
        Parse a user-supplied format name.

        Accepts "tgz", "tar.gz", "tar+gzip" and "zip" (case-insensitive).

        Raises:
            ValueError: If the format is unknown
        """
        normalized = value.strip().lower()
        if normalized in ('tgz', 'tar.gz', 'tar+gzip'):
            return cls.TGZ
        if normalized == 'zip':
            return cls.ZIP
        raise ValueError(f"unknown archive format: {value}")

    @property
    def extension(self) -> str:
        return ".tar.gz" if self is ArchiveFormat.TGZ else ".zip"


class EntryKind(Enum):
    """Kind of filesystem object behind an archive entry."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


def entry_name(prefix: str, path: str, is_dir: bool = False) -> str:
    """
    Build the in-archive name for a source path.

    The path is joined under prefix with forward slashes; directories get a
    trailing separator.
    """
    source = path.replace('\\', '/').lstrip('/')
    name = posixpath.normpath(posixpath.join(prefix, source)) if prefix else posixpath.normpath(source)
    if is_dir:
        name += '/'
    return name


@dataclass(frozen=True)
class ArchiveEntry:
    """One file, directory or symlink record, alive only while it is written."""
    source: str
    destination: str
    kind: EntryKind

    @classmethod
    def create(cls, prefix: str, source: str, kind: EntryKind) -> 'ArchiveEntry':
        return cls(
            source=source,
            destination=entry_name(prefix, source, kind is EntryKind.DIRECTORY),
            kind=kind,
        )


class ListingStatus(Enum):
    """Outcome of enumerating a tag's tree."""
    OK = "ok"
    NO_TAG = "no_tag"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class TreeListing:
    """
    Result of listing a tag's tree.

    Separates "the tag has no tracked files" (OK with no entries) from
    "there was nothing to list" (NO_TAG) and "the tree could not be read"
    (UNREADABLE, with error text).
    """

    status: ListingStatus
    entries: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ListingStatus.OK

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
