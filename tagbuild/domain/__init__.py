"""
Domain layer for tagbuild.

Contains pure domain objects with no I/O or side effects:
- Description: Where a reference sits relative to its nearest version tag
- VersionTag: Annotated tag whose name holds a semantic version
- ArchiveEntry, ArchiveFormat, TreeListing: Archive assembly records

These objects are immutable and provide serialization methods for JSON
output.
"""

from .tag import VersionTag, parse_tag_version, version_part
from .description import Description, GitRef, CommitNode
from .archive import (
    ArchiveEntry,
    ArchiveFormat,
    EntryKind,
    ListingStatus,
    TreeListing,
    entry_name,
)

__all__ = [
    'VersionTag',
    'parse_tag_version',
    'version_part',
    'Description',
    'GitRef',
    'CommitNode',
    'ArchiveEntry',
    'ArchiveFormat',
    'EntryKind',
    'ListingStatus',
    'TreeListing',
    'entry_name',
]
