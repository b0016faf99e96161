"""
Description domain object for tagbuild.

A Description answers "where is this working tree relative to its nearest
version tag?". It is computed once per process and never changes afterwards.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from .tag import VersionTag


@dataclass(frozen=True)
class GitRef:
    """A resolved reference: its name and the commit it points at."""
    name: str
    commit: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'commit': self.commit}


@dataclass(frozen=True)
class CommitNode:
    """Minimal commit data needed to walk history."""
    sha: str
    committer_time: int
    parents: tuple = ()


@dataclass(frozen=True)
class Description:
    """
    Position of a described reference relative to its nearest version tag.

    Attributes:
        root: Repository top-level directory
        is_clean: True if the working tree had no local modifications
        ref: Reference being described (normally HEAD)
        tag: Nearest version tag reachable from ref, or None
        distance: Commits walked between ref and tag; only meaningful
            when tag is present
    """

    root: str
    is_clean: bool
    ref: GitRef
    tag: Optional[VersionTag] = None
    distance: int = 0

    @property
    def has_tag(self) -> bool:
        return self.tag is not None

    @property
    def is_exact(self) -> bool:
        """True if ref is itself the tagged commit."""
        return self.tag is not None and self.distance == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'root': self.root,
            'clean': self.is_clean,
            'ref': self.ref.to_dict(),
            'tag': self.tag.to_dict() if self.tag else None,
            'distance': self.distance if self.tag else None,
        }
