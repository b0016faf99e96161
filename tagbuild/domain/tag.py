"""
Version tag domain object for tagbuild.

A version tag is an annotated git tag whose name is a one-character marker
(conventionally "v") followed by a semantic version:

    v1.2.3          -> 1.2.3
    v0.4.0-beta.2   -> 0.4.0-beta.2
    release         -> not a version tag

Only annotated tags are version tags; lightweight tags carry no tag object
and are never represented here.
"""

from dataclasses import dataclass
from typing import Optional

import semver

# Number of leading characters stripped from a tag name before parsing.
MARKER_LENGTH = 1


def version_part(name: str) -> Optional[str]:
    """
    Return the portion of a tag name that should hold the version.

    Exactly one leading character is stripped. Names too short to hold
    anything after the marker return None instead of an empty string.
    """
    if len(name) <= MARKER_LENGTH:
        return None
    return name[MARKER_LENGTH:]


def parse_tag_version(name: str) -> Optional[semver.Version]:
    """
    Parse a tag name into a semantic version.

    Args:
        name: Short tag name (e.g., "v1.2.3")

    Returns:
        Parsed version, or None if the name is not a version tag
    """
    text = version_part(name)
    if text is None:
        return None
    try:
        return semver.Version.parse(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class VersionTag:
    """
    An annotated tag object.

    Attributes:
        name: Name recorded in the tag object (e.g., "v1.2.3")
        sha: Hash of the tag object itself
        target: Hash of the object the tag points at (normally a commit)
        target_type: Type of the target object ("commit", "tree", ...)
        tagger: Tagger line, if any
        message: Tag message
    """

    name: str
    sha: str
    target: str
    target_type: str = "commit"
    tagger: str = ""
    message: str = ""

    @property
    def version(self) -> Optional[semver.Version]:
        return parse_tag_version(self.name)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'sha': self.sha,
            'target': self.target,
            'target_type': self.target_type,
            'tagger': self.tagger,
            'message': self.message,
        }

    def __str__(self) -> str:
        return self.name
