"""
Version synthesis for tagbuild.

Turns a Description into a semantic version:

    at tag v1.2.3                 -> 1.2.3
    3 commits past v1.2.3         -> 1.2.4-alpha.4.devel.3
    2 commits past v0.1.2-alpha.1 -> 0.1.2-alpha.1.devel.2

A tag without a pre-release is treated as the start of the next patch
release: the patch number is bumped and reused as the alpha number. The
trailing devel.N identifier is numeric, so builds further from the same tag
always sort higher.
"""

from typing import Optional

import semver

from ..domain.description import Description
from ..domain.tag import version_part
from ..exit_codes import NoVersionTagError


def synthesize_version(description: Description) -> semver.Version:
    """
    Compute the semantic version of the described reference.

    Args:
        description: Result of describing HEAD

    Returns:
        The tag's version when distance is zero, otherwise a pre-release
        version derived from it

    Raises:
        NoVersionTagError: If no version tag was found
        ValueError: If the tag object's own name is not a valid version
    """
    if description.tag is None:
        raise NoVersionTagError()

    text = version_part(description.tag.name)
    if text is None:
        raise ValueError(f"tag {description.tag.name!r} does not hold a version")
    v = semver.Version.parse(text)

    if description.distance > 0:
        prerelease: Optional[str] = v.prerelease
        if not prerelease:
            v = v.replace(patch=v.patch + 1)
            prerelease = f"alpha.{v.patch}"
        v = v.replace(prerelease=f"{prerelease}.devel.{description.distance}")

    return v


def version_string(description: Description) -> str:
    """String form of synthesize_version(), as consumed by packaging steps."""
    return str(synthesize_version(description))
