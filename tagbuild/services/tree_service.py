"""
Tree listing for tagbuild.

Enumerates the paths recorded in the nearest tag's tree.
"""

import logging
from typing import Optional

from ..domain.archive import ListingStatus, TreeListing
from ..domain.description import Description
from ..exit_codes import GitCommandError
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)


def list_tree_entries(description: Description, git_client: Optional[GitClient] = None) -> TreeListing:
    """
    List every file and directory path in the tag's tree.

    Args:
        description: Result of describing HEAD
        git_client: GitClient instance (creates new if None)

    Returns:
        TreeListing with status OK and the paths in depth-first tree order,
        NO_TAG if there is no tag, or UNREADABLE if the tree could not be
        read. Read failures are reported in the result, never raised.
    """
    if description.tag is None:
        return TreeListing(status=ListingStatus.NO_TAG)

    git = git_client or GitClient()
    try:
        entries = git.tree_entries(description.root, description.tag.sha)
    except GitCommandError as e:
        logger.warning(f"Could not read tree of tag {description.tag.name}: {e}")
        return TreeListing(status=ListingStatus.UNREADABLE, error=str(e))

    return TreeListing(status=ListingStatus.OK, entries=tuple(entries))
