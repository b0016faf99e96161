"""
Service layer for tagbuild.

Contains the logic that orchestrates domain objects and infrastructure:
- Describer / git_describe: Nearest version tag and commit distance
- synthesize_version: Semantic version for a Description
- list_tree_entries: Paths recorded in the tag's tree
- GitArchive / write_archive: tar+gzip and zip assembly
- package_target: Package file naming for external packagers

Services are the primary API for commands to use.
"""

from .describe_service import (
    Describer,
    OnceCell,
    git_describe,
    iter_commits_by_committer_time,
    reset_git_description,
    select_version_tags,
    walk_to_nearest_tag,
)
from .version_service import synthesize_version, version_string
from .tree_service import list_tree_entries
from .archive_service import GitArchive, write_archive
from .package_service import PackageFormat, package_arch, package_target

__all__ = [
    'Describer',
    'OnceCell',
    'git_describe',
    'iter_commits_by_committer_time',
    'reset_git_description',
    'select_version_tags',
    'walk_to_nearest_tag',
    'synthesize_version',
    'version_string',
    'list_tree_entries',
    'GitArchive',
    'write_archive',
    'PackageFormat',
    'package_arch',
    'package_target',
]
