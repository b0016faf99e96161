"""
tagbuild - Versions and source archives from git tags.

tagbuild answers two questions for a release pipeline:

    * what version is this exact working tree?
    * what files belong to the tag HEAD is on?

Quick Start:
    import tagbuild

    # Describe HEAD (computed once per process, then cached)
    description = tagbuild.git_describe()
    print(description.tag, description.distance, description.is_clean)

    # Version string: "1.2.3" at a tag, "1.2.4-alpha.4.devel.3" past it
    print(tagbuild.synthesize_version(description))

    # Archive of the tagged tree (HEAD must be exactly the tag)
    archive = tagbuild.GitArchive.from_description("myproj-1.2.3")
    with open("myproj-1.2.3.tar.gz", "wb") as f:
        archive.create(tagbuild.ArchiveFormat.TGZ, f)

Domain Objects:
    Description - Nearest version tag, distance and cleanliness of a ref
    VersionTag - Annotated tag whose name holds a semantic version
    ArchiveFormat - tar.gz or zip
    TreeListing - Result of listing a tag's tree
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    ArchiveEntry,
    ArchiveFormat,
    Description,
    EntryKind,
    GitRef,
    ListingStatus,
    TreeListing,
    VersionTag,
)

# Services
from .services import (
    Describer,
    GitArchive,
    PackageFormat,
    git_describe,
    list_tree_entries,
    package_target,
    reset_git_description,
    synthesize_version,
    write_archive,
)

# Errors
from .exit_codes import (
    ArchiveEntryError,
    ArchiveError,
    CommandError,
    ConfigError,
    GitCommandError,
    NoVersionTagError,
    PackageError,
    RepositoryError,
    TagNotAtHeadError,
    TreeListingError,
)

# Configuration
from .config import load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "ArchiveEntry",
    "ArchiveFormat",
    "Description",
    "EntryKind",
    "GitRef",
    "ListingStatus",
    "TreeListing",
    "VersionTag",
    # Services
    "Describer",
    "GitArchive",
    "PackageFormat",
    "git_describe",
    "list_tree_entries",
    "package_target",
    "reset_git_description",
    "synthesize_version",
    "write_archive",
    # Errors
    "ArchiveEntryError",
    "ArchiveError",
    "CommandError",
    "ConfigError",
    "GitCommandError",
    "NoVersionTagError",
    "PackageError",
    "RepositoryError",
    "TagNotAtHeadError",
    "TreeListingError",
    # Configuration
    "load_config",
]
