"""
Archive service for tagbuild.

Builds tar+gzip and zip archives from a list of paths. The list normally
comes from the nearest tag's tree; the bytes come from the live filesystem
under the repository root, so an archive matches the tag only when HEAD is
the tag and the working tree is clean.

Entries are written one at a time, in list order, with at most one source
file open at once. The first failing entry aborts the whole archive.
"""

import gzip
import logging
import os
import shutil
import stat
import tarfile
import time
import zipfile
from typing import BinaryIO, Iterable, List, Optional, Sequence, Union

from ..domain.archive import ArchiveEntry, ArchiveFormat, EntryKind, ListingStatus
from ..domain.description import Description
from ..exit_codes import ArchiveEntryError, NoVersionTagError, TagNotAtHeadError, TreeListingError
from ..infra.git_client import GitClient
from .describe_service import git_describe
from .tree_service import list_tree_entries

logger = logging.getLogger(__name__)

# Range of timestamps a zip local header can hold.
ZIP_MIN_DATE_TIME = (1980, 1, 1, 0, 0, 0)
ZIP_MAX_DATE_TIME = (2107, 12, 31, 23, 59, 59)


def entry_kind(mode: int) -> EntryKind:
    """Classify an lstat mode."""
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    return EntryKind.OTHER


def _lstat(full_path: str, path: str) -> os.stat_result:
    try:
        return os.lstat(full_path)
    except OSError as e:
        raise ArchiveEntryError(path, f"while getting information for file {path}: {e}") from e


def _open_source(full_path: str, path: str) -> BinaryIO:
    try:
        return open(full_path, 'rb')
    except OSError as e:
        raise ArchiveEntryError(path, f"while opening file {path}: {e}") from e


def _read_link(full_path: str, path: str) -> str:
    try:
        return os.readlink(full_path)
    except OSError as e:
        raise ArchiveEntryError(path, f"while reading symlink {path}: {e}") from e


def add_entry_to_tar(tar: tarfile.TarFile, prefix: str, path: str, root: str = ".") -> ArchiveEntry:
    """
    Append one path to a tar archive.

    The header is built from the path's own lstat result: symlinks become
    symlink headers, directories get a trailing slash, and only regular
    files carry a body.
    """
    full_path = os.path.join(root, path)
    st = _lstat(full_path, path)
    entry = ArchiveEntry.create(prefix, path, entry_kind(st.st_mode))

    # Without remembered inodes every regular file gets its own body
    # instead of a hard-link header pointing at an earlier entry.
    tar.inodes.clear()
    try:
        info = tar.gettarinfo(name=full_path, arcname=entry.destination)
    except OSError as e:
        raise ArchiveEntryError(path, f"while getting tar header for file {path}: {e}") from e
    if info is None:
        raise ArchiveEntryError(path, f"while getting tar header for file {path}: unsupported file type")

    if entry.kind is EntryKind.FILE and info.isreg():
        with _open_source(full_path, path) as source:
            try:
                tar.addfile(info, source)
            except OSError as e:
                raise ArchiveEntryError(path, f"while copying file {path} to tar: {e}") from e
    else:
        try:
            tar.addfile(info)
        except OSError as e:
            raise ArchiveEntryError(path, f"while writing tar header for file {path}: {e}") from e

    return entry


def _zip_date_time(mtime: float) -> tuple:
    date_time = time.localtime(mtime)[:6]
    return min(max(date_time, ZIP_MIN_DATE_TIME), ZIP_MAX_DATE_TIME)


def add_entry_to_zip(zf: zipfile.ZipFile, prefix: str, path: str, root: str = ".") -> ArchiveEntry:
    """
    Append one path to a zip archive.

    Zip has no symlink header, so a symlink is stored as an entry whose body
    is the link target. Other non-regular files get an empty body.
    """
    full_path = os.path.join(root, path)
    st = _lstat(full_path, path)
    entry = ArchiveEntry.create(prefix, path, entry_kind(st.st_mode))

    zinfo = zipfile.ZipInfo(entry.destination, date_time=_zip_date_time(st.st_mtime))
    zinfo.external_attr = (st.st_mode & 0xFFFF) << 16
    zinfo.compress_type = zipfile.ZIP_DEFLATED

    try:
        if entry.kind is EntryKind.DIRECTORY:
            # Directory entries hold no data; zipfile stores them uncompressed.
            zinfo.external_attr |= 0x10
            zinfo.compress_type = zipfile.ZIP_STORED
            zf.writestr(zinfo, b"")
        elif entry.kind is EntryKind.FILE:
            with _open_source(full_path, path) as source:
                with zf.open(zinfo, 'w', force_zip64=st.st_size > zipfile.ZIP64_LIMIT) as dest:
                    shutil.copyfileobj(source, dest)
        else:
            data = b""
            if entry.kind is EntryKind.SYMLINK:
                data = os.fsencode(_read_link(full_path, path))
            zf.writestr(zinfo, data)
    except (OSError, UnicodeEncodeError) as e:
        raise ArchiveEntryError(path, f"while copying file {path} to zip archive: {e}") from e

    return entry


def write_tgz_archive(sink: BinaryIO, prefix: str, paths: Iterable[str], root: str = ".") -> int:
    """
    Write a gzip-compressed tar archive to sink.

    The tar layer is closed before the gzip layer on every exit path.

    Returns:
        Number of entries written
    """
    count = 0
    with gzip.GzipFile(filename="", mode="wb", fileobj=sink, mtime=0) as gz:
        # TarFile.__exit__ skips close() on error, which would drop the
        # end-of-archive blocks.
        tar = tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT)
        try:
            for path in paths:
                try:
                    add_entry_to_tar(tar, prefix, path, root)
                except ArchiveEntryError as e:
                    raise ArchiveEntryError(path, f"while adding file {path} to tar archive: {e}") from e
                count += 1
        finally:
            tar.close()
    return count


def write_zip_archive(sink: BinaryIO, prefix: str, paths: Iterable[str], root: str = ".") -> int:
    """
    Write a zip archive to sink.

    Returns:
        Number of entries written
    """
    count = 0
    with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in paths:
            try:
                add_entry_to_zip(zf, prefix, path, root)
            except ArchiveEntryError as e:
                raise ArchiveEntryError(path, f"while adding file {path} to zip archive: {e}") from e
            count += 1
    return count


def write_archive(
    sink: BinaryIO,
    fmt: Union[ArchiveFormat, str],
    prefix: str,
    paths: Iterable[str],
    root: str = "."
) -> int:
    """
    Write a complete archive of paths to sink.

    Args:
        sink: Binary stream owned by this call until it returns
        fmt: ArchiveFormat or its name ("tgz", "tar.gz", "zip")
        prefix: Directory every entry is placed under (e.g., "proj-1.0")
        paths: Paths relative to root
        root: Build root the paths are read from

    Returns:
        Number of entries written

    Raises:
        ArchiveEntryError: On the first entry that cannot be added; sink
            then holds an incomplete archive and must be discarded
    """
    if isinstance(fmt, str):
        fmt = ArchiveFormat.parse(fmt)

    if fmt is ArchiveFormat.TGZ:
        return write_tgz_archive(sink, prefix, paths, root)
    return write_zip_archive(sink, prefix, paths, root)


class GitArchive:
    """
    Archive of the files tracked by the tag HEAD sits on.

    Example:
        archive = GitArchive.from_description("myproj-1.2.3")
        with open("myproj-1.2.3.tar.gz", "wb") as f:
            archive.create(ArchiveFormat.TGZ, f, extra_paths=["build/VERSION"])
    """

    def __init__(
        self,
        description: Description,
        prefix: str,
        git_client: Optional[GitClient] = None,
        strict_listing: bool = True
    ):
        self.description = description
        self.prefix = prefix
        self.git = git_client or GitClient()
        self.strict_listing = strict_listing

    @classmethod
    def from_description(
        cls,
        prefix: str,
        description: Optional[Description] = None,
        git_client: Optional[GitClient] = None,
        strict_listing: bool = True
    ) -> 'GitArchive':
        """
        Create an archive builder after checking HEAD is exactly a tag.

        Args:
            prefix: Directory every entry is placed under
            description: Description to use (process-wide one if None)
            git_client: GitClient instance (creates new if None)
            strict_listing: Fail if the tag tree cannot be read

        Raises:
            NoVersionTagError: If there is no version tag
            TagNotAtHeadError: If HEAD is past the nearest tag
        """
        if description is None:
            description = git_describe(git_client=git_client)

        if description.tag is None:
            raise NoVersionTagError("no tag found to create archive from")
        if description.distance > 0:
            raise TagNotAtHeadError(description.tag.name)

        if not description.is_clean:
            logger.warning(
                f"Working tree has local modifications; archive content for "
                f"{description.tag.name} is read from the working tree"
            )

        return cls(description, prefix, git_client=git_client, strict_listing=strict_listing)

    def entries(self) -> List[str]:
        """
        Paths of the tag's tree.

        Raises:
            TreeListingError: If the tree is unreadable and listing is strict
        """
        listing = list_tree_entries(self.description, self.git)
        if listing.status is ListingStatus.UNREADABLE:
            if self.strict_listing:
                raise TreeListingError(f"while listing tree of tag {self.description.tag.name}: {listing.error}")
            logger.warning("Continuing without tracked files")
        return list(listing.entries)

    def create(self, fmt: Union[ArchiveFormat, str], sink: BinaryIO, extra_paths: Sequence[str] = ()) -> int:
        """
        Write the archive: tracked files first, then extra_paths.

        Extra paths are relative to the repository root.

        Returns:
            Number of entries written
        """
        paths = self.entries() + list(extra_paths)
        count = write_archive(sink, fmt, self.prefix, paths, root=self.description.root)
        logger.info(f"Wrote {count} entries under {self.prefix}")
        return count
