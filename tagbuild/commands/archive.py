"""
Archive and tree listing commands for tagbuild.
"""

import json
import os
from pathlib import Path

import click

from ..cli_utils import get_config, get_git_client, handle_errors
from ..domain.archive import ArchiveFormat
from ..exit_codes import ArchiveError, ConfigError, TreeListingError
from ..services.archive_service import GitArchive
from ..services.describe_service import git_describe
from ..services.tree_service import list_tree_entries
from ..services.version_service import synthesize_version


def default_prefix(config, description) -> str:
    """Expand the configured prefix template for a description."""
    name = config['package'].get('name') or Path(description.root).name
    template = config['archive'].get('prefix', '{name}-{version}')
    try:
        return template.format(name=name, version=synthesize_version(description))
    except (KeyError, IndexError) as e:
        raise ConfigError(f"invalid archive prefix template {template!r}: {e}") from e


def relative_to_root(path: str, root: str) -> str:
    """Express a command-line path relative to the repository root."""
    return os.path.relpath(os.path.abspath(path), root)


@click.command('archive')
@click.argument('extra', nargs=-1, type=click.Path(exists=False))
@click.option('-f', '--format', 'fmt', type=click.Choice(['tgz', 'tar.gz', 'zip']),
              help='Archive format (default: from config)')
@click.option('-p', '--prefix', help='Directory inside the archive (default: NAME-VERSION)')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Output file')
@click.pass_context
@handle_errors
def archive_cmd(ctx, extra, fmt, prefix, output):
    """Build a source archive of the tag HEAD is on.

    EXTRA: Additional files to include (e.g., generated artifacts)

    Fails before writing anything unless HEAD is exactly a version tag.

    Examples:

    \b
        tagbuild archive
        tagbuild archive -f zip -o dist/src.zip
        tagbuild archive build/VERSION build/CHANGELOG
    """
    config = get_config(ctx)
    git = get_git_client(ctx)

    description = git_describe(git_client=git)
    try:
        archive_format = ArchiveFormat.parse(fmt or config['archive']['format'])
    except ValueError as e:
        raise ConfigError(str(e)) from e

    # Preconditions are checked before the default prefix needs a version.
    archive = GitArchive.from_description(
        prefix or "",
        description=description,
        git_client=git,
        strict_listing=bool(config['archive'].get('strict_listing', True))
    )
    if prefix is None:
        archive.prefix = default_prefix(config, description)

    output = output or f"{archive.prefix}{archive_format.extension}"
    extra_paths = [relative_to_root(p, description.root) for p in extra]

    try:
        sink = open(output, 'wb')
    except OSError as e:
        raise ArchiveError(f"while creating {output}: {e}") from e

    # A partially written archive is removed on failure.
    try:
        with sink:
            count = archive.create(archive_format, sink, extra_paths=extra_paths)
    except BaseException:
        os.remove(output)
        raise

    click.echo(f"Wrote {output} ({count} entries)", err=True)


@click.command('ls-tree')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
@click.pass_context
@handle_errors
def ls_tree_cmd(ctx, json_output):
    """List the files recorded in the nearest tag's tree."""
    git = get_git_client(ctx)
    description = git_describe(git_client=git)
    listing = list_tree_entries(description, git)

    if json_output:
        print(json.dumps({
            'status': listing.status.value,
            'tag': description.tag.name if description.tag else None,
            'entries': list(listing.entries),
            'error': listing.error,
        }))
        return

    if not listing.ok and listing.error:
        raise TreeListingError(listing.error)
    for entry in listing:
        click.echo(entry)
