"""
Package naming command for tagbuild.
"""

from pathlib import Path

import click

from ..cli_utils import get_config, get_git_client, handle_errors
from ..services.describe_service import git_describe
from ..services.package_service import ARCHITECTURES, PackageFormat, package_target
from ..services.version_service import synthesize_version


@click.command('package-name')
@click.option('-f', '--format', 'fmt', type=click.Choice([f.value for f in PackageFormat]),
              help='Package format (default: from config)')
@click.option('-a', '--arch', type=click.Choice(sorted(ARCHITECTURES)),
              help='Target architecture (default: from config)')
@click.option('-n', '--name', help='Package name (default: from config or repository name)')
@click.pass_context
@handle_errors
def package_name_cmd(ctx, fmt, arch, name):
    """Print the file name a deb or rpm package of HEAD would get.

    Examples:

    \b
        tagbuild package-name -f deb -a amd64
        tagbuild package-name -f rpm -a arm64
    """
    config = get_config(ctx)
    section = config['package']

    description = git_describe(git_client=get_git_client(ctx))
    version = str(synthesize_version(description))

    click.echo(package_target(
        name or section.get('name') or Path(description.root).name,
        version,
        section.get('release', '1'),
        arch or section.get('arch', 'amd64'),
        fmt or section.get('format', 'deb'),
    ))
