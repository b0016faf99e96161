#!/usr/bin/env python3

import click

from tagbuild.cli_utils import handle_errors
from tagbuild.config import load_config, configure_logging
from tagbuild.infra.git_client import GitClient
from tagbuild.commands.describe import describe_cmd, version_cmd
from tagbuild.commands.archive import archive_cmd, ls_tree_cmd
from tagbuild.commands.package import package_name_cmd
from tagbuild.commands.config import config_cmd


@click.group()
@click.version_option(package_name='tagbuild')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr')
@click.pass_context
@handle_errors
def cli(ctx, verbose):
    """tagbuild - Versions and source archives from git tags.

    Derives a semantic version for the working tree from its nearest
    annotated version tag, and builds reproducible tar.gz or zip archives
    of the files tracked by that tag.
    """
    config = load_config()
    configure_logging(config, verbose=verbose)
    ctx.obj = {
        'config': config,
        'git': GitClient(timeout=int(config['git'].get('timeout', 60))),
    }


cli.add_command(describe_cmd)
cli.add_command(version_cmd)
cli.add_command(ls_tree_cmd)
cli.add_command(archive_cmd)
cli.add_command(package_name_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
