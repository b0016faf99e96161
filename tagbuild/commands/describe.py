"""
Describe and version commands for tagbuild.
"""

import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..cli_utils import get_git_client, handle_errors
from ..domain.description import Description
from ..services.describe_service import git_describe
from ..services.version_service import synthesize_version

console = Console()


@click.command('describe')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
@click.pass_context
@handle_errors
def describe_cmd(ctx, json_output):
    """Show the nearest version tag and distance of HEAD.

    Examples:

    \b
        tagbuild describe
        tagbuild describe --json
    """
    description = git_describe(git_client=get_git_client(ctx))

    if json_output:
        print(json.dumps(description.to_dict()))
    else:
        show_description(description)


def show_description(description: Description):
    """Render a Description as a rich panel."""
    text = Text()
    text.append("Ref: ", style="bold cyan")
    text.append(f"{description.ref.name} ", style="bold white")
    text.append(f"({description.ref.commit[:12]})\n", style="dim")
    text.append("Tag: ", style="bold cyan")
    if description.tag is None:
        text.append("none\n", style="yellow")
    else:
        text.append(f"{description.tag.name}", style="bold white")
        if description.distance == 0:
            text.append(" (exact)\n", style="green")
        else:
            text.append(f" (+{description.distance} commits)\n", style="yellow")
    text.append("Working tree: ", style="bold cyan")
    if description.is_clean:
        text.append("clean", style="green")
    else:
        text.append("modified", style="yellow")

    console.print(Panel(text, title=description.root, border_style="cyan"))


@click.command('version')
@click.pass_context
@handle_errors
def version_cmd(ctx):
    """Print the semantic version of HEAD.

    HEAD exactly at a tag prints the tag's version. Commits past a tag get
    a pre-release such as 1.2.4-alpha.4.devel.3.
    """
    description = git_describe(git_client=get_git_client(ctx))
    click.echo(str(synthesize_version(description)))
