import click
import json

from ..cli_utils import get_config, handle_errors
from ..config import get_config_path


@click.group("config")
def config_cmd():
    """Configuration commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.pass_context
def show_config(ctx, pretty):
    """Show the current configuration with all merges applied."""
    config = get_config(ctx)
    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command("path")
@handle_errors
def config_path():
    """Show the config file path being used, if any."""
    path = get_config_path()
    print(json.dumps({"config_path": str(path) if path else None}))
