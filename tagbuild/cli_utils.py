"""
Common CLI utilities and decorators for consistent command behavior.
"""

import sys
import click
from functools import wraps
from typing import Any, Dict

from rich.console import Console

from .exit_codes import INTERRUPTED, CommandError, get_exit_code_for_exception
from .infra.git_client import GitClient

err_console = Console(stderr=True)


def handle_errors(func):
    """
    Decorator that provides standard error behavior:
    - CommandError subclasses exit with their own exit code
    - Ctrl+C exits with INTERRUPTED
    - Any other exception is reported and mapped to an exit code

    Messages go to stderr so stdout only ever carries command output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            err_console.print("[red]Interrupted by user[/red]")
            sys.exit(INTERRUPTED)
        except CommandError as e:
            err_console.print(f"[red]Error:[/red] {e}", highlight=False)
            sys.exit(e.exit_code)
        except Exception as e:
            err_console.print(f"[red]Command failed:[/red] {e}", highlight=False)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def get_config(ctx: click.Context) -> Dict[str, Any]:
    """Configuration loaded by the top-level group."""
    return ctx.find_root().obj['config']


def get_git_client(ctx: click.Context) -> GitClient:
    """GitClient built from the `git` config section."""
    return ctx.find_root().obj['git']
