"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console

from sitios.config.exceptions import ConfigError
from sitios.database.exceptions import DatabaseError
from sitios.generation.exceptions import GenerationError, SourceFailedError
from sitios.onboarding.exceptions import OnboardingError
from sitios.provisioning.exceptions import ProvisioningError
from sitios.trello.exceptions import TrelloError

console = Console()


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise with the full traceback. If False, print a
            user-friendly error and exit with status 1.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit, typer.Abort):
        raise
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]⚙️ Configuration Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except SourceFailedError as e:
        if debug:
            raise
        console.print(f"[bold red]🔌 Source Failed:[/bold red] {e}")
        if e.__cause__ is not None:
            console.print(f"  caused by: {e.__cause__}")
        raise typer.Exit(1) from e
    except GenerationError as e:
        if debug:
            raise
        console.print(f"[bold red]🏗️ Generation Failed:[/bold red] {e}")
        raise typer.Exit(1) from e
    except DatabaseError as e:
        if debug:
            raise
        console.print(f"[bold red]🗄️ Database Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except TrelloError as e:
        if debug:
            raise
        console.print(f"[bold red]📋 Trello Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except OnboardingError as e:
        if debug:
            raise
        console.print(f"[bold red]🚪 Onboarding Failed:[/bold red] {e}")
        raise typer.Exit(1) from e
    except ProvisioningError as e:
        if debug:
            raise
        console.print(f"[bold red]🚀 Publish Failed:[/bold red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(1) from e

        console.print(f"[bold red]💥 An unexpected error occurred:[/bold red] {e}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(1) from e
