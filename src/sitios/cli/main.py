"""Main Typer application for Sitios."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sitios.cli.errorhandler import handle_cli_errors
from sitios.config import Discipline, SitiosSettings, load_settings, load_site_file
from sitios.database.site_store import SiteStore
from sitios.generation.session import generate as run_generation
from sitios.logging_setup import configure_logging
from sitios.onboarding.wizard import OnboardingWizard
from sitios.plugins.registry import default_registry
from sitios.provisioning.publish import Publisher
from sitios.trello.client import TrelloClient

app = typer.Typer(
    name="sitios",
    help="Static sites generated from Trello lists, URLs and other content sources",
    add_completion=False,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to sitios.toml (default: searched upward from the current directory)"),
]
DebugOption = Annotated[bool, typer.Option("--debug", help="Show full tracebacks on errors")]


@app.callback()
def main(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level (default: $SITIOS_LOG_LEVEL or INFO)")
    ] = None,
) -> None:
    """Configure logging for every command."""
    configure_logging(log_level)


def _settings(config: Path | None) -> SitiosSettings:
    return load_settings(config)


@app.command()
def generate(
    site_file: Annotated[Path, typer.Argument(help="YAML/JSON file with the site's globals and sources")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Directory the site is generated into")],
    *,
    source_dir: Annotated[
        Path | None,
        typer.Option("--source-dir", help="Directory static assets are copied from (default: next to the site file)"),
    ] = None,
    discipline: Annotated[
        Discipline | None,
        typer.Option("--discipline", case_sensitive=False, help="Run sources one by one or all at once"),
    ] = None,
    postprocess: Annotated[
        bool | None,
        typer.Option("--postprocess/--no-postprocess", help="Write the error page after the sources ran"),
    ] = None,
    config: ConfigOption = None,
    debug: DebugOption = False,
) -> None:
    """Generate a static site from a site file."""
    with handle_cli_errors(debug=debug):
        settings = _settings(config).generation
        globals_, sources = load_site_file(site_file)

        outcome = run_generation(
            globals_,
            sources,
            target_dir=output,
            source_dir=source_dir or site_file.resolve().parent,
            registry=default_registry(),
            discipline=discipline or settings.discipline,
            max_workers=settings.max_workers,
            postprocess=settings.postprocess if postprocess is None else postprocess,
            static_extensions=settings.static_extensions,
        )

    for skipped in outcome.skipped:
        console.print(f"[yellow]Skipped[/yellow] {skipped.root}: no plugin for '{skipped.provider}'")
    console.print(
        f"[green]Generated {outcome.page_count} page(s) from {len(outcome.processed)} source(s) into {output}[/green]"
    )


@app.command()
def plugins() -> None:
    """List the source providers this installation can generate from."""
    table = Table(title="🔌 Source plugins")
    table.add_column("Provider", style="cyan")
    table.add_column("Plugin", style="green")
    table.add_column("Version", justify="right")
    for provider, meta in default_registry().list_plugins():
        table.add_row(provider, meta["name"], meta["version"])
    console.print(table)


@app.command()
def publish(
    site_id: Annotated[int, typer.Argument(help="Id of the stored site")],
    owner: Annotated[str, typer.Option("--owner", help="Owner of the site (e.g. 'alice@trello')")],
    *,
    config: ConfigOption = None,
    debug: DebugOption = False,
) -> None:
    """Generate a stored site and deploy it."""
    with handle_cli_errors(debug=debug):
        settings = _settings(config)
        with SiteStore(settings.service.database_path) as store:
            site = store.fetch_site(owner, site_id)
        destination = Publisher(settings).publish(site)
    console.print(f"[green]Published {site.domain} to {destination}[/green]")


@app.command()
def serve(
    *,
    host: Annotated[str | None, typer.Option("--host", help="Interface to bind")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Port to listen on")] = None,
    config: ConfigOption = None,
    debug: DebugOption = False,
) -> None:
    """Run the provisioning API."""
    import uvicorn

    from sitios.provisioning.api import create_app

    with handle_cli_errors(debug=debug):
        settings = _settings(config)
        api = create_app(settings)
    uvicorn.run(
        api,
        host=host or settings.service.host,
        port=port or settings.service.port,
        log_config=None,
    )


def _choose(items: list[dict], label: str) -> dict:
    for index, item in enumerate(items, start=1):
        star = " ★" if item.get("starred") else ""
        console.print(f"  [cyan]{index}[/cyan]. {item.get('name', item.get('id'))}{star}")
    while True:
        choice = typer.prompt(f"Which {label}?", type=int)
        if 1 <= choice <= len(items):
            return items[choice - 1]
        console.print(f"[red]Pick a number between 1 and {len(items)}.[/red]")


@app.command()
def onboard(
    *,
    service_url: Annotated[
        str, typer.Option("--service-url", help="Base URL of the provisioning API")
    ] = "http://127.0.0.1:8000",
    api_key: Annotated[
        str | None, typer.Option("--api-key", help="Trello application key (default: trello.api_key setting)")
    ] = None,
    config: ConfigOption = None,
    debug: DebugOption = False,
) -> None:
    """Create a blog from one of your Trello lists, step by step."""
    with handle_cli_errors(debug=debug):
        settings = _settings(config)
        key = api_key or settings.trello.api_key
        if not key:
            console.print("[red]A Trello application key is required (--api-key or SITIOS_TRELLO__API_KEY).[/red]")
            raise typer.Exit(1)

        with (
            TrelloClient(key, timeout=settings.trello.timeout) as trello,
            httpx.Client(base_url=service_url, timeout=settings.trello.timeout * 4) as service,
        ):
            wizard = OnboardingWizard(trello, service, settings.service.main_hostname)
            console.print(
                Panel(
                    "You're 3 steps away from a blog made of a Trello list.\n\n"
                    f"Authorize sitios on Trello and paste the token below:\n[cyan]{wizard.authorize_url()}[/cyan]",
                    title="🗂️ Trello onboarding",
                )
            )
            boards = wizard.authorize(typer.prompt("Token", hide_input=True))
            if not boards:
                console.print("[yellow]No open boards found on this account.[/yellow]")
                raise typer.Exit(1)

            lists = wizard.choose_board(_choose(boards, "board holds the list")["id"])
            if not lists:
                console.print("[yellow]This board has no open lists.[/yellow]")
                raise typer.Exit(1)

            console.print("Wait, we're building your site...")
            site = wizard.choose_list(_choose(lists, "list")["id"])

    console.print(
        Panel(
            f"Your site was built and is waiting for you on [cyan]https://{site['domain']}[/cyan].",
            title="✅ Done",
            border_style="green",
        )
    )
