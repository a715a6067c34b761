"""Configuration commands for the vipps-login CLI."""

import os

import typer
from rich.console import Console
from rich.table import Table

from vipps_login.cli.presenters.login import LoginPresenter
from vipps_login.core.config import describe_config, load_client_settings, load_config
from vipps_login.core.config.schema import generate_markdown_docs
from vipps_login.core.oauth import ProviderError

app = typer.Typer(help="Configuration management")


@app.command()
def check() -> None:
    """Validate provider configuration from the environment.

    Secrets are masked in the output.

    Example:
        vipps-login config check
    """
    console = Console()

    try:
        config = load_config(os.environ)
        settings = load_client_settings(os.environ)
    except ProviderError as e:
        LoginPresenter(console).present_error(e, title="Configuration Error")
        raise typer.Exit(1) from None

    table = Table(title="Vipps Login Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")

    for name, label, value in describe_config(config):
        table.add_row(name, label, value)

    table.add_row("", "Authorize endpoint", config.endpoints.authorize)
    table.add_row("", "Token endpoint", config.endpoints.token)
    table.add_row("", "User-info endpoint", config.endpoints.userinfo)
    table.add_row("PROVIDER_HTTP_TIMEOUT", "HTTP Timeout", f"{settings.timeout:g}s")
    table.add_row("PROVIDER_HTTP_RETRIES", "HTTP Retries", str(settings.retries))
    table.add_row("PROVIDER_RETRY_DELAY", "Retry Delay", f"{settings.retry_delay:g}s")

    console.print(table)
    console.print("[green]✅ Configuration is valid[/green]")


@app.command()
def docs() -> None:
    """Print Markdown documentation for all environment variables."""
    typer.echo(generate_markdown_docs())
