"""Main CLI entry point for vipps-login."""

import os

import typer
from rich.console import Console

from vipps_login.cli.commands import config, oauth
from vipps_login.cli.presenters.login import LoginPresenter
from vipps_login.core.config import ClientSchema, load_env_var
from vipps_login.core.logging import configure_logging
from vipps_login.core.oauth import ProviderError

app = typer.Typer(
    name="vipps-login",
    help="Vipps Login CLI - check configuration and drive the OAuth flow",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(config.app, name="config", help="Configuration management")

app.command("pkce")(oauth.pkce)
app.command("authorize-url")(oauth.authorize_url)
app.command("exchange")(oauth.exchange)
app.command("refresh")(oauth.refresh)
app.command("userinfo")(oauth.userinfo)


@app.command()
def version() -> None:
    """Show version information."""
    from vipps_login import __version__

    console = Console()
    console.print(f"[bold cyan]vipps-login[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Vipps Login CLI."""
    if verbose:
        configure_logging("DEBUG")
        return

    try:
        level = load_env_var(ClientSchema.LOG_LEVEL, os.environ)
    except ProviderError as e:
        LoginPresenter(Console()).present_error(e, title="Configuration Error")
        raise typer.Exit(1) from e
    configure_logging(level)


if __name__ == "__main__":
    app()
