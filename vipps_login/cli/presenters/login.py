"""Presenters for login results and failures in the CLI."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vipps_login.core.oauth import OAuthAttemptState, PkceParams, ProviderError, TokenResponse, UserInfo


def _reveal(value: str | None, show_secrets: bool) -> str:
    if not value:
        return "-"
    if show_secrets:
        return value
    return f"{value[:6]}… ({len(value)} chars)"


class LoginPresenter:
    """Render login artefacts with Rich.

    Tokens and verifiers are truncated unless ``show_secrets`` is set.
    """

    def __init__(self, console: Console | None = None, show_secrets: bool = False):
        self.console = console or Console()
        self.show_secrets = show_secrets

    def present_pkce(self, pkce: PkceParams) -> None:
        table = Table(title="PKCE Parameters")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        # A freshly generated verifier is only useful if shown in full
        table.add_row("code_verifier", pkce.code_verifier)
        table.add_row("code_challenge", pkce.code_challenge)
        table.add_row("code_challenge_method", pkce.code_challenge_method)
        self.console.print(table)

    def present_attempt(self, attempt: OAuthAttemptState, url: str) -> None:
        table = Table(title="Login Attempt")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("state", attempt.state)
        table.add_row("code_verifier", attempt.code_verifier)
        table.add_row("redirect_uri", attempt.redirect_uri)
        table.add_row("scope", attempt.scope)
        table.add_row("expires_at", attempt.expires_at.isoformat())
        self.console.print(table)
        self.console.print()
        self.console.print(
            Panel(url, title="Authorization URL", border_style="cyan", expand=False)
        )

    def present_tokens(self, tokens: TokenResponse) -> None:
        table = Table(title="Token Response")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("access_token", _reveal(tokens.access_token, self.show_secrets))
        table.add_row("token_type", tokens.token_type)
        table.add_row("expires_in", str(tokens.expires_in))
        table.add_row("expires_at", tokens.expires_at().isoformat())
        table.add_row("refresh_token", _reveal(tokens.refresh_token, self.show_secrets))
        table.add_row("scope", tokens.scope or "-")
        table.add_row("id_token", _reveal(tokens.id_token, self.show_secrets))
        self.console.print(table)

    def present_user_info(self, user: UserInfo) -> None:
        table = Table(title=f"User Info: {user.display_name}")
        table.add_column("Claim", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("sub", user.sub)
        for claim in ("name", "email", "phone_number", "birthdate"):
            value = getattr(user, claim)
            if value:
                table.add_row(claim, value)
        if user.email_verified is not None:
            table.add_row("email_verified", "yes" if user.email_verified else "no")
        if user.address and user.address.formatted:
            table.add_row("address", user.address.formatted)
        self.console.print(table)

    def present_error(self, error: ProviderError, title: str = "Vipps Login Error") -> None:
        lines = [
            f"[red]{escape(error.user_message)}[/red]",
            "",
            f"Category: {error.category.value}",
            f"Details: {escape(error.message)}",
        ]
        if error.status_code is not None:
            lines.append(f"HTTP status: {error.status_code}")
        self.console.print(Panel("\n".join(lines), title=title, border_style="red"))


__all__ = ["LoginPresenter"]
