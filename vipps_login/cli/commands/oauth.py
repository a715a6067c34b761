"""OAuth commands for the vipps-login CLI.

These drive the same library calls a web application makes, which is
useful for checking credentials against the test environment.
"""

import os
from collections.abc import Callable
from typing import TypeVar

import typer
from rich.console import Console

from vipps_login.cli.presenters.login import LoginPresenter
from vipps_login.core.config import load_client_settings, load_config
from vipps_login.core.logging import attempt_context
from vipps_login.core.oauth import (
    ProviderClient,
    ProviderError,
    begin_attempt,
    generate_pkce,
    generate_state,
)
from vipps_login.core.oauth.constants import AuthorizationDefaults, PkceProtocol

T = TypeVar("T")


def _run(presenter: LoginPresenter, action: Callable[[ProviderClient], T]) -> T:
    """Build a client from the environment and run ``action`` with it."""
    try:
        config = load_config(os.environ)
        settings = load_client_settings(os.environ)
        with ProviderClient(config, settings) as client:
            return action(client)
    except ProviderError as e:
        presenter.present_error(e)
        raise typer.Exit(1) from None


def pkce(
    length: int = typer.Option(
        PkceProtocol.CODE_VERIFIER_DEFAULT_LENGTH, "--length", "-l", help="Verifier length (43-128)"
    ),
) -> None:
    """Generate a PKCE code verifier and S256 challenge.

    Example:
        vipps-login pkce --length 64
    """
    presenter = LoginPresenter(Console())
    try:
        params = generate_pkce(length)
    except ProviderError as e:
        presenter.present_error(e, title="PKCE Error")
        raise typer.Exit(1) from None
    presenter.present_pkce(params)


def authorize_url(
    scope: str = typer.Option(AuthorizationDefaults.SCOPE, "--scope", "-s", help="Requested scopes"),
    login_hint: str = typer.Option(None, "--login-hint", help="Prefill the user's phone number"),
) -> None:
    """Start a login attempt and print its authorization URL.

    Keep the printed code_verifier: `exchange` needs it after the callback.

    Example:
        vipps-login authorize-url --scope "openid name email phoneNumber"
    """
    presenter = LoginPresenter(Console())
    try:
        config = load_config(os.environ)
        attempt, url = begin_attempt(config, scope=scope, login_hint=login_hint)
    except ProviderError as e:
        presenter.present_error(e, title="Configuration Error")
        raise typer.Exit(1) from None
    presenter.present_attempt(attempt, url)


def exchange(
    code: str = typer.Argument(..., help="Authorization code from the callback"),
    verifier: str = typer.Option(..., "--verifier", help="PKCE code verifier of the attempt"),
    redirect_uri: str = typer.Option(
        None, "--redirect-uri", help="Redirect URI (defaults to PROVIDER_REDIRECT_URI)"
    ),
    state: str = typer.Option(None, "--state", help="State of the attempt, used to tag log lines"),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Print tokens in full"),
) -> None:
    """Exchange an authorization code for tokens.

    Example:
        vipps-login exchange <code> --verifier <code_verifier>
    """
    presenter = LoginPresenter(Console(), show_secrets=show_secrets)

    def action(client: ProviderClient) -> None:
        with attempt_context(state or generate_state()):
            tokens = client.exchange_code(
                code, verifier, redirect_uri or client.config.redirect_uri
            )
        presenter.present_tokens(tokens)

    _run(presenter, action)


def refresh(
    refresh_token: str = typer.Argument(..., help="Refresh token"),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Print tokens in full"),
) -> None:
    """Obtain new tokens with a refresh token."""
    presenter = LoginPresenter(Console(), show_secrets=show_secrets)
    _run(presenter, lambda client: presenter.present_tokens(client.refresh_token(refresh_token)))


def userinfo(
    access_token: str = typer.Argument(..., help="Access token"),
) -> None:
    """Fetch the user profile for an access token."""
    presenter = LoginPresenter(Console())
    _run(presenter, lambda client: presenter.present_user_info(client.get_user_info(access_token)))
