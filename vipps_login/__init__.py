"""Vipps Login

Server-side OAuth 2.0 Authorization Code + PKCE client for Vipps Login.
"""

from dotenv import load_dotenv

# Load environment variables from .env file (never overrides the environment)
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("vipps-login")
except PackageNotFoundError:
    # Running from a source checkout without an install
    __version__ = "0.0.0"
__author__ = "Vipps Login"
