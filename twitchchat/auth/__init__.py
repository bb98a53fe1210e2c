"""Authentication provider interface and token adapter."""

from .provider import AuthenticationProvider, StaticTokenProvider  # noqa: F401

__all__ = ["AuthenticationProvider", "StaticTokenProvider"]
