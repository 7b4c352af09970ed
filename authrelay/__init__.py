"""OAuth2 login relay for GitHub and Google."""

__version__ = "0.1.0"
