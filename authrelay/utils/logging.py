"""Logging setup for the relay.

Log lines never carry credential values: ``setup_logging`` installs a filter
that masks the configured client secrets and the session secret wherever they
show up in a message (an exception text echoing a token request, for example).
"""

import logging
import sys
from typing import Literal

from authrelay.config import Settings

REDACTED = "***"


def secret_values(settings: Settings) -> list[str]:
    """Credential values that must not appear in logs."""
    values = [
        settings.session_secret,
        settings.github_client_secret,
        settings.google_client_secret,
        settings.rapidapi_key,
    ]
    return [v for v in values if v]


class RedactSecretsFilter(logging.Filter):
    """Mask known secret values in log records."""

    def __init__(self, secrets: list[str]) -> None:
        super().__init__()
        # Longest first so a secret containing another is masked whole
        self.secrets = sorted(set(secrets), key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    settings: Settings,
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None,
) -> None:
    """Configure root logging to stdout.

    Args:
        settings: Application settings; pick the default level and the
            values to redact
        level: Override log level (default: DEBUG for development, INFO otherwise)
    """
    if level is None:
        level = "DEBUG" if settings.is_development else "INFO"

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactSecretsFilter(secret_values(settings)))

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Token exchanges log full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("authlib").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class LogContext(logging.LoggerAdapter):
    """Logger that prefixes every message with ``[key=value]`` pairs.

    Used by the login flow to tag lines with the provider name.
    """

    def __init__(self, logger: logging.Logger, **context: str) -> None:
        super().__init__(logger, context)
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def process(self, msg, kwargs):
        return f"{self.prefix} {msg}", kwargs
