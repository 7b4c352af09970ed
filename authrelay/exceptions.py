"""Exceptions raised along the login flow."""


class AuthRelayError(Exception):
    """Base exception for authentication relay errors."""


class ProviderExchangeError(AuthRelayError):
    """Code exchange or profile fetch against the provider failed."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProfileMappingError(AuthRelayError):
    """Provider profile lacks a field the user record requires."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class SessionError(AuthRelayError):
    """Session store could not complete an operation."""


class NotAuthenticatedError(AuthRelayError):
    """No user record is attached to the request's session."""
