"""GitHub and Google OAuth adapters using Authlib."""

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client

from authrelay.auth.mapping import (
    github_profile,
    google_profile,
    map_github_profile,
    map_google_profile,
)
from authrelay.auth.models import Provider, ProviderProfile, UserRecord
from authrelay.config import Settings
from authrelay.constants import (
    GITHUB_AUTHORIZE_URL,
    GITHUB_EMAILS_URL,
    GITHUB_SCOPES,
    GITHUB_TOKEN_URL,
    GITHUB_USER_URL,
    GOOGLE_AUTHORIZE_URL,
    GOOGLE_SCOPES,
    GOOGLE_TOKEN_URL,
    GOOGLE_USER_URL,
    HTTPX_TIMEOUT,
)
from authrelay.exceptions import ProviderExchangeError

logger = logging.getLogger(__name__)

ProfileMapper = Callable[[ProviderProfile, str | None], UserRecord]


class OAuthProvider:
    """Authorization-code flow against one identity provider.

    Subclasses supply the endpoints, scopes, and how the profile is fetched;
    the mapping to a user record is a plain function.
    """

    provider: Provider
    authorize_url: str
    token_url: str
    scopes: tuple[str, ...]
    mapper: ProfileMapper

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport

    @property
    def name(self) -> str:
        return self.provider.value

    @property
    def configured(self) -> bool:
        """Check that both client credentials are present."""
        return bool(self.client_id and self.client_secret)

    def authorization_params(self) -> dict[str, str]:
        return {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
        }

    def authorization_url(self) -> str:
        """Consent screen URL the browser is sent to."""
        return f"{self.authorize_url}?{urlencode(self.authorization_params())}"

    def _client(self) -> AsyncOAuth2Client:
        kwargs: dict[str, Any] = {"timeout": HTTPX_TIMEOUT}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return AsyncOAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            token_endpoint_auth_method="client_secret_post",
            **kwargs,
        )

    async def fetch_profile(self, code: str) -> tuple[ProviderProfile, str]:
        """Exchange the authorization code and load the user's profile.

        Returns:
            The provider profile and the raw access token.

        Raises:
            ProviderExchangeError: token exchange or profile fetch failed.
            ProfileMappingError: the profile payload could not be read.
        """
        try:
            async with self._client() as client:
                token = await client.fetch_token(self.token_url, code=code)
                access_token = token.get("access_token")
                if not access_token:
                    raise ProviderExchangeError(self.name, "no access token received")
                profile = await self._load_profile(client)
        except AuthlibBaseError as e:
            raise ProviderExchangeError(self.name, f"OAuth error: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderExchangeError(self.name, f"HTTP error: {e}") from e
        except ValueError as e:
            # Undecodable JSON from the provider
            raise ProviderExchangeError(self.name, f"invalid response: {e}") from e
        return profile, access_token

    async def _load_profile(self, client: AsyncOAuth2Client) -> ProviderProfile:
        raise NotImplementedError

    def map_profile(self, profile: ProviderProfile, access_token: str | None = None) -> UserRecord:
        return self.mapper(profile, access_token)

    async def authenticate(self, code: str) -> UserRecord:
        """Run the whole callback half of the flow for ``code``."""
        profile, access_token = await self.fetch_profile(code)
        user = self.map_profile(profile, access_token)
        logger.info(f"Authenticated {self.name} user {user.login} (id={user.id})")
        return user


class GitHubProvider(OAuthProvider):
    """GitHub OAuth app."""

    provider = Provider.GITHUB
    authorize_url = GITHUB_AUTHORIZE_URL
    token_url = GITHUB_TOKEN_URL
    scopes = GITHUB_SCOPES
    mapper = staticmethod(map_github_profile)

    async def _load_profile(self, client: AsyncOAuth2Client) -> ProviderProfile:
        headers = {"Accept": "application/vnd.github+json"}
        user_response = await client.get(GITHUB_USER_URL, headers=headers)
        user_response.raise_for_status()

        # Private addresses need user:email; fall back to the public one
        emails = None
        emails_response = await client.get(GITHUB_EMAILS_URL, headers=headers)
        if emails_response.status_code == 200:
            emails = emails_response.json()
        else:
            logger.warning(
                f"GitHub emails lookup failed with status {emails_response.status_code}"
            )

        return github_profile(user_response.json(), emails)


class GoogleProvider(OAuthProvider):
    """Google OAuth client."""

    provider = Provider.GOOGLE
    authorize_url = GOOGLE_AUTHORIZE_URL
    token_url = GOOGLE_TOKEN_URL
    scopes = GOOGLE_SCOPES
    mapper = staticmethod(map_google_profile)

    async def _load_profile(self, client: AsyncOAuth2Client) -> ProviderProfile:
        response = await client.get(GOOGLE_USER_URL)
        response.raise_for_status()
        return google_profile(response.json())


def build_providers(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, OAuthProvider]:
    """Create one adapter per provider from the application settings."""
    providers: list[OAuthProvider] = [
        GitHubProvider(
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            redirect_uri=settings.github_callback_url,
            transport=transport,
        ),
        GoogleProvider(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_callback_url,
            transport=transport,
        ),
    ]
    return {p.name: p for p in providers}
