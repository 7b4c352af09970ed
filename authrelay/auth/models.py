"""Authentication-related Pydantic models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """Identity providers the relay can log in with."""

    GITHUB = "github"
    GOOGLE = "google"


# ============== Provider profiles ==============


class ProfileEmail(BaseModel):
    """One email entry of a provider profile."""

    value: str
    verified: bool | None = None
    primary: bool | None = None


class ProfilePhoto(BaseModel):
    """One photo entry of a provider profile."""

    value: str


class ProviderProfile(BaseModel):
    """Identity profile returned by a provider, before normalization.

    Accepts both the camelCase keys of a Passport-style profile
    (``displayName``, ``profileUrl``, ``_json``) and snake_case names.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    emails: list[ProfileEmail] = Field(default_factory=list)
    photos: list[ProfilePhoto] = Field(default_factory=list)
    profile_url: str | None = Field(default=None, alias="profileUrl")
    raw: dict[str, Any] = Field(default_factory=dict, alias="_json")


# ============== User records ==============


class UserRecord(BaseModel):
    """Normalized user stored in the session and handed to the front-end."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    provider: Provider
    access_token: str | None = Field(default=None, alias="accessToken")

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready dict, omitting the token when there is none."""
        exclude = {"access_token"} if self.access_token is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class GitHubUserRecord(UserRecord):
    """GitHub user with the public profile extras."""

    provider: Provider = Provider.GITHUB
    html_url: str | None = None
    bio: str | None = None
    location: str | None = None
    public_repos: int | None = None
    followers: int | None = None
    following: int | None = None
    created_at: str | None = None


class GoogleUserRecord(UserRecord):
    """Google user; carries the verification flag of its email."""

    provider: Provider = Provider.GOOGLE
    verified_email: bool | None = None
