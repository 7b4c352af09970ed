"""Normalization of provider profiles into user records.

Everything here is pure: no HTTP, no session. The adapters in
``authrelay.auth.oauth`` feed these functions with what the providers return.
"""

from typing import Any

from pydantic import ValidationError

from authrelay.auth.models import (
    GitHubUserRecord,
    GoogleUserRecord,
    Provider,
    ProviderProfile,
)
from authrelay.exceptions import ProfileMappingError


# ============== Raw API payloads -> profiles ==============


def github_profile(
    user_json: dict[str, Any],
    emails_json: list[dict[str, Any]] | None = None,
) -> ProviderProfile:
    """Build a profile from GitHub's ``/user`` and ``/user/emails`` payloads.

    The primary address goes first. Without an emails listing, the public
    ``email`` field of the user payload is used.
    """
    emails: list[dict[str, Any]] = []
    if emails_json:
        ordered = sorted(emails_json, key=lambda e: not e.get("primary", False))
        emails = [
            {
                "value": e["email"],
                "verified": e.get("verified"),
                "primary": e.get("primary"),
            }
            for e in ordered
            if e.get("email")
        ]
    elif user_json.get("email"):
        emails = [{"value": user_json["email"]}]

    photos = [{"value": user_json["avatar_url"]}] if user_json.get("avatar_url") else []

    try:
        return ProviderProfile(
            id=str(user_json["id"]),
            username=user_json.get("login"),
            display_name=user_json.get("name"),
            emails=emails,
            photos=photos,
            profile_url=user_json.get("html_url"),
            raw=user_json,
        )
    except (KeyError, ValidationError) as e:
        raise ProfileMappingError(Provider.GITHUB.value, f"unreadable profile: {e}") from e


def google_profile(userinfo: dict[str, Any]) -> ProviderProfile:
    """Build a profile from Google's OpenID ``userinfo`` payload."""
    emails = []
    if userinfo.get("email"):
        emails.append({"value": userinfo["email"], "verified": userinfo.get("email_verified")})

    photos = [{"value": userinfo["picture"]}] if userinfo.get("picture") else []

    try:
        return ProviderProfile(
            id=str(userinfo["sub"]),
            display_name=userinfo.get("name"),
            emails=emails,
            photos=photos,
            raw=userinfo,
        )
    except (KeyError, ValidationError) as e:
        raise ProfileMappingError(Provider.GOOGLE.value, f"unreadable profile: {e}") from e


# ============== Profiles -> user records ==============


def map_github_profile(
    profile: ProviderProfile,
    access_token: str | None = None,
) -> GitHubUserRecord:
    """Map a GitHub profile to a user record."""
    if not profile.username:
        raise ProfileMappingError(Provider.GITHUB.value, "profile has no username")

    extras = profile.raw
    try:
        return GitHubUserRecord(
            id=profile.id,
            login=profile.username,
            name=profile.display_name,
            email=profile.emails[0].value if profile.emails else None,
            avatar_url=profile.photos[0].value if profile.photos else None,
            html_url=profile.profile_url,
            bio=extras.get("bio"),
            location=extras.get("location"),
            public_repos=extras.get("public_repos"),
            followers=extras.get("followers"),
            following=extras.get("following"),
            created_at=extras.get("created_at"),
            access_token=access_token,
        )
    except ValidationError as e:
        raise ProfileMappingError(Provider.GITHUB.value, f"malformed profile: {e}") from e


def map_google_profile(
    profile: ProviderProfile,
    access_token: str | None = None,
) -> GoogleUserRecord:
    """Map a Google profile to a user record.

    Google accounts have no username, so ``login`` is the local part of the
    first email. A profile without any email cannot be mapped.
    """
    if not profile.emails:
        raise ProfileMappingError(Provider.GOOGLE.value, "profile has no email address")

    email = profile.emails[0]
    try:
        return GoogleUserRecord(
            id=profile.id,
            login=email.value.split("@")[0],
            name=profile.display_name,
            email=email.value,
            avatar_url=profile.photos[0].value if profile.photos else None,
            verified_email=email.verified,
            access_token=access_token,
        )
    except ValidationError as e:
        raise ProfileMappingError(Provider.GOOGLE.value, f"malformed profile: {e}") from e
