"""Hand-off of login results to the front-end through a redirect URL."""

import json
from urllib.parse import quote

from authrelay.auth.models import UserRecord

# Characters encodeURIComponent leaves alone besides the alphanumerics and "-_."
_URI_COMPONENT_SAFE = "!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_success_redirect(frontend_url: str, record: UserRecord) -> str:
    """URL carrying the user record as compact, URL-encoded JSON.

    No size limit is applied; very long profiles produce very long URLs.
    """
    payload = json.dumps(record.to_payload(), separators=(",", ":"), ensure_ascii=False)
    return f"{frontend_url.rstrip('/')}/?auth=success&user={encode_uri_component(payload)}"


def build_error_redirect(frontend_url: str) -> str:
    return f"{frontend_url.rstrip('/')}/?auth=error"
