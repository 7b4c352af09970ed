"""Application constants - centralized configuration values."""

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0

# =============================================================================
# Session & Security
# =============================================================================
SESSION_MAX_AGE = 24 * 60 * 60  # 24 hours, fixed from login
SESSION_COOKIE_NAME = "authrelay_session"
SESSION_ID_KEY = "sid"
SESSION_PURGE_INTERVAL = 60 * 60  # 1 hour

# =============================================================================
# GitHub OAuth
# =============================================================================
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"
GITHUB_EMAILS_URL = "https://api.github.com/user/emails"
GITHUB_SCOPES = ("user:email", "read:user")

# =============================================================================
# Google OAuth
# =============================================================================
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USER_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_SCOPES = ("profile", "email")

# =============================================================================
# Diagnostics
# =============================================================================
# Reported as "Set" / "Not set" by /api/test and at startup, never echoed.
REPORTED_ENV_VARS = (
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "RAPIDAPI_KEY",
)
