"""Application constants - centralized configuration values."""

# =============================================================================
# Session & Security
# =============================================================================
SESSION_TIMEOUT_DAYS = 7
SESSION_COOKIE_NAME = "coral_auth_session"
SESSION_USER_KEY = "user_id"
MIN_SECRET_KEY_LENGTH = 32

# =============================================================================
# Debug namespaces (DEBUG env var)
# =============================================================================
DEBUG_NAMESPACE_DB = "coral-auth:db"

# =============================================================================
# Database pool (ignored for SQLite)
# =============================================================================
DB_POOL_SIZE = 10
DB_MAX_OVERFLOW = 20
DB_POOL_TIMEOUT = 30
DB_POOL_RECYCLE = 1800  # 30 minutes

# =============================================================================
# Login rejection reasons
# =============================================================================
REASON_USER_NOT_FOUND = "user not found"
REASON_USER_DISABLED = "user disabled"
REASON_INCORRECT_CREDENTIALS = "Incorrect email/password combination"
REASON_MISSING_CREDENTIALS = "Missing credentials"

# =============================================================================
# Strategies
# =============================================================================
STRATEGY_LOCAL = "local"
PROVIDER_FACEBOOK = "facebook"
PROVIDER_TWITTER = "twitter"
PROVIDER_GOOGLE = "google"

# =============================================================================
# External API URLs
# =============================================================================
FACEBOOK_GRAPH_URL = "https://graph.facebook.com/v19.0/"
FACEBOOK_AUTHORIZE_URL = "https://www.facebook.com/v19.0/dialog/oauth"
TWITTER_API_BASE_URL = "https://api.twitter.com/1.1/"
TWITTER_REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token"
TWITTER_ACCESS_TOKEN_URL = "https://api.twitter.com/oauth/access_token"
TWITTER_AUTHORIZE_URL = "https://api.twitter.com/oauth/authenticate"
GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0
