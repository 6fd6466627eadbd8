"""
Client constants.
"""

# Session storage keys, shared with the mobile app's storage layout
TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
USER_ID_KEY = "userId"
USER_EMAIL_KEY = "userEmail"
USER_NAME_KEY = "userName"

SESSION_KEYS = (
    TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_ID_KEY,
    USER_EMAIL_KEY,
    USER_NAME_KEY,
)

# Endpoint paths, relative to the configured API base URL
AUTH_LOGIN_PATH = "/auth/login"
AUTH_REGISTER_PATH = "/auth/register"
AUTH_REFRESH_PATH = "/auth/refresh"
ACCOUNTS_PATH = "/accounts"
CASHFLOW_PATH = "/accounts/cashflow"
TRANSACTIONS_PATH = "/transactions"

# HTTP
AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"
DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# A request that got a 401 is refreshed and re-issued at most this many times
MAX_AUTH_RETRIES = 1

# Dashboard
DEFAULT_RECENT_TRANSACTIONS = 5

# Validation constants
MAX_NOTES_LENGTH = 500
DEFAULT_CURRENCY = "USD"
