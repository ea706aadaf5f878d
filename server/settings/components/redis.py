"""Redis session store settings."""

from server.settings.components import config

# Holds `auth_<token>` -> user id entries
SESSION_STORE_URL = config('REDIS_URL', default='redis://localhost:6379/0')

# Session token lifetime: 24 hours
AUTH_TOKEN_TTL = config('AUTH_TOKEN_TTL', cast=int, default=24 * 60 * 60)
