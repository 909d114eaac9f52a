from .router import router
from .service import (
    STATE_KEY,
    TokenEndpointError,
    TokenEndpointTimeout,
    exchange_code_for_tokens,
    generate_random_string,
    refresh_access_token,
)

__all__ = [
    "router",
    "STATE_KEY",
    "TokenEndpointError",
    "TokenEndpointTimeout",
    "exchange_code_for_tokens",
    "generate_random_string",
    "refresh_access_token",
]
