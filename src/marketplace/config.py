"""Application settings read from the environment.

Protean's own configuration (providers, brokers) lives in ``domain.toml``;
these are the knobs the marketplace code reads directly.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

_DEVELOPMENT_SECRET = "marketplace-development-secret"


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    access_token_secret: str = _DEVELOPMENT_SECRET
    access_token_algorithm: str = "HS256"
    order_number_prefix: str = "ORD"
    order_number_attempts: int = 5
    conflict_retries: int = 2
    default_page_size: int = 50
    max_page_size: int = 200


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    environment = _environment()
    secret = os.getenv("ACCESS_TOKEN_SECRET")
    if not secret:
        if environment in ("staging", "production"):
            raise RuntimeError("ACCESS_TOKEN_SECRET must be set in staging and production")
        secret = _DEVELOPMENT_SECRET

    return Settings(
        environment=environment,
        access_token_secret=secret,
        access_token_algorithm=os.getenv("ACCESS_TOKEN_ALGORITHM", "HS256"),
        order_number_prefix=os.getenv("ORDER_NUMBER_PREFIX", "ORD"),
        order_number_attempts=int(os.getenv("ORDER_NUMBER_ATTEMPTS", "5")),
        conflict_retries=int(os.getenv("CONFLICT_RETRIES", "2")),
        default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "50")),
        max_page_size=int(os.getenv("MAX_PAGE_SIZE", "200")),
    )
