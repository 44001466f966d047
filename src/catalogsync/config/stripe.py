"""Stripe configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

STRIPE_BASE_URL = "https://api.stripe.com/v1/"
STRIPE_FILES_BASE_URL = "https://files.stripe.com/v1/"
STRIPE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class StripeConfig:
    """Holds Stripe API configuration values."""

    secret_key: str
    resilience: ResilienceConfig
    files_base_url: str = STRIPE_FILES_BASE_URL
    api_version: str | None = None


def get_stripe_config(*, resilience: ResilienceConfig | None = None) -> StripeConfig:
    values = require_env_vars(("STRIPE_SECRET_KEY",))
    return StripeConfig(
        secret_key=values["STRIPE_SECRET_KEY"],
        api_version=optional_env_var("STRIPE_API_VERSION"),
        resilience=resilience
        or ResilienceConfig(
            name="stripe",
            base_url=STRIPE_BASE_URL,
            timeout_seconds=STRIPE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        ),
    )
