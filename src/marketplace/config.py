"""Checkout configuration.

Settings that used to be process-wide globals (estimator credentials and
endpoint) live on an explicit ``CheckoutConfig`` handed to the checkout
engine. Without an API key the delivery estimator is never called and every
checkout falls back to the random 15-45 minute window.
"""

import os
from dataclasses import dataclass

# Estimates above this many hours are treated as garbage from the estimator
MAX_ESTIMATE_HOURS = 72.0

FALLBACK_MIN_MINUTES = 15
FALLBACK_MAX_MINUTES = 45


@dataclass(frozen=True)
class CheckoutConfig:
    estimator_api_key: str | None = None
    estimator_url: str = "https://delivery-estimator.example.com/v1/estimates"
    estimator_timeout: float = 5.0
    # Threads available for estimator calls; a call that outlives its timeout
    # keeps its thread until the adapter's own timeout ends it
    estimator_workers: int = 8
    max_estimate_hours: float = MAX_ESTIMATE_HOURS
    fallback_min_minutes: int = FALLBACK_MIN_MINUTES
    fallback_max_minutes: int = FALLBACK_MAX_MINUTES

    @property
    def estimator_enabled(self) -> bool:
        return bool(self.estimator_api_key)

    @classmethod
    def from_env(cls) -> "CheckoutConfig":
        """Build the configuration from ``DELIVERY_ESTIMATOR_*`` variables."""
        defaults = cls()
        timeout = os.environ.get("DELIVERY_ESTIMATOR_TIMEOUT")
        workers = os.environ.get("DELIVERY_ESTIMATOR_WORKERS")
        return cls(
            estimator_api_key=os.environ.get("DELIVERY_ESTIMATOR_API_KEY") or None,
            estimator_url=os.environ.get("DELIVERY_ESTIMATOR_URL", defaults.estimator_url),
            estimator_timeout=float(timeout) if timeout else defaults.estimator_timeout,
            estimator_workers=int(workers) if workers else defaults.estimator_workers,
        )
