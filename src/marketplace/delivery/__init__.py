"""Delivery estimator abstraction — pluggable third-party estimate integration."""

import os

_estimator_instance = None


def get_estimator(config=None):
    """Return the configured delivery estimator adapter (singleton).

    Uses FakeDeliveryEstimator by default. Set ``DELIVERY_ESTIMATOR=http`` to
    call the remote estimator described by ``config`` (a ``CheckoutConfig``).
    """
    global _estimator_instance
    if _estimator_instance is None:
        adapter = os.environ.get("DELIVERY_ESTIMATOR", "fake")
        if adapter == "fake":
            from marketplace.delivery.fake_adapter import FakeDeliveryEstimator

            _estimator_instance = FakeDeliveryEstimator()
        elif adapter == "http":
            from marketplace.config import CheckoutConfig
            from marketplace.delivery.http_adapter import HttpDeliveryEstimator

            config = config or CheckoutConfig.from_env()
            _estimator_instance = HttpDeliveryEstimator(
                url=config.estimator_url,
                api_key=config.estimator_api_key,
            )
        else:
            raise ValueError(f"Unknown delivery estimator adapter: {adapter}")
    return _estimator_instance


def set_estimator(estimator):
    """Replace the estimator singleton (useful for testing)."""
    global _estimator_instance
    _estimator_instance = estimator


def reset_estimator():
    """Reset the estimator singleton (useful for testing)."""
    global _estimator_instance
    _estimator_instance = None
