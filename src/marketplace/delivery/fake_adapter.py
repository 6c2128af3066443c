"""Fake delivery estimator — deterministic estimates for testing and development."""

import time

from marketplace.delivery.port import DeliveryEstimator
from marketplace.errors import EstimatorUnavailable


class FakeDeliveryEstimator(DeliveryEstimator):
    """Fake estimator that answers one hour by default."""

    def __init__(self):
        self.hours = 1.0
        self.should_succeed = True
        self.delay = 0.0
        self.calls = []

    def configure(self, hours=1.0, should_succeed: bool = True, delay: float = 0.0):
        """Configure the fake estimator behavior for testing.

        ``hours`` is returned verbatim, so out-of-range or non-numeric values
        can be used to exercise the caller's validation. ``delay`` sleeps
        before answering to simulate a slow service.
        """
        self.hours = hours
        self.should_succeed = should_succeed
        self.delay = delay

    def estimate(self, store_addresses, customer_address, timeout):
        self.calls.append(
            {
                "store_addresses": list(store_addresses),
                "customer_address": customer_address,
                "timeout": timeout,
            }
        )
        if self.delay:
            time.sleep(self.delay)
        if not self.should_succeed:
            raise EstimatorUnavailable("Fake estimator configured to fail")
        return self.hours
