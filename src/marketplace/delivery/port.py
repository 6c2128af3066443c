"""Delivery estimator port — abstract interface for delivery time estimates.

Checkout programs against this port; adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod


class DeliveryEstimator(ABC):
    """Abstract interface for delivery estimator adapters."""

    @abstractmethod
    def estimate(self, store_addresses: list[str], customer_address: str, timeout: float) -> float:
        """Estimate how long delivery from the stores to the customer takes.

        Returns:
            The estimate in hours. Range checking is the caller's job.

        Raises:
            EstimatorUnavailable: on transport errors or an unreadable response.
        """
        ...
