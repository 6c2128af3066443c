"""Best-effort delivery time for a freshly placed order.

The estimator is called only when every input is present and its answer is
accepted only when it is a plausible number of hours. Every other outcome
falls back to a random whole number of minutes. Nothing here raises: the
order has already been committed by the time an estimate is requested.
"""

import math
import random
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass

from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.config import CheckoutConfig
from marketplace.delivery.port import DeliveryEstimator
from marketplace.errors import EstimatorUnavailable
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryEstimate:
    minutes: int
    source: str  # "estimator" or "fallback"
    reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def describe(self) -> str:
        return f"{self.minutes} minutes"


class DeliveryTimeEstimator:
    def __init__(self, config: CheckoutConfig, estimator: DeliveryEstimator | None, rng: random.Random | None = None):
        self.config = config
        self.estimator = estimator
        self.rng = rng or random.Random()
        # Slow calls are abandoned, not cancelled, so they run off the caller's thread
        self._executor = ThreadPoolExecutor(
            max_workers=config.estimator_workers,
            thread_name_prefix="delivery-estimator",
        )

    def estimate_for(self, order) -> DeliveryEstimate:
        if not self.config.estimator_enabled or self.estimator is None:
            return self._fallback(order, "estimator not configured")

        accounts = current_domain.repository_for(Account)

        customer_address = accounts.address_of(order.customer_id)
        if not customer_address:
            return self._fallback(order, "customer has no address")

        store_addresses = []
        for store_id in order.store_ids:
            address = accounts.address_of(store_id)
            if address and address not in store_addresses:
                store_addresses.append(address)
        if not store_addresses:
            return self._fallback(order, "no store address resolvable")

        timeout = self.config.estimator_timeout
        future = self._executor.submit(self.estimator.estimate, store_addresses, customer_address, timeout)
        try:
            hours = future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            return self._fallback(order, "estimator timed out")
        except EstimatorUnavailable as exc:
            return self._fallback(order, f"estimator unavailable: {exc}")
        except Exception as exc:
            logger.exception("Delivery estimator raised unexpectedly", order_id=str(order.id))
            return self._fallback(order, f"estimator error: {exc.__class__.__name__}")

        if not self._is_plausible(hours):
            return self._fallback(order, f"estimate out of range: {hours!r}")

        minutes = max(1, round(hours * 60))
        logger.info(
            "Delivery estimate received",
            order_id=str(order.id),
            hours=hours,
            minutes=minutes,
            stores=len(store_addresses),
        )
        return DeliveryEstimate(minutes=minutes, source="estimator")

    def _is_plausible(self, hours) -> bool:
        if isinstance(hours, bool) or not isinstance(hours, (int, float)):
            return False
        if not math.isfinite(hours):
            return False
        return 0 < hours <= self.config.max_estimate_hours

    def _fallback(self, order, reason: str) -> DeliveryEstimate:
        minutes = self.rng.randint(self.config.fallback_min_minutes, self.config.fallback_max_minutes)
        logger.warning(
            "Using fallback delivery estimate",
            order_id=str(order.id),
            reason=reason,
            minutes=minutes,
        )
        return DeliveryEstimate(minutes=minutes, source="fallback", reason=reason)
