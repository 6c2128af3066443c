"""HTTP delivery estimator — calls the third-party estimate service over httpx."""

import httpx

from marketplace.delivery.port import DeliveryEstimator
from marketplace.errors import EstimatorUnavailable
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class HttpDeliveryEstimator(DeliveryEstimator):
    """POSTs ``{"origins": [...], "destination": "..."}`` and reads ``{"hours": n}``."""

    def __init__(self, url: str, api_key: str | None, client: httpx.Client | None = None):
        self.url = url
        self.api_key = api_key
        self._client = client or httpx.Client()

    def estimate(self, store_addresses, customer_address, timeout):
        try:
            response = self._client.post(
                self.url,
                json={"origins": list(store_addresses), "destination": customer_address},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Delivery estimator request failed", url=self.url, error=str(exc))
            raise EstimatorUnavailable(str(exc)) from exc
        except ValueError as exc:
            raise EstimatorUnavailable("Delivery estimator returned invalid JSON") from exc

        hours = payload.get("hours") if isinstance(payload, dict) else None
        if isinstance(hours, bool) or not isinstance(hours, (int, float)):
            raise EstimatorUnavailable("Delivery estimator response has no numeric 'hours'")
        return float(hours)
