"""Request-scoped dependencies shared by the marketplace routers."""

from fastapi import Header, HTTPException

from marketplace.checkout.engine import CheckoutEngine

_engine = None


def current_customer(x_customer_id: str = Header(default="")) -> str:
    """Identity of the authenticated caller, set by the upstream auth gateway."""
    if not x_customer_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_customer_id.strip()


def get_checkout_engine() -> CheckoutEngine:
    """Return the process-wide checkout engine, built from the environment on first use."""
    global _engine
    if _engine is None:
        _engine = CheckoutEngine()
    return _engine
