"""Application settings stored as key/value rows."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..domain.errors import normalize_currency_code
from ..logging_config import get_logger

logger = get_logger("services.settings")

DISPLAY_CURRENCY_KEY = "display_currency"
SUBSCRIPTION_STATUS_KEY = "subscription_status"
SUBSCRIPTION_RENEWAL_KEY = "subscription_renewal_date"

FREE_PLAN = "free"


def get_display_currency(uow, default: str) -> str:
    setting = uow.settings.get(DISPLAY_CURRENCY_KEY)
    return setting.value if setting and setting.value else default


def set_display_currency(uow, code: str) -> str:
    currency = normalize_currency_code(code)
    uow.settings.set(DISPLAY_CURRENCY_KEY, currency, "Primary display currency")
    logger.info("Display currency changed", extra={"currency": currency})
    return currency


def subscription(uow) -> dict[str, Optional[str]]:
    status = uow.settings.get(SUBSCRIPTION_STATUS_KEY)
    renewal = uow.settings.get(SUBSCRIPTION_RENEWAL_KEY)
    return {
        "status": status.value if status and status.value else FREE_PLAN,
        "renewal_date": renewal.value if renewal else None,
    }


def set_subscription(uow, status: str, renewal_date: Optional[date] = None) -> dict[str, Optional[str]]:
    uow.settings.set(SUBSCRIPTION_STATUS_KEY, status, "Subscription plan")
    uow.settings.set(
        SUBSCRIPTION_RENEWAL_KEY,
        renewal_date.isoformat() if renewal_date else None,
        "Subscription renewal date",
    )
    return subscription(uow)


def ensure_defaults(uow, display_currency: str) -> None:
    """Seed settings rows that do not exist yet."""

    if uow.settings.get(DISPLAY_CURRENCY_KEY) is None:
        uow.settings.set(DISPLAY_CURRENCY_KEY, display_currency, "Primary display currency")
    if uow.settings.get(SUBSCRIPTION_STATUS_KEY) is None:
        uow.settings.set(SUBSCRIPTION_STATUS_KEY, FREE_PLAN, "Subscription plan")
