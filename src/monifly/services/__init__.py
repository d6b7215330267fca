"""Service module exports."""

from . import (
    analytics,
    budgeting,
    crypto,
    currency,
    debts,
    forecast,
    goals,
    investments,
    ledger,
    migrations,
    notes,
    periods,
    prices,
    settings,
    snapshot,
)

__all__ = [
    "analytics",
    "budgeting",
    "crypto",
    "currency",
    "debts",
    "forecast",
    "goals",
    "investments",
    "ledger",
    "migrations",
    "notes",
    "periods",
    "prices",
    "settings",
    "snapshot",
]
