"""
Centralized category and label definitions shared by the ledger services.
Custom transaction categories grow at runtime; these are the built-in ones.
"""

# Built-in transaction categories (keys, not display labels)
DEFAULT_TRANSACTION_CATEGORIES = [
    "other",
    "salary",
    "business",
    "investment",
    "rent",
    "utilities",
    "groceries",
    "transport",
    "entertainment",
    "healthcare",
    "education",
    "shopping",
    "travel",
    "crypto",
]

# Reserved categories used by postings the services create themselves
CRYPTO_CATEGORY = "crypto"
DEBT_CATEGORY = "debt"
TRANSFER_CATEGORY = "transfer"

INVESTMENT_ASSET_TYPES = [
    "stocks",
    "bonds",
    "realEstate",
    "crypto",
    "other",
]

INVESTMENT_ASSET_REGIONS = [
    "global",
    "us",
    "europe",
    "asia",
    "other",
]

# Bucket used when an asset carries no region tag
UNSPECIFIED_REGION = "unspecified"

WALLET_ICONS = [
    "Landmark",
    "Banknote",
    "Bitcoin",
    "CreditCard",
    "Wallet",
    "PiggyBank",
]
DEFAULT_WALLET_ICON = "Landmark"

DEFAULT_GOAL_TYPES = ["saving", "investment", "income", "expense"]

CALENDAR_NOTE_TYPES = ["reminder", "milestone", "goal", "note"]


def is_default_category(name: str) -> bool:
    """Return True when *name* matches a built-in category (case-insensitive)."""

    lowered = name.strip().lower()
    return any(lowered == c.lower() for c in DEFAULT_TRANSACTION_CATEGORIES)


__all__ = [
    "CALENDAR_NOTE_TYPES",
    "CRYPTO_CATEGORY",
    "DEBT_CATEGORY",
    "DEFAULT_GOAL_TYPES",
    "DEFAULT_TRANSACTION_CATEGORIES",
    "DEFAULT_WALLET_ICON",
    "INVESTMENT_ASSET_REGIONS",
    "INVESTMENT_ASSET_TYPES",
    "TRANSFER_CATEGORY",
    "UNSPECIFIED_REGION",
    "WALLET_ICONS",
    "is_default_category",
]
