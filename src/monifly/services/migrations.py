"""Forward-only snapshot migrations.

Each step takes the snapshot produced by the previous version together with
that version number, and returns a new dict stamped with the next version and
with the fields introduced there backfilled. Steps never mutate their input.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..constants.categories import DEFAULT_WALLET_ICON
from ..domain.errors import UNSUPPORTED_VERSION, DomainRejection
from ..logging_config import get_logger
from .currency import DEFAULT_RATES

logger = get_logger("services.migrations")

State = dict[str, Any]

SCHEMA_VERSION = 13


@dataclass(frozen=True)
class MigrationStep:
    version: int
    description: str
    apply: Callable[[State, int], State]


def _step(fn: Callable[[State], None]) -> Callable[[State, int], State]:
    def wrapper(state: State, from_version: int) -> State:
        result = copy.deepcopy(state)
        fn(result)
        result["version"] = from_version + 1
        return result

    wrapper.__name__ = fn.__name__
    wrapper.__doc__ = fn.__doc__
    return wrapper


@_step
def _goals(state: State) -> None:
    goals = state.setdefault("goals", [])
    display = state.get("settings", {}).get("display_currency", "RUB")
    for goal in goals:
        goal.setdefault("monthly_contribution", 0.0)
        goal.setdefault("contribution_currency", display)


@_step
def _debts(state: State) -> None:
    for debt in state.setdefault("debts", []):
        debt.setdefault("initial_wallet_id", None)
        debt.setdefault("paid_amount", 0.0)
    state.setdefault("debt_payments", [])


@_step
def _budget_entries(state: State) -> None:
    for entry in state.setdefault("budget_entries", []):
        entry.setdefault("is_active", True)
        entry.setdefault("limit", None)
        entry.setdefault("spent", 0.0)


@_step
def _investments(state: State) -> None:
    state.setdefault("investment_cases", [])
    for asset in state.setdefault("investment_assets", []):
        asset["region"] = asset.get("region") or None


@_step
def _crypto_currency(state: State) -> None:
    for holding in state.setdefault("crypto_holdings", []):
        holding["purchase_currency"] = holding.get("purchase_currency") or "USD"


def _effect(txn: dict[str, Any]) -> float:
    amount = float(txn.get("amount", 0.0))
    kind = txn.get("type")
    if kind == "income":
        return amount
    if kind == "expense":
        return -amount
    if kind == "transfer":
        return {"in": amount, "out": -amount}.get(txn.get("direction"), 0.0)
    return 0.0


@_step
def _wallet_icon_and_seed(state: State) -> None:
    """Default icon; seed balance reconstructed from the stored history."""

    transactions = state.get("transactions", [])
    for wallet in state.setdefault("wallets", []):
        wallet["icon"] = wallet.get("icon") or DEFAULT_WALLET_ICON
        if "initial_balance" not in wallet:
            effects = sum(_effect(t) for t in transactions if t.get("wallet_id") == wallet.get("id"))
            wallet["initial_balance"] = float(wallet.get("balance", 0.0)) - effects


@_step
def _custom_categories(state: State) -> None:
    state.setdefault("custom_categories", [])


@_step
def _calendar_notes(state: State) -> None:
    state.setdefault("calendar_notes", [])


@_step
def _subscription(state: State) -> None:
    settings = state.setdefault("settings", {})
    settings.setdefault("subscription_status", "free")
    settings.setdefault("subscription_renewal_date", None)


@_step
def _transaction_links(state: State) -> None:
    for txn in state.setdefault("transactions", []):
        txn.setdefault("tags", [])
        txn.setdefault("direction", None)
        txn.setdefault("transfer_peer_id", None)
        txn.setdefault("debt_id", None)


@_step
def _wallet_positions(state: State) -> None:
    for index, wallet in enumerate(state.setdefault("wallets", [])):
        wallet.setdefault("position", index)


@_step
def _rates(state: State) -> None:
    if not state.get("rates"):
        state["rates"] = {"pivot": "USD", "pairs": dict(DEFAULT_RATES)}


MIGRATIONS: list[MigrationStep] = [
    MigrationStep(2, "Goals list and monthly contribution", _goals),
    MigrationStep(3, "Debts, payments and initiating wallet", _debts),
    MigrationStep(4, "Budget entry active flag, limit and spent", _budget_entries),
    MigrationStep(5, "Investment cases and asset region", _investments),
    MigrationStep(6, "Crypto purchase currency", _crypto_currency),
    MigrationStep(7, "Wallet icon and seeded balance", _wallet_icon_and_seed),
    MigrationStep(8, "Custom transaction categories", _custom_categories),
    MigrationStep(9, "Calendar notes", _calendar_notes),
    MigrationStep(10, "Subscription fields", _subscription),
    MigrationStep(11, "Transaction tags and links", _transaction_links),
    MigrationStep(12, "Wallet ordering", _wallet_positions),
    MigrationStep(13, "Persisted rate table", _rates),
]


def migrate(state: State, from_version: Optional[int] = None) -> State:
    """Run every step newer than the snapshot's version, in order."""

    version = int(from_version if from_version is not None else state.get("version", 1))
    if version > SCHEMA_VERSION:
        raise DomainRejection(
            UNSUPPORTED_VERSION,
            f"Snapshot version {version} is newer than supported {SCHEMA_VERSION}",
            version=version,
        )
    result = state
    current = version
    for step in MIGRATIONS:
        if step.version > current:
            result = step.apply(result, current)
            current = step.version
            logger.info(
                "Snapshot migrated",
                extra={"to_version": step.version, "step": step.description},
            )
    if result is state:
        result = copy.deepcopy(state)
    result["version"] = SCHEMA_VERSION
    return result
