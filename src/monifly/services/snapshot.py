"""Whole-state snapshot export/restore and JSON file persistence."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from ..domain.errors import INVALID_INPUT, DomainRejection
from ..logging_config import get_logger
from ..models import (
    BudgetEntry,
    CalendarNote,
    CryptoHolding,
    Debt,
    DebtPayment,
    FinancialGoal,
    InvestmentAsset,
    InvestmentCase,
    Transaction,
    Wallet,
)
from . import ledger
from .currency import CurrencyConverter
from .migrations import SCHEMA_VERSION, migrate
from .settings import DISPLAY_CURRENCY_KEY, SUBSCRIPTION_RENEWAL_KEY, SUBSCRIPTION_STATUS_KEY

logger = get_logger("services.snapshot")

# Insertion order respects foreign keys
COLLECTIONS: list[tuple[str, Type[SQLModel]]] = [
    ("wallets", Wallet),
    ("transactions", Transaction),
    ("crypto_holdings", CryptoHolding),
    ("debts", Debt),
    ("debt_payments", DebtPayment),
    ("budget_entries", BudgetEntry),
    ("goals", FinancialGoal),
    ("investment_cases", InvestmentCase),
    ("investment_assets", InvestmentAsset),
    ("calendar_notes", CalendarNote),
]

_SETTING_KEYS = (DISPLAY_CURRENCY_KEY, SUBSCRIPTION_STATUS_KEY, SUBSCRIPTION_RENEWAL_KEY)


def _dump(rows) -> list[dict[str, Any]]:
    return [row.model_dump(mode="json") for row in rows]


def export_snapshot(uow, converter: CurrencyConverter) -> dict[str, Any]:
    """Produce a JSON-ready dict of the whole ledger state."""

    settings = uow.settings.as_dict()
    return {
        "version": SCHEMA_VERSION,
        "settings": {key: settings.get(key) for key in _SETTING_KEYS},
        "rates": {"pivot": converter.pivot, "pairs": dict(converter.table.rates)},
        "wallets": _dump(uow.wallets.list_all()),
        "transactions": _dump(uow.transactions.list_all()),
        "custom_categories": uow.categories.list_names(),
        "crypto_holdings": _dump(uow.holdings.list_all()),
        "debts": _dump(uow.debts.list_all()),
        "debt_payments": _dump(uow.debts.list_all_payments()),
        "budget_entries": _dump(uow.budgets.list_all()),
        "goals": _dump(uow.goals.list_all()),
        "investment_cases": _dump(uow.investments.list_cases()),
        "investment_assets": _dump(uow.investments.list_assets()),
        "calendar_notes": _dump(uow.notes.list_all()),
    }


@dataclass
class RestoreReport:
    from_version: int
    counts: dict[str, int] = field(default_factory=dict)
    rates: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Optional[str]] = field(default_factory=dict)
    balance_drift: list[int] = field(default_factory=list)


def restore_snapshot(uow, data: dict[str, Any]) -> RestoreReport:
    """Migrate *data* to the current version and replace the whole store with it."""

    if not isinstance(data, dict):
        raise DomainRejection(INVALID_INPUT, "Snapshot must be a JSON object")
    from_version = int(data.get("version", 1))
    state = migrate(data, from_version)

    try:
        records = {
            key: [model.model_validate(item) for item in state.get(key, [])]
            for key, model in COLLECTIONS
        }
    except ValueError as exc:
        raise DomainRejection(INVALID_INPUT, f"Invalid snapshot record: {exc}") from exc

    uow.purge()
    report = RestoreReport(from_version=from_version)
    for key, _model in COLLECTIONS:
        try:
            for row in records[key]:
                uow.session.add(row)
            uow.flush()
        except SQLAlchemyError as exc:
            cause = getattr(exc, "orig", None) or exc
            raise DomainRejection(
                INVALID_INPUT, f"Snapshot {key} cannot be stored: {cause}", collection=key
            ) from exc
        report.counts[key] = len(records[key])
    for name in state.get("custom_categories", []):
        ledger.register_category(uow, name)
    report.counts["custom_categories"] = len(state.get("custom_categories", []))

    settings = state.get("settings", {})
    for key in _SETTING_KEYS:
        if settings.get(key) is not None:
            uow.settings.set(key, settings[key])
    report.settings = {key: settings.get(key) for key in _SETTING_KEYS}
    report.rates = state.get("rates", {})
    report.balance_drift = [d.wallet_id for d in ledger.verify_balances(uow)]

    logger.info(
        "Snapshot restored",
        extra={"from_version": from_version, "counts": report.counts},
    )
    return report


def save_snapshot(data: dict[str, Any], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Snapshot saved", extra={"path": str(path)})
    return path


def load_snapshot(path: Path) -> dict[str, Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DomainRejection(INVALID_INPUT, f"Snapshot cannot be read: {exc}", path=str(path)) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DomainRejection(INVALID_INPUT, f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DomainRejection(INVALID_INPUT, "Snapshot must be a JSON object")
    return data
