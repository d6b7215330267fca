"""Recurring budget scheduler: due dates, period resets and actual spending."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..domain.context import LedgerContext
from ..domain.errors import (
    BUDGET_NOT_FOUND,
    INVALID_INPUT,
    DomainRejection,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.budget import BUDGET_FREQUENCIES, MONTHLY, ONCE, BudgetEntry
from ..models.transaction import EXPENSE, INCOME
from . import ledger
from .periods import add_months, datetime_bounds, month_end, month_start

logger = get_logger("services.budgeting")


def _anchor(year: int, month: int, day_of_month: int) -> date:
    return date(year, month, min(day_of_month, monthrange(year, month)[1]))


def _anchor_after(start_date: date, months: int, day_of_month: int) -> date:
    shifted = add_months(start_date.replace(day=1), months)
    return _anchor(shifted.year, shifted.month, day_of_month)


def next_due_date(
    *,
    frequency: str,
    start_date: date,
    day_of_month: Optional[int],
    reference_date: date,
) -> date:
    """Return the next date a budget entry falls due on or after *reference_date*.

    One-off entries are due on their start date forever. Monthly entries are
    anchored on ``day_of_month`` (day 1 when unset, clamped to short months)
    and never fall due before their start date.
    """

    if frequency == ONCE:
        return start_date
    if frequency != MONTHLY:
        raise ValueError(f"Unknown budget frequency: {frequency!r}")

    day = day_of_month or 1
    offset = 0
    candidate = _anchor_after(start_date, offset, day)
    if candidate < start_date:
        offset = 1
        candidate = _anchor_after(start_date, offset, day)
    while candidate < reference_date:
        offset += 1
        candidate = _anchor_after(start_date, offset, day)
    return candidate


def occurrence_in_month(entry: BudgetEntry, month: date) -> Optional[date]:
    """Date the entry falls due inside the month containing *month*, if any."""

    first, last = month_start(month), month_end(month)
    if entry.frequency == ONCE:
        return entry.start_date if first <= entry.start_date <= last else None
    day = entry.day_of_month or 1
    due = _anchor(first.year, first.month, day)
    earliest = next_due_date(
        frequency=entry.frequency,
        start_date=entry.start_date,
        day_of_month=entry.day_of_month,
        reference_date=entry.start_date,
    )
    return due if due >= earliest else None


def _require_entry(uow, entry_id: int) -> BudgetEntry:
    entry = uow.budgets.get_by_id(entry_id)
    if entry is None:
        raise DomainRejection(BUDGET_NOT_FOUND, "Budget entry not found", entry_id=entry_id)
    return entry


def _validate(entry: BudgetEntry) -> None:
    if entry.type not in (INCOME, EXPENSE):
        raise DomainRejection(INVALID_INPUT, f"Unknown budget entry type: {entry.type!r}")
    if entry.frequency not in BUDGET_FREQUENCIES:
        raise DomainRejection(INVALID_INPUT, f"Unknown frequency: {entry.frequency!r}")
    if entry.day_of_month is not None and not 1 <= entry.day_of_month <= 31:
        raise DomainRejection(INVALID_INPUT, "day_of_month must be between 1 and 31")
    if entry.limit is not None and entry.limit < 0:
        raise DomainRejection(INVALID_INPUT, "limit cannot be negative")


def _refresh_due_date(entry: BudgetEntry, reference_date: date) -> None:
    entry.next_due_date = next_due_date(
        frequency=entry.frequency,
        start_date=entry.start_date,
        day_of_month=entry.day_of_month,
        reference_date=reference_date,
    )


def add_budget_entry(
    uow,
    ctx: LedgerContext,
    *,
    category: str,
    amount: float,
    currency: str,
    type: str = EXPENSE,
    frequency: str = MONTHLY,
    start_date: Optional[date] = None,
    day_of_month: Optional[int] = None,
    description: str = "",
    limit: Optional[float] = None,
    wallet_id: Optional[int] = None,
) -> BudgetEntry:
    entry = BudgetEntry(
        description=description,
        category=(category or "").strip() or "other",
        amount=require_positive(amount),
        currency=normalize_currency_code(currency),
        type=type,
        frequency=frequency,
        start_date=start_date or ctx.reference_date,
        day_of_month=day_of_month,
        limit=limit,
        wallet_id=wallet_id,
    )
    _validate(entry)
    _refresh_due_date(entry, ctx.reference_date)
    uow.budgets.create(entry)
    ledger.register_category(uow, entry.category)
    logger.info(
        "Budget entry created",
        extra={"entry_id": entry.id, "category": entry.category, "next_due": entry.next_due_date},
    )
    return entry


_EDITABLE = (
    "description",
    "category",
    "amount",
    "currency",
    "type",
    "frequency",
    "start_date",
    "day_of_month",
    "limit",
    "is_active",
    "wallet_id",
)


def update_budget_entry(uow, ctx: LedgerContext, entry_id: int, **changes) -> BudgetEntry:
    entry = _require_entry(uow, entry_id)
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise DomainRejection(INVALID_INPUT, f"Cannot edit fields: {sorted(unknown)}")
    if "amount" in changes:
        changes["amount"] = require_positive(changes["amount"])
    if "currency" in changes:
        changes["currency"] = normalize_currency_code(changes["currency"])
    for key, value in changes.items():
        setattr(entry, key, value)
    _validate(entry)
    _refresh_due_date(entry, ctx.reference_date)
    uow.budgets.update(entry)
    ledger.register_category(uow, entry.category)
    return entry


def delete_budget_entry(uow, entry_id: int) -> None:
    _require_entry(uow, entry_id)
    uow.budgets.delete(entry_id)
    logger.info("Budget entry deleted", extra={"entry_id": entry_id})


def reset_period(uow, frequency: str = MONTHLY) -> int:
    """Zero ``spent`` on every active entry of *frequency*; due dates are untouched."""

    entries = uow.budgets.list_active(frequency)
    for entry in entries:
        entry.spent = 0.0
        uow.budgets.update(entry)
    logger.info("Budget period reset", extra={"frequency": frequency, "entries": len(entries)})
    return len(entries)


def spending_for(uow, ctx: LedgerContext, entry: BudgetEntry) -> float:
    """Expenses in the entry's category during the reference month, in its currency."""

    start, end = datetime_bounds(month_start(ctx.reference_date), month_end(ctx.reference_date))
    total = 0.0
    for txn in uow.transactions.filter_by_category(entry.category):
        if txn.type != EXPENSE or not start <= txn.occurred_at <= end:
            continue
        wallet = uow.wallets.get_by_id(txn.wallet_id)
        source = wallet.currency if wallet is not None else txn.currency
        total += ctx.convert(txn.amount, source, entry.currency)
    return total


def actual_spending(uow, ctx: LedgerContext, entry_id: int) -> float:
    return spending_for(uow, ctx, _require_entry(uow, entry_id))


def update_spent(uow, ctx: LedgerContext, entry_id: int) -> BudgetEntry:
    """Persist the current actual spending as the entry's ``spent`` snapshot."""

    entry = _require_entry(uow, entry_id)
    entry.spent = spending_for(uow, ctx, entry)
    uow.budgets.update(entry)
    return entry


@dataclass(slots=True)
class BudgetVariance:
    """Planned versus actual for one expense entry."""

    entry_id: int
    category: str
    planned: float
    actual: float
    limit: Optional[float]
    currency: str

    @property
    def delta(self) -> float:
        return self.actual - self.planned

    @property
    def over_limit(self) -> bool:
        cap = self.limit if self.limit is not None else self.planned
        return self.actual > cap


def budget_variances(uow, ctx: LedgerContext) -> list[BudgetVariance]:
    """Compose budget vs actual variances for active expense entries."""

    variances = []
    for entry in uow.budgets.list_active():
        if entry.type != EXPENSE:
            continue
        variances.append(
            BudgetVariance(
                entry_id=entry.id,
                category=entry.category,
                planned=round(entry.amount, 2),
                actual=round(spending_for(uow, ctx, entry), 2),
                limit=entry.limit,
                currency=entry.currency,
            )
        )
    return variances


def list_budget_entries(uow) -> list[BudgetEntry]:
    return uow.budgets.list_all()
