"""Read-side dashboard aggregations over wallets and transactions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..domain.context import LedgerContext
from ..models.transaction import EXPENSE, INCOME, Transaction
from . import ledger
from .periods import (
    LONG_PERIODS,
    date_range_for_period,
    datetime_bounds,
    iter_days,
    iter_months,
    month_end,
)

__all__ = [
    "Overview",
    "SummaryRow",
    "category_expense_breakdown",
    "date_range_for_period",
    "overview",
    "period_summary",
    "wallet_distribution",
]


@dataclass(frozen=True)
class Overview:
    total_balance: float
    income: float
    expenses: float
    transaction_count: int


@dataclass(frozen=True)
class SummaryRow:
    date: date
    income: float
    expenses: float
    balance: float


def _period_transactions(uow, start: date, end: date) -> list[Transaction]:
    low, high = datetime_bounds(start, end)
    return uow.transactions.filter_by_date_range(low, high)


def _in_display(uow, ctx: LedgerContext, txn: Transaction) -> float:
    wallet = uow.wallets.get_by_id(txn.wallet_id)
    if wallet is None:
        return 0.0
    return ctx.to_display(txn.amount, wallet.currency)


def overview(uow, ctx: LedgerContext, period: str) -> Overview:
    """Total balance plus income, expenses and count for *period*.

    Transfer legs are counted but contribute to neither income nor expenses.
    """

    start, end = date_range_for_period(period, ctx.reference_date)
    income = expenses = 0.0
    rows = _period_transactions(uow, start, end)
    for txn in rows:
        if txn.type == INCOME:
            income += _in_display(uow, ctx, txn)
        elif txn.type == EXPENSE:
            expenses += _in_display(uow, ctx, txn)
    return Overview(
        total_balance=ledger.total_balance(uow, ctx),
        income=income,
        expenses=expenses,
        transaction_count=len(rows),
    )


def period_summary(uow, ctx: LedgerContext, period: str) -> list[SummaryRow]:
    """Daily rows (monthly for year periods) with a running balance.

    The running balance starts from the total balance at the start of the
    period, reconstructed by backing out every posting inside the period.
    """

    start, end = date_range_for_period(period, ctx.reference_date)
    rows = _period_transactions(uow, start, end)
    effects = [(t, ctx.to_display(ledger.signed_effect(t), t.currency)) for t in rows]
    running = ledger.total_balance(uow, ctx) - sum(delta for _, delta in effects)

    if period in LONG_PERIODS:
        buckets = [(m, month_end(m)) for m in iter_months(start, end)]
    else:
        buckets = [(d, d) for d in iter_days(start, end)]

    summary: list[SummaryRow] = []
    for low, high in buckets:
        income = expenses = net = 0.0
        for txn, delta in effects:
            if not low <= txn.occurred_at.date() <= high:
                continue
            net += delta
            if txn.type == INCOME:
                income += delta
            elif txn.type == EXPENSE:
                expenses -= delta
        running += net
        summary.append(SummaryRow(date=low, income=income, expenses=expenses, balance=running))
    return summary


def category_expense_breakdown(uow, ctx: LedgerContext, period: str) -> list[tuple[str, float]]:
    """Expense totals per category, largest first."""

    start, end = date_range_for_period(period, ctx.reference_date)
    totals: dict[str, float] = {}
    for txn in _period_transactions(uow, start, end):
        if txn.type != EXPENSE:
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + _in_display(uow, ctx, txn)
    breakdown = [(name, round(value, 2)) for name, value in totals.items()]
    breakdown.sort(key=lambda item: item[1], reverse=True)
    return breakdown


def wallet_distribution(uow, ctx: LedgerContext) -> list[tuple[str, float]]:
    """Non-zero wallet balances in the display currency, largest first."""

    rows = [
        (w.name, round(ctx.to_display(w.balance, w.currency), 2))
        for w in uow.wallets.list_all()
        if w.balance != 0
    ]
    rows.sort(key=lambda item: item[1], reverse=True)
    return rows
