"""Cashflow forecaster: trailing average plus scheduled recurring entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..domain.context import LedgerContext
from ..domain.errors import INVALID_INPUT, DomainRejection
from ..logging_config import get_logger
from ..models.budget import BudgetEntry
from ..models.transaction import EXPENSE, INCOME
from . import ledger
from .budgeting import occurrence_in_month
from .periods import add_months, datetime_bounds, month_end, month_key, month_start

logger = get_logger("services.forecast")

TRAILING_MONTHS = 3
MAX_FORECAST_MONTHS = 24


@dataclass(frozen=True)
class ForecastRow:
    period: str
    projected_balance: float
    income_transactions: float
    expense_transactions: float
    budget_income: float
    budget_expense: float
    net_change: float


def trailing_average_net(uow, ctx: LedgerContext, currency: str) -> float:
    """Average monthly income minus expense over the last completed months.

    Transfer legs move money between wallets and are left out.
    """

    total = 0.0
    for offset in range(1, TRAILING_MONTHS + 1):
        month = add_months(month_start(ctx.reference_date), -offset)
        start, end = datetime_bounds(month, month_end(month))
        for txn in uow.transactions.filter_by_date_range(start, end):
            if txn.type not in (INCOME, EXPENSE):
                continue
            wallet = uow.wallets.get_by_id(txn.wallet_id)
            if wallet is None:
                continue
            value = ctx.convert(txn.amount, wallet.currency, currency)
            total += value if txn.type == INCOME else -value
    return total / TRAILING_MONTHS


def _scheduled(
    entries: list[BudgetEntry], month: date, ctx: LedgerContext, currency: str
) -> tuple[float, float]:
    income = expense = 0.0
    for entry in entries:
        due = occurrence_in_month(entry, month)
        if due is None or due < ctx.reference_date:
            continue
        value = ctx.convert(entry.amount, entry.currency, currency)
        if entry.type == INCOME:
            income += value
        else:
            expense += value
    return income, expense


def cashflow_forecast(
    uow, ctx: LedgerContext, months: int, currency: Optional[str] = None
) -> list[ForecastRow]:
    """Project the total balance month by month, starting with the current month.

    The current month is already partly realized in the wallet balances, so
    its row only carries the recurring layer; later rows add the trailing
    average on top.
    """

    if not 1 <= months <= MAX_FORECAST_MONTHS:
        raise DomainRejection(
            INVALID_INPUT, f"months must be between 1 and {MAX_FORECAST_MONTHS}", months=months
        )
    target = currency or ctx.display_currency
    balance = ledger.total_balance(uow, ctx, target)
    average = trailing_average_net(uow, ctx, target)
    entries = uow.budgets.list_active()

    rows: list[ForecastRow] = []
    for index in range(months):
        month = add_months(month_start(ctx.reference_date), index)
        smoothing = average if index > 0 else 0.0
        budget_income, budget_expense = _scheduled(entries, month, ctx, target)
        net = smoothing + budget_income - budget_expense
        balance += net
        rows.append(
            ForecastRow(
                period=month_key(month),
                projected_balance=balance,
                income_transactions=max(smoothing, 0.0),
                expense_transactions=abs(min(smoothing, 0.0)),
                budget_income=budget_income,
                budget_expense=budget_expense,
                net_change=net,
            )
        )
    logger.info(
        "Cashflow forecast computed",
        extra={"months": months, "currency": target, "average_net": average},
    )
    return rows
