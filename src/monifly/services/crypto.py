"""Crypto cost-basis tracker.

One holding per symbol carries a rolling weighted-average unit cost. Each
buy re-bases against the currently stored average only, not the full lot
history, so a long chain of buys and sells is not associative. Selling never
changes the average cost of what remains.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..constants.categories import CRYPTO_CATEGORY
from ..domain.context import LedgerContext
from ..domain.errors import (
    HOLDING_NOT_FOUND,
    INSUFFICIENT_QUANTITY,
    DomainRejection,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.crypto import CryptoHolding
from ..models.transaction import EXPENSE, INCOME
from . import ledger
from .periods import LONG_PERIODS, datetime_bounds, iter_days, iter_months, month_end

logger = get_logger("services.crypto")

# Remaining quantities below this are treated as a fully closed position
QUANTITY_EPSILON = 1e-8


def _format_quantity(value: float) -> str:
    return f"{value:.8f}".rstrip("0").rstrip(".")


def buy_crypto(
    uow,
    ctx: LedgerContext,
    *,
    wallet_id: int,
    symbol: str,
    amount: float,
    price_per_unit: float,
    currency: str,
    name: Optional[str] = None,
) -> CryptoHolding:
    """Buy *amount* units of *symbol* paid from a fiat wallet."""

    quantity = require_positive(amount)
    price = require_positive(price_per_unit, field_name="price_per_unit")
    fiat = normalize_currency_code(currency)
    ticker = symbol.strip().upper()

    wallet = ledger.require_wallet(uow, wallet_id)
    total_cost = quantity * price
    ledger.require_funds(wallet, ctx.convert(total_cost, fiat, wallet.currency))

    ledger.post_transaction(
        uow,
        ctx,
        wallet_id=wallet.id,
        type=EXPENSE,
        amount=total_cost,
        currency=fiat,
        category=CRYPTO_CATEGORY,
        description=f"Buy {_format_quantity(quantity)} {ticker}",
    )

    holding = uow.holdings.get_by_symbol(ticker)
    if holding is None:
        current_price = price
        if ctx.prices is not None:
            quoted = ctx.prices.get_price(ticker)
            if quoted is not None:
                current_price = ctx.convert(quoted, ctx.prices.currency, fiat)
        holding = CryptoHolding(
            symbol=ticker,
            name=name or ticker,
            amount=quantity,
            purchase_price=price,
            purchase_currency=fiat,
            current_price=current_price,
            purchase_date=ctx.now(),
        )
        uow.holdings.create(holding)
    else:
        # Weighted average in the holding's own purchase currency
        existing_cost = holding.amount * holding.purchase_price
        new_cost = ctx.convert(total_cost, fiat, holding.purchase_currency)
        holding.amount += quantity
        holding.purchase_price = (existing_cost + new_cost) / holding.amount
        uow.holdings.update(holding)

    logger.info(
        "Crypto bought",
        extra={
            "symbol": ticker,
            "quantity": quantity,
            "average_cost": holding.purchase_price,
            "wallet_id": wallet.id,
        },
    )
    return holding


def sell_crypto(
    uow,
    ctx: LedgerContext,
    *,
    wallet_id: int,
    holding_id: int,
    amount: float,
    price_per_unit: float,
    currency: str,
) -> Optional[CryptoHolding]:
    """Sell part or all of a holding; returns the remaining holding or ``None``."""

    quantity = require_positive(amount)
    price = require_positive(price_per_unit, field_name="price_per_unit")
    fiat = normalize_currency_code(currency)

    wallet = ledger.require_wallet(uow, wallet_id)
    holding = uow.holdings.get_by_id(holding_id)
    if holding is None:
        raise DomainRejection(HOLDING_NOT_FOUND, "Holding not found", holding_id=holding_id)
    if quantity - holding.amount > QUANTITY_EPSILON:
        raise DomainRejection(
            INSUFFICIENT_QUANTITY,
            f"Not enough {holding.symbol} to sell",
            holding_id=holding_id,
            held=holding.amount,
            requested=quantity,
        )

    ledger.post_transaction(
        uow,
        ctx,
        wallet_id=wallet.id,
        type=INCOME,
        amount=quantity * price,
        currency=fiat,
        category=CRYPTO_CATEGORY,
        description=f"Sell {_format_quantity(quantity)} {holding.symbol}",
    )

    remaining = holding.amount - quantity
    if remaining < QUANTITY_EPSILON:
        uow.holdings.delete(holding.id)
        logger.info("Crypto position closed", extra={"symbol": holding.symbol})
        return None
    holding.amount = remaining
    uow.holdings.update(holding)
    logger.info(
        "Crypto sold",
        extra={"symbol": holding.symbol, "quantity": quantity, "remaining": remaining},
    )
    return holding


def refresh_crypto_prices(uow, ctx: LedgerContext) -> dict[str, float]:
    """Pull quotes for every holding; unavailable symbols keep their stored price."""

    holdings = uow.holdings.list_all()
    if ctx.prices is None or not holdings:
        return {}
    quotes = ctx.prices.get_prices([h.symbol for h in holdings])
    updated: dict[str, float] = {}
    for holding in holdings:
        quoted = quotes.get(holding.symbol)
        if quoted is None:
            continue
        holding.current_price = ctx.convert(quoted, ctx.prices.currency, holding.purchase_currency)
        uow.holdings.update(holding)
        updated[holding.symbol] = holding.current_price
    logger.info("Crypto prices refreshed", extra={"symbols": sorted(updated)})
    return updated


@dataclass(frozen=True)
class HoldingValuation:
    holding_id: int
    symbol: str
    amount: float
    cost_basis: float
    market_value: float
    currency: str

    @property
    def unrealized_profit(self) -> float:
        return self.market_value - self.cost_basis


def holding_valuations(uow, ctx: LedgerContext, currency: Optional[str] = None) -> list[HoldingValuation]:
    target = currency or ctx.display_currency
    return [
        HoldingValuation(
            holding_id=h.id,
            symbol=h.symbol,
            amount=h.amount,
            cost_basis=ctx.convert(h.cost_basis, h.purchase_currency, target),
            market_value=ctx.convert(h.market_value, h.purchase_currency, target),
            currency=target,
        )
        for h in uow.holdings.list_all()
    ]


def crypto_portfolio_value(uow, ctx: LedgerContext, currency: Optional[str] = None) -> float:
    return sum(v.market_value for v in holding_valuations(uow, ctx, currency))


def _crypto_postings(uow, start: date, end: date):
    low, high = datetime_bounds(start, end)
    return [
        t
        for t in ledger.transactions_for_category(uow, CRYPTO_CATEGORY)
        if low <= t.occurred_at <= high
    ]


def crypto_period_totals(uow, ctx: LedgerContext, start: date, end: date) -> dict[str, float]:
    """Purchases and sales posted in ``[start, end]``, in the display currency."""

    purchases = 0.0
    sales = 0.0
    for txn in _crypto_postings(uow, start, end):
        value = ctx.to_display(txn.amount, txn.currency)
        if txn.type == EXPENSE:
            purchases += value
        elif txn.type == INCOME:
            sales += value
    return {"purchases": purchases, "sales": sales}


@dataclass(frozen=True)
class CryptoFlowRow:
    date: date
    buys: float
    sells: float


def crypto_flow_summary(
    uow, ctx: LedgerContext, start: date, end: date, *, period: Optional[str] = None
) -> list[CryptoFlowRow]:
    """Per-month rows for year periods, otherwise per-day rows with activity only."""

    postings = _crypto_postings(uow, start, end)

    def _bucket(lo: date, hi: date) -> CryptoFlowRow:
        buys = sells = 0.0
        for txn in postings:
            day = txn.occurred_at.date()
            if lo <= day <= hi:
                value = ctx.to_display(txn.amount, txn.currency)
                if txn.type == EXPENSE:
                    buys += value
                elif txn.type == INCOME:
                    sells += value
        return CryptoFlowRow(date=lo, buys=buys, sells=sells)

    if period in LONG_PERIODS:
        return [_bucket(m, min(month_end(m), end)) for m in iter_months(start, end)]
    rows = (_bucket(d, d) for d in iter_days(start, end))
    return [r for r in rows if r.buys > 0 or r.sells > 0]
