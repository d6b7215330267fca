"""Application context: engine, rates, prices and the public ledger operations."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .domain.context import LedgerContext
from .domain.errors import INTEGRITY, LedgerError, OperationResult
from .infra.database import create_db_engine, init_database
from .infra.unit_of_work import UnitOfWork
from .logging_config import get_logger
from .services import (
    analytics,
    budgeting,
    crypto,
    debts,
    forecast,
    goals,
    investments,
    ledger,
    notes,
    settings,
    snapshot,
)
from .services.currency import DEFAULT_RATES, CurrencyConverter, RateTable
from .services.prices import CachedPriceService, PriceProvider, StaticPriceProvider

logger = get_logger("context")

T = TypeVar("T")

CRYPTO_SYMBOLS = ("BTC", "ETH", "SOL", "ADA")


def default_price_provider() -> StaticPriceProvider:
    """Offline quotes taken from the bundled demo rate table (USD)."""

    return StaticPriceProvider(
        {symbol: DEFAULT_RATES[f"{symbol}_USD"] for symbol in CRYPTO_SYMBOLS}, currency="USD"
    )


@dataclass
class AppContext:
    """Centralized application context.

    Every mutating method runs in one unit of work and returns an
    :class:`OperationResult`; read methods return plain values.
    """

    config: BaseConfig
    engine: Engine
    converter: CurrencyConverter
    prices: CachedPriceService
    reference_date: Optional[date] = None
    last_restore: Optional[snapshot.RestoreReport] = field(default=None, repr=False)
    # Jobs run on scheduler threads while the in-memory store shares one
    # connection, so units of work must never interleave.
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def today(self) -> date:
        return self.reference_date or date.today()

    def _ledger_context(self, uow: UnitOfWork) -> LedgerContext:
        return LedgerContext(
            converter=self.converter,
            reference_date=self.today(),
            display_currency=settings.get_display_currency(uow, self.config.DISPLAY_CURRENCY),
            prices=self.prices,
        )

    def _run(
        self, action: str, call: Callable[[UnitOfWork, LedgerContext], T]
    ) -> OperationResult[T]:
        """Execute *call* atomically and turn ledger errors into a failed result."""

        try:
            with self.lock, UnitOfWork(self.engine) as uow:
                value = call(uow, self._ledger_context(uow))
        except LedgerError as exc:
            log = logger.error if exc.kind == INTEGRITY else logger.warning
            log(
                "Operation %s failed: %s",
                action,
                exc.message,
                extra={"action": action, "code": exc.code, "kind": exc.kind, "details": exc.details},
            )
            return OperationResult.failure(exc)
        return OperationResult.success(value)

    def _read(self, call: Callable[[UnitOfWork, LedgerContext], T]) -> T:
        with self.lock, UnitOfWork(self.engine) as uow:
            return call(uow, self._ledger_context(uow))

    def ledger_context(self) -> LedgerContext:
        return self._read(lambda uow, ctx: ctx)

    # ------------------------------------------------------------------
    # Rates and settings
    # ------------------------------------------------------------------

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        return self.converter.convert(amount, from_currency, to_currency)

    def update_rates(
        self, rates: Mapping[str, float], *, pivot: Optional[str] = None
    ) -> OperationResult[list]:
        """Replace the rate table and re-derive every investment case total.

        The previous table is put back when the case totals cannot be stored.
        """

        with self.lock:
            previous = self.converter.table
            self.converter.update_rates(rates, pivot=pivot)
            result = self._run("update_rates", investments.refresh_case_totals)
            if not result.ok:
                self.converter.table = previous
            return result

    def set_display_currency(self, code: str) -> OperationResult[str]:
        return self._run("set_display_currency", lambda uow, ctx: settings.set_display_currency(uow, code))

    def display_currency(self) -> str:
        return self._read(lambda uow, ctx: ctx.display_currency)

    def subscription(self) -> dict:
        return self._read(lambda uow, ctx: settings.subscription(uow))

    def set_subscription(self, status: str, renewal_date: Optional[date] = None) -> OperationResult[dict]:
        return self._run(
            "set_subscription", lambda uow, ctx: settings.set_subscription(uow, status, renewal_date)
        )

    # ------------------------------------------------------------------
    # Wallets and categories
    # ------------------------------------------------------------------

    def add_wallet(self, **kwargs: Any) -> OperationResult:
        return self._run("add_wallet", lambda uow, ctx: ledger.add_wallet(uow, **kwargs))

    def update_wallet(self, wallet_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_wallet", lambda uow, ctx: ledger.update_wallet(uow, wallet_id, **kwargs)
        )

    def delete_wallet(self, wallet_id: int) -> OperationResult[int]:
        return self._run("delete_wallet", lambda uow, ctx: ledger.delete_wallet(uow, wallet_id))

    def reorder_wallets(self, wallet_ids: Sequence[int]) -> OperationResult:
        return self._run(
            "reorder_wallets", lambda uow, ctx: ledger.reorder_wallets(uow, wallet_ids)
        )

    def set_default_wallet(self, wallet_id: int) -> OperationResult:
        return self._run(
            "set_default_wallet", lambda uow, ctx: ledger.set_default_wallet(uow, wallet_id)
        )

    def get_wallet(self, wallet_id: int):
        return self._read(lambda uow, ctx: uow.wallets.get_by_id(wallet_id))

    def list_wallets(self):
        return self._read(lambda uow, ctx: uow.wallets.list_all())

    def total_balance(self, currency: Optional[str] = None) -> float:
        return self._read(lambda uow, ctx: ledger.total_balance(uow, ctx, currency))

    def add_custom_category(self, name: str) -> OperationResult[Optional[str]]:
        return self._run(
            "add_custom_category", lambda uow, ctx: ledger.register_category(uow, name)
        )

    def list_categories(self) -> list[str]:
        return self._read(lambda uow, ctx: ledger.list_categories(uow))

    def verify_balances(self):
        return self._read(lambda uow, ctx: ledger.verify_balances(uow))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def create_transaction(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "create_transaction", lambda uow, ctx: ledger.post_transaction(uow, ctx, **kwargs)
        )

    def update_transaction(self, transaction_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_transaction",
            lambda uow, ctx: ledger.update_transaction(uow, ctx, transaction_id, **kwargs),
        )

    def delete_transaction(self, transaction_id: int) -> OperationResult[None]:
        return self._run(
            "delete_transaction", lambda uow, ctx: ledger.delete_transaction(uow, transaction_id)
        )

    def create_transfer(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "create_transfer", lambda uow, ctx: ledger.create_transfer(uow, ctx, **kwargs)
        )

    def get_transaction(self, transaction_id: int):
        return self._read(lambda uow, ctx: uow.transactions.get_by_id(transaction_id))

    def list_transactions(self):
        return self._read(lambda uow, ctx: ledger.list_transactions(uow))

    def transactions_for_wallet(self, wallet_id: int):
        return self._read(lambda uow, ctx: ledger.transactions_for_wallet(uow, wallet_id))

    def transactions_on_date(self, day: date):
        return self._read(lambda uow, ctx: ledger.transactions_on_date(uow, day))

    def transactions_for_category(self, category: str, period: Optional[str] = None):
        def call(uow, ctx):
            if period is None:
                return ledger.transactions_for_category(uow, category)
            start, end = analytics.date_range_for_period(period, ctx.reference_date)
            return ledger.transactions_for_category(uow, category, start, end)

        return self._read(call)

    # ------------------------------------------------------------------
    # Crypto
    # ------------------------------------------------------------------

    def buy_crypto(self, **kwargs: Any) -> OperationResult:
        return self._run("buy_crypto", lambda uow, ctx: crypto.buy_crypto(uow, ctx, **kwargs))

    def sell_crypto(self, **kwargs: Any) -> OperationResult:
        return self._run("sell_crypto", lambda uow, ctx: crypto.sell_crypto(uow, ctx, **kwargs))

    def refresh_crypto_prices(self) -> OperationResult[dict]:
        return self._run("refresh_crypto_prices", crypto.refresh_crypto_prices)

    def list_holdings(self):
        return self._read(lambda uow, ctx: uow.holdings.list_all())

    def holding_valuations(self, currency: Optional[str] = None):
        return self._read(lambda uow, ctx: crypto.holding_valuations(uow, ctx, currency))

    def crypto_portfolio_value(self, currency: Optional[str] = None) -> float:
        return self._read(lambda uow, ctx: crypto.crypto_portfolio_value(uow, ctx, currency))

    def crypto_period_totals(self, period: str) -> dict[str, float]:
        def call(uow, ctx):
            start, end = analytics.date_range_for_period(period, ctx.reference_date)
            return crypto.crypto_period_totals(uow, ctx, start, end)

        return self._read(call)

    def crypto_flow_summary(self, period: str):
        def call(uow, ctx):
            start, end = analytics.date_range_for_period(period, ctx.reference_date)
            return crypto.crypto_flow_summary(uow, ctx, start, end, period=period)

        return self._read(call)

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def create_debt(self, **kwargs: Any) -> OperationResult:
        return self._run("create_debt", lambda uow, ctx: debts.create_debt(uow, ctx, **kwargs))

    def record_debt_payment(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "record_debt_payment", lambda uow, ctx: debts.record_debt_payment(uow, ctx, **kwargs)
        )

    def update_debt(self, debt_id: int, **kwargs: Any) -> OperationResult:
        return self._run("update_debt", lambda uow, ctx: debts.update_debt(uow, debt_id, **kwargs))

    def cancel_debt(self, debt_id: int) -> OperationResult:
        return self._run("cancel_debt", lambda uow, ctx: debts.cancel_debt(uow, debt_id))

    def delete_debt(self, debt_id: int) -> OperationResult[None]:
        return self._run("delete_debt", lambda uow, ctx: debts.delete_debt(uow, debt_id))

    def mark_overdue_debts(self) -> OperationResult[list]:
        return self._run(
            "mark_overdue_debts", lambda uow, ctx: debts.mark_overdue_debts(uow, ctx.reference_date)
        )

    def get_debt(self, debt_id: int):
        return self._read(lambda uow, ctx: uow.debts.get_by_id(debt_id))

    def debts_i_owe(self):
        return self._read(lambda uow, ctx: debts.debts_i_owe(uow))

    def debts_owed_to_me(self):
        return self._read(lambda uow, ctx: debts.debts_owed_to_me(uow))

    def debt_payments(self, debt_id: int) -> OperationResult[list]:
        return self._run("debt_payments", lambda uow, ctx: debts.debt_payments(uow, debt_id))

    def outstanding_debt_totals(self, currency: Optional[str] = None) -> dict[str, float]:
        return self._read(lambda uow, ctx: debts.outstanding_totals(uow, ctx, currency))

    # ------------------------------------------------------------------
    # Budget entries
    # ------------------------------------------------------------------

    def add_budget_entry(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "add_budget_entry", lambda uow, ctx: budgeting.add_budget_entry(uow, ctx, **kwargs)
        )

    def update_budget_entry(self, entry_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_budget_entry",
            lambda uow, ctx: budgeting.update_budget_entry(uow, ctx, entry_id, **kwargs),
        )

    def delete_budget_entry(self, entry_id: int) -> OperationResult[None]:
        return self._run(
            "delete_budget_entry", lambda uow, ctx: budgeting.delete_budget_entry(uow, entry_id)
        )

    def reset_period(self, frequency: str = "monthly") -> OperationResult[int]:
        return self._run("reset_period", lambda uow, ctx: budgeting.reset_period(uow, frequency))

    def actual_spending(self, entry_id: int) -> OperationResult[float]:
        return self._run(
            "actual_spending", lambda uow, ctx: budgeting.actual_spending(uow, ctx, entry_id)
        )

    def update_spent(self, entry_id: int) -> OperationResult:
        return self._run("update_spent", lambda uow, ctx: budgeting.update_spent(uow, ctx, entry_id))

    def list_budget_entries(self):
        return self._read(lambda uow, ctx: budgeting.list_budget_entries(uow))

    def budget_variances(self):
        return self._read(budgeting.budget_variances)

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(self, **kwargs: Any) -> OperationResult:
        return self._run("add_goal", lambda uow, ctx: goals.add_goal(uow, ctx, **kwargs))

    def update_goal(self, goal_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_goal", lambda uow, ctx: goals.update_goal(uow, ctx, goal_id, **kwargs)
        )

    def add_goal_contribution(
        self, goal_id: int, amount: float, currency: Optional[str] = None
    ) -> OperationResult:
        return self._run(
            "add_goal_contribution",
            lambda uow, ctx: goals.add_goal_contribution(uow, ctx, goal_id, amount, currency),
        )

    def set_goal_status(self, goal_id: int, status: str) -> OperationResult:
        return self._run(
            "set_goal_status", lambda uow, ctx: goals.set_goal_status(uow, goal_id, status)
        )

    def delete_goal(self, goal_id: int) -> OperationResult[None]:
        return self._run("delete_goal", lambda uow, ctx: goals.delete_goal(uow, goal_id))

    def list_goals(self):
        return self._read(lambda uow, ctx: goals.list_goals(uow))

    # ------------------------------------------------------------------
    # Forecast and analytics
    # ------------------------------------------------------------------

    def cashflow_forecast(
        self, months: int, currency: Optional[str] = None
    ) -> OperationResult[list]:
        return self._run(
            "cashflow_forecast",
            lambda uow, ctx: forecast.cashflow_forecast(uow, ctx, months, currency),
        )

    def overview(self, period: str = "currentMonth") -> analytics.Overview:
        return self._read(lambda uow, ctx: analytics.overview(uow, ctx, period))

    def period_summary(self, period: str = "currentMonth"):
        return self._read(lambda uow, ctx: analytics.period_summary(uow, ctx, period))

    def category_expense_breakdown(self, period: str = "currentMonth"):
        return self._read(lambda uow, ctx: analytics.category_expense_breakdown(uow, ctx, period))

    def wallet_distribution(self):
        return self._read(analytics.wallet_distribution)

    # ------------------------------------------------------------------
    # Investments
    # ------------------------------------------------------------------

    def add_investment_case(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "add_investment_case", lambda uow, ctx: investments.add_investment_case(uow, **kwargs)
        )

    def update_investment_case(self, case_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_investment_case",
            lambda uow, ctx: investments.update_investment_case(uow, ctx, case_id, **kwargs),
        )

    def delete_investment_case(self, case_id: int) -> OperationResult[None]:
        return self._run(
            "delete_investment_case",
            lambda uow, ctx: investments.delete_investment_case(uow, case_id),
        )

    def add_asset_to_case(self, case_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "add_asset_to_case",
            lambda uow, ctx: investments.add_asset_to_case(uow, ctx, case_id, **kwargs),
        )

    def update_asset(self, asset_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_asset", lambda uow, ctx: investments.update_asset(uow, ctx, asset_id, **kwargs)
        )

    def remove_asset(self, asset_id: int) -> OperationResult[None]:
        return self._run(
            "remove_asset", lambda uow, ctx: investments.remove_asset(uow, ctx, asset_id)
        )

    def refresh_case_totals(self) -> OperationResult[list]:
        return self._run("refresh_case_totals", investments.refresh_case_totals)

    def get_investment_case(self, case_id: int):
        return self._read(lambda uow, ctx: uow.investments.get_case(case_id))

    def case_assets(self, case_id: int) -> OperationResult[list]:
        return self._run("case_assets", lambda uow, ctx: investments.case_assets(uow, case_id))

    def portfolio_summary(self, currency: Optional[str] = None) -> investments.PortfolioSummary:
        return self._read(lambda uow, ctx: investments.portfolio_summary(uow, ctx, currency))

    def asset_type_distribution(self):
        return self._read(investments.asset_type_distribution)

    def asset_region_distribution(self):
        return self._read(investments.asset_region_distribution)

    # ------------------------------------------------------------------
    # Calendar notes
    # ------------------------------------------------------------------

    def add_calendar_note(self, **kwargs: Any) -> OperationResult:
        return self._run(
            "add_calendar_note", lambda uow, ctx: notes.add_calendar_note(uow, **kwargs)
        )

    def update_calendar_note(self, note_id: int, **kwargs: Any) -> OperationResult:
        return self._run(
            "update_calendar_note",
            lambda uow, ctx: notes.update_calendar_note(uow, note_id, **kwargs),
        )

    def toggle_calendar_note(self, note_id: int) -> OperationResult:
        return self._run(
            "toggle_calendar_note", lambda uow, ctx: notes.toggle_calendar_note(uow, note_id)
        )

    def delete_calendar_note(self, note_id: int) -> OperationResult[None]:
        return self._run(
            "delete_calendar_note", lambda uow, ctx: notes.delete_calendar_note(uow, note_id)
        )

    def list_calendar_notes(self):
        return self._read(lambda uow, ctx: uow.notes.list_all())

    def notes_between(self, start: date, end: date):
        return self._read(lambda uow, ctx: notes.notes_between(uow, start, end))

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def export_snapshot(self) -> dict[str, Any]:
        return self._read(lambda uow, ctx: snapshot.export_snapshot(uow, self.converter))

    def restore_snapshot(self, data: dict[str, Any]) -> OperationResult[snapshot.RestoreReport]:
        """Replace the whole store with *data*; the rate table follows the snapshot."""

        with self.lock:
            result = self._run(
                "restore_snapshot", lambda uow, ctx: snapshot.restore_snapshot(uow, data)
            )
            if result.ok and result.value is not None:
                self.last_restore = result.value
                rates = result.value.rates or {}
                if rates.get("pairs"):
                    self.converter.update_rates(rates["pairs"], pivot=rates.get("pivot"))
                if result.value.balance_drift:
                    logger.error(
                        "Restored snapshot has wallet balance drift",
                        extra={"wallet_ids": result.value.balance_drift},
                    )
        return result

    def save_snapshot(self, path: Optional[Path] = None) -> Path:
        return snapshot.save_snapshot(self.export_snapshot(), path or self.config.SNAPSHOT_PATH)

    def load_snapshot(self, path: Optional[Path] = None) -> OperationResult[snapshot.RestoreReport]:
        target = Path(path or self.config.SNAPSHOT_PATH)
        try:
            data = snapshot.load_snapshot(target)
        except LedgerError as exc:
            logger.warning("Snapshot load failed", extra={"path": str(target), "code": exc.code})
            return OperationResult.failure(exc)
        return self.restore_snapshot(data)


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    price_provider: Optional[PriceProvider] = None,
    rates: Optional[Mapping[str, float]] = None,
    reference_date: Optional[date] = None,
    clock: Optional[Callable[[], float]] = None,
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)

    converter = CurrencyConverter(
        RateTable.from_mapping(rates or DEFAULT_RATES, pivot=config.PIVOT_CURRENCY)
    )
    price_kwargs: dict[str, Any] = {"ttl_seconds": config.PRICE_CACHE_SECONDS}
    if clock is not None:
        price_kwargs["clock"] = clock
    prices = CachedPriceService(price_provider or default_price_provider(), **price_kwargs)

    app = AppContext(
        config=config,
        engine=engine,
        converter=converter,
        prices=prices,
        reference_date=reference_date,
    )
    with UnitOfWork(engine) as uow:
        settings.ensure_defaults(uow, config.DISPLAY_CURRENCY)
    logger.info(
        "Application context created",
        extra={"database_url": config.DATABASE_URL, "pivot": converter.pivot},
    )
    return app
