"""Unit of work: one session and the repositories bound to it."""

from __future__ import annotations

from typing import ContextManager, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from .database import session_scope
from .repositories import (
    SQLModelBudgetRepository,
    SQLModelCategoryRepository,
    SQLModelDebtRepository,
    SQLModelGoalRepository,
    SQLModelHoldingRepository,
    SQLModelInvestmentRepository,
    SQLModelNoteRepository,
    SQLModelSettingsRepository,
    SQLModelTransactionRepository,
    SQLModelWalletRepository,
)


class UnitOfWork:
    """Transactional scope for a ledger operation.

    Everything a service mutates through the exposed repositories is
    committed together when the block exits normally and rolled back when
    it raises, so a rejected operation leaves no trace in the store.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.session: Optional[Session] = None
        self._scope: Optional[ContextManager[Session]] = None

    def __enter__(self) -> "UnitOfWork":
        self._scope = session_scope(self.engine)
        session = self._scope.__enter__()
        self.session = session
        self.wallets = SQLModelWalletRepository(session)
        self.transactions = SQLModelTransactionRepository(session)
        self.categories = SQLModelCategoryRepository(session)
        self.holdings = SQLModelHoldingRepository(session)
        self.debts = SQLModelDebtRepository(session)
        self.budgets = SQLModelBudgetRepository(session)
        self.goals = SQLModelGoalRepository(session)
        self.investments = SQLModelInvestmentRepository(session)
        self.notes = SQLModelNoteRepository(session)
        self.settings = SQLModelSettingsRepository(session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._scope is not None
        scope, self._scope = self._scope, None
        self.session = None
        scope.__exit__(exc_type, exc, tb)

    def flush(self) -> None:
        assert self.session is not None
        self.session.flush()

    def purge(self) -> None:
        """Delete every row of every ledger table, children first."""
        assert self.session is not None
        from ..models import (
            AppSetting,
            BudgetEntry,
            CalendarNote,
            CryptoHolding,
            CustomCategory,
            Debt,
            DebtPayment,
            FinancialGoal,
            InvestmentAsset,
            InvestmentCase,
            Transaction,
            Wallet,
        )

        for model in (
            DebtPayment,
            Debt,
            Transaction,
            Wallet,
            InvestmentAsset,
            InvestmentCase,
            CryptoHolding,
            BudgetEntry,
            FinancialGoal,
            CalendarNote,
            CustomCategory,
            AppSetting,
        ):
            for row in self.session.exec(select(model)).all():
                self.session.delete(row)
            self.session.flush()
