"""SQLModel repository implementations."""

from .budget import SQLModelBudgetRepository
from .category import SQLModelCategoryRepository
from .debt import SQLModelDebtRepository
from .goal import SQLModelGoalRepository
from .holding import SQLModelHoldingRepository
from .investment import SQLModelInvestmentRepository
from .note import SQLModelNoteRepository
from .settings import SQLModelSettingsRepository
from .transaction import SQLModelTransactionRepository
from .wallet import SQLModelWalletRepository

__all__ = [
    "SQLModelBudgetRepository",
    "SQLModelCategoryRepository",
    "SQLModelDebtRepository",
    "SQLModelGoalRepository",
    "SQLModelHoldingRepository",
    "SQLModelInvestmentRepository",
    "SQLModelNoteRepository",
    "SQLModelSettingsRepository",
    "SQLModelTransactionRepository",
    "SQLModelWalletRepository",
]
