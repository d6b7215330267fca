"""Repository protocol definitions for domain layer."""

from .budget import BudgetRepository
from .category import CategoryRepository
from .debt import DebtRepository
from .goal import GoalRepository
from .holding import HoldingRepository
from .investment import InvestmentRepository
from .note import NoteRepository
from .settings import SettingsRepository
from .transaction import TransactionRepository
from .wallet import WalletRepository

__all__ = [
    "BudgetRepository",
    "CategoryRepository",
    "DebtRepository",
    "GoalRepository",
    "HoldingRepository",
    "InvestmentRepository",
    "NoteRepository",
    "SettingsRepository",
    "TransactionRepository",
    "WalletRepository",
]
