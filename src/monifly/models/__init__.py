"""SQLModel table exports."""

from .budget import BudgetEntry
from .calendar_note import CalendarNote
from .category import CustomCategory
from .crypto import CryptoHolding
from .debt import Debt, DebtPayment
from .goal import FinancialGoal
from .investment import InvestmentAsset, InvestmentCase
from .settings import AppSetting
from .transaction import Transaction
from .wallet import Wallet

__all__ = [
    "AppSetting",
    "BudgetEntry",
    "CalendarNote",
    "CryptoHolding",
    "CustomCategory",
    "Debt",
    "DebtPayment",
    "FinancialGoal",
    "InvestmentAsset",
    "InvestmentCase",
    "Transaction",
    "Wallet",
]
