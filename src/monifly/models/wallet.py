"""Wallet model: a named balance bucket in one currency."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Wallet(SQLModel, table=True):
    """Balance bucket owned by the ledger.

    ``balance`` always equals ``initial_balance`` plus the signed effect of
    every transaction posted to the wallet.
    """

    __tablename__: ClassVar[str] = "wallet"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    currency: str = Field(default="USD", max_length=3, description="ISO-4217 currency code")
    balance: float = Field(default=0.0, nullable=False)
    initial_balance: float = Field(default=0.0, nullable=False)
    is_default: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    icon: Optional[str] = Field(default=None, max_length=32)
    color: Optional[str] = Field(default=None, max_length=16)
    position: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)
