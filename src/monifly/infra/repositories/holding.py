"""SQLModel implementation of the crypto Holding repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.crypto import CryptoHolding


class SQLModelHoldingRepository:
    """SQLModel-based holding repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, holding_id: int) -> Optional[CryptoHolding]:
        return self.session.get(CryptoHolding, holding_id)

    def get_by_symbol(self, symbol: str) -> Optional[CryptoHolding]:
        statement = select(CryptoHolding).where(CryptoHolding.symbol == symbol.upper())
        return self.session.exec(statement).first()

    def list_all(self) -> list[CryptoHolding]:
        statement = select(CryptoHolding).order_by(CryptoHolding.symbol)  # type: ignore
        return list(self.session.exec(statement).all())

    def create(self, holding: CryptoHolding) -> CryptoHolding:
        self.session.add(holding)
        self.session.flush()
        return holding

    def update(self, holding: CryptoHolding) -> CryptoHolding:
        self.session.add(holding)
        self.session.flush()
        return holding

    def delete(self, holding_id: int) -> None:
        obj = self.session.get(CryptoHolding, holding_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()


__all__ = ["SQLModelHoldingRepository"]
