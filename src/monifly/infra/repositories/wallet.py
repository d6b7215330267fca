"""SQLModel implementation of Wallet repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.wallet import Wallet


class SQLModelWalletRepository:
    """SQLModel-based wallet repository bound to a unit-of-work session."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, wallet_id: int) -> Optional[Wallet]:
        return self.session.get(Wallet, wallet_id)

    def get_default(self) -> Optional[Wallet]:
        return self.session.exec(select(Wallet).where(Wallet.is_default == True)).first()  # noqa: E712

    def list_all(self) -> list[Wallet]:
        statement = select(Wallet).order_by(Wallet.position, Wallet.id)  # type: ignore
        return list(self.session.exec(statement).all())

    def create(self, wallet: Wallet) -> Wallet:
        self.session.add(wallet)
        self.session.flush()
        return wallet

    def update(self, wallet: Wallet) -> Wallet:
        self.session.add(wallet)
        self.session.flush()
        return wallet

    def delete(self, wallet_id: int) -> None:
        wallet = self.session.get(Wallet, wallet_id)
        if wallet:
            self.session.delete(wallet)
            self.session.flush()


__all__ = ["SQLModelWalletRepository"]
