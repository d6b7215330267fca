"""SQLModel implementation of the investment repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.investment import InvestmentAsset, InvestmentCase


class SQLModelInvestmentRepository:
    """Cases and assets share one repository; assets never outlive their case."""

    def __init__(self, session: Session):
        self.session = session

    def get_case(self, case_id: int) -> Optional[InvestmentCase]:
        return self.session.get(InvestmentCase, case_id)

    def list_cases(self) -> list[InvestmentCase]:
        statement = select(InvestmentCase).order_by(InvestmentCase.id)  # type: ignore
        return list(self.session.exec(statement).all())

    def save_case(self, case: InvestmentCase) -> InvestmentCase:
        self.session.add(case)
        self.session.flush()
        return case

    def delete_case(self, case_id: int) -> None:
        for asset in self.list_assets(case_id):
            self.session.delete(asset)
        case = self.session.get(InvestmentCase, case_id)
        if case:
            self.session.delete(case)
        self.session.flush()

    def get_asset(self, asset_id: int) -> Optional[InvestmentAsset]:
        return self.session.get(InvestmentAsset, asset_id)

    def list_assets(self, case_id: Optional[int] = None) -> list[InvestmentAsset]:
        statement = select(InvestmentAsset)
        if case_id is not None:
            statement = statement.where(InvestmentAsset.case_id == case_id)
        statement = statement.order_by(InvestmentAsset.id)  # type: ignore
        return list(self.session.exec(statement).all())

    def save_asset(self, asset: InvestmentAsset) -> InvestmentAsset:
        self.session.add(asset)
        self.session.flush()
        return asset

    def delete_asset(self, asset_id: int) -> None:
        obj = self.session.get(InvestmentAsset, asset_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()


__all__ = ["SQLModelInvestmentRepository"]
