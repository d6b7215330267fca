"""Investment aggregator: cases, assets and portfolio-wide distributions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ..constants.categories import UNSPECIFIED_REGION
from ..domain.context import LedgerContext
from ..domain.errors import (
    ASSET_NOT_FOUND,
    CASE_NOT_FOUND,
    INVALID_INPUT,
    DomainRejection,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.investment import InvestmentAsset, InvestmentCase

logger = get_logger("services.investments")


def _require_case(uow, case_id: int) -> InvestmentCase:
    case = uow.investments.get_case(case_id)
    if case is None:
        raise DomainRejection(CASE_NOT_FOUND, "Investment case not found", case_id=case_id)
    return case


def _require_asset(uow, asset_id: int) -> InvestmentAsset:
    asset = uow.investments.get_asset(asset_id)
    if asset is None:
        raise DomainRejection(ASSET_NOT_FOUND, "Investment asset not found", asset_id=asset_id)
    return asset


def recompute_case(uow, ctx: LedgerContext, case: InvestmentCase) -> InvestmentCase:
    """Derive a case's totals from its assets, converted into the case currency."""

    invested = 0.0
    value = 0.0
    for asset in uow.investments.list_assets(case.id):
        invested += ctx.convert(asset.invested, asset.currency, case.currency)
        value += ctx.convert(asset.market_value, asset.currency, case.currency)
    case.total_investment = invested
    case.current_value = value
    case.profit = value - invested
    case.return_percentage = (case.profit / invested * 100) if invested > 0 else 0.0
    return uow.investments.save_case(case)


def add_investment_case(
    uow,
    *,
    name: str,
    currency: str,
    description: Optional[str] = None,
    strategy: Optional[str] = None,
    risk_level: Optional[str] = None,
    start_date: Optional[date] = None,
) -> InvestmentCase:
    if not (name or "").strip():
        raise DomainRejection(INVALID_INPUT, "Case name is required")
    case = InvestmentCase(
        name=name.strip(),
        currency=normalize_currency_code(currency),
        description=description,
        strategy=strategy,
        risk_level=risk_level,
    )
    if start_date is not None:
        case.start_date = start_date
    uow.investments.save_case(case)
    logger.info("Investment case created", extra={"case_id": case.id})
    return case


def update_investment_case(uow, ctx: LedgerContext, case_id: int, **changes) -> InvestmentCase:
    case = _require_case(uow, case_id)
    allowed = {"name", "description", "currency", "strategy", "risk_level", "start_date"}
    unknown = set(changes) - allowed
    if unknown:
        raise DomainRejection(INVALID_INPUT, f"Cannot edit fields: {sorted(unknown)}")
    if "currency" in changes:
        changes["currency"] = normalize_currency_code(changes["currency"])
    for key, value in changes.items():
        setattr(case, key, value)
    return recompute_case(uow, ctx, case)


def delete_investment_case(uow, case_id: int) -> None:
    _require_case(uow, case_id)
    uow.investments.delete_case(case_id)
    logger.info("Investment case deleted", extra={"case_id": case_id})


def add_asset_to_case(
    uow,
    ctx: LedgerContext,
    case_id: int,
    *,
    name: str,
    quantity: float,
    purchase_price: float,
    currency: str,
    type: str = "other",
    region: Optional[str] = None,
    current_price: Optional[float] = None,
    purchase_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> InvestmentAsset:
    """Attach an asset; its current price defaults to the purchase price."""

    case = _require_case(uow, case_id)
    price = require_positive(purchase_price, field_name="purchase_price")
    asset = InvestmentAsset(
        case_id=case.id,
        name=(name or "").strip() or "Asset",
        type=type,
        region=region or None,
        quantity=require_positive(quantity, field_name="quantity"),
        purchase_price=price,
        current_price=price if current_price is None else float(current_price),
        currency=normalize_currency_code(currency),
        purchase_date=purchase_date or ctx.reference_date,
        notes=notes,
    )
    uow.investments.save_asset(asset)
    recompute_case(uow, ctx, case)
    logger.info("Investment asset added", extra={"case_id": case.id, "asset_id": asset.id})
    return asset


_ASSET_FIELDS = (
    "name",
    "type",
    "region",
    "quantity",
    "purchase_price",
    "current_price",
    "currency",
    "purchase_date",
    "notes",
)


def update_asset(uow, ctx: LedgerContext, asset_id: int, **changes) -> InvestmentAsset:
    asset = _require_asset(uow, asset_id)
    unknown = set(changes) - set(_ASSET_FIELDS)
    if unknown:
        raise DomainRejection(INVALID_INPUT, f"Cannot edit fields: {sorted(unknown)}")
    for key in ("quantity", "purchase_price"):
        if key in changes:
            changes[key] = require_positive(changes[key], field_name=key)
    if "current_price" in changes and changes["current_price"] < 0:
        raise DomainRejection(INVALID_INPUT, "current_price cannot be negative")
    if "currency" in changes:
        changes["currency"] = normalize_currency_code(changes["currency"])
    for key, value in changes.items():
        setattr(asset, key, value)
    uow.investments.save_asset(asset)
    case = uow.investments.get_case(asset.case_id)
    if case is not None:
        recompute_case(uow, ctx, case)
    return asset


def remove_asset(uow, ctx: LedgerContext, asset_id: int) -> None:
    asset = _require_asset(uow, asset_id)
    case_id = asset.case_id
    uow.investments.delete_asset(asset_id)
    case = uow.investments.get_case(case_id)
    if case is not None:
        recompute_case(uow, ctx, case)


def refresh_case_totals(uow, ctx: LedgerContext) -> list[InvestmentCase]:
    """Recompute every case, e.g. after the rate table changed."""

    return [recompute_case(uow, ctx, case) for case in uow.investments.list_cases()]


@dataclass(frozen=True)
class PortfolioSummary:
    currency: str
    total_investment: float
    current_value: float

    @property
    def profit(self) -> float:
        return self.current_value - self.total_investment

    @property
    def return_percentage(self) -> float:
        if self.total_investment <= 0:
            return 0.0
        return self.profit / self.total_investment * 100


def portfolio_summary(uow, ctx: LedgerContext, currency: Optional[str] = None) -> PortfolioSummary:
    target = currency or ctx.display_currency
    invested = 0.0
    value = 0.0
    for case in uow.investments.list_cases():
        invested += ctx.convert(case.total_investment, case.currency, target)
        value += ctx.convert(case.current_value, case.currency, target)
    return PortfolioSummary(currency=target, total_investment=invested, current_value=value)


@dataclass(frozen=True)
class DistributionSlice:
    name: str
    value: float
    percentage: float


def apportion(totals: dict[str, float]) -> list[DistributionSlice]:
    """Turn bucket totals into slices whose percentages add up to exactly 100.00.

    Rounding leftovers land on the biggest bucket.
    """

    positive = {k: v for k, v in totals.items() if v > 0}
    grand_total = sum(positive.values())
    if grand_total <= 0:
        return []
    ordered = sorted(positive.items(), key=lambda item: item[1], reverse=True)
    percentages = [round(v / grand_total * 100, 2) for _, v in ordered]
    percentages[0] = round(percentages[0] + (100.0 - sum(percentages)), 2)
    return [
        DistributionSlice(name=name, value=round(value, 2), percentage=pct)
        for (name, value), pct in zip(ordered, percentages)
    ]


def _distribution(
    uow, ctx: LedgerContext, key: Callable[[InvestmentAsset], str]
) -> list[DistributionSlice]:
    totals: dict[str, float] = {}
    for asset in uow.investments.list_assets():
        bucket = key(asset)
        totals[bucket] = totals.get(bucket, 0.0) + ctx.to_display(
            asset.market_value, asset.currency
        )
    return apportion(totals)


def asset_type_distribution(uow, ctx: LedgerContext) -> list[DistributionSlice]:
    return _distribution(uow, ctx, lambda a: a.type or "other")


def asset_region_distribution(uow, ctx: LedgerContext) -> list[DistributionSlice]:
    return _distribution(uow, ctx, lambda a: a.region or UNSPECIFIED_REGION)


def case_assets(uow, case_id: int) -> list[InvestmentAsset]:
    _require_case(uow, case_id)
    return uow.investments.list_assets(case_id)
