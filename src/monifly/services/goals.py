"""Goal projection calculator and goal lifecycle."""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from ..domain.context import LedgerContext
from ..domain.errors import (
    GOAL_NOT_FOUND,
    INVALID_INPUT,
    INVALID_STATE,
    DomainRejection,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.goal import ACTIVE, CANCELLED, COMPLETED, GOAL_STATUSES, PAUSED, FinancialGoal
from .currency import CurrencyConverter
from .periods import add_months

logger = get_logger("services.goals")

_TRANSITIONS = {
    ACTIVE: {PAUSED, CANCELLED},
    PAUSED: {ACTIVE, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}


def projected_completion_date(
    start_date: date,
    target_amount: float,
    target_currency: str,
    monthly_contribution: float,
    contribution_currency: str,
    converter: CurrencyConverter,
) -> Optional[date]:
    """Estimate when a goal is fully funded; ``None`` when there is no funding plan."""

    monthly = converter.convert(monthly_contribution, contribution_currency, target_currency)
    if monthly <= 0 or target_amount <= 0:
        return None
    months_needed = math.ceil(target_amount / monthly)
    return add_months(start_date, months_needed)


def _refresh_projection(goal: FinancialGoal, ctx: LedgerContext) -> None:
    goal.projected_completion_date = projected_completion_date(
        goal.start_date,
        goal.target_amount,
        goal.target_currency,
        goal.monthly_contribution,
        goal.contribution_currency,
        ctx.converter,
    )


def _check_completion(goal: FinancialGoal) -> bool:
    if goal.status == ACTIVE and goal.current_amount >= goal.target_amount:
        goal.status = COMPLETED
        logger.info("Goal completed", extra={"goal_id": goal.id})
        return True
    return False


def _require_goal(uow, goal_id: int) -> FinancialGoal:
    goal = uow.goals.get_by_id(goal_id)
    if goal is None:
        raise DomainRejection(GOAL_NOT_FOUND, "Goal not found", goal_id=goal_id)
    return goal


def add_goal(
    uow,
    ctx: LedgerContext,
    *,
    title: str,
    target_amount: float,
    target_currency: Optional[str] = None,
    monthly_contribution: float = 0.0,
    current_amount: float = 0.0,
    type: str = "saving",
    description: Optional[str] = None,
    priority: int = 0,
    target_date: Optional[date] = None,
    start_date: Optional[date] = None,
) -> FinancialGoal:
    if not (title or "").strip():
        raise DomainRejection(INVALID_INPUT, "Goal title is required")
    if monthly_contribution < 0 or current_amount < 0:
        raise DomainRejection(INVALID_INPUT, "Amounts cannot be negative")
    goal = FinancialGoal(
        title=title.strip(),
        description=description,
        type=type,
        target_amount=require_positive(target_amount, field_name="target_amount"),
        target_currency=normalize_currency_code(target_currency or ctx.display_currency),
        current_amount=float(current_amount),
        monthly_contribution=float(monthly_contribution),
        contribution_currency=ctx.display_currency,
        start_date=start_date or ctx.reference_date,
        target_date=target_date,
        priority=priority,
        status=ACTIVE,
        created_at=ctx.now(),
    )
    _refresh_projection(goal, ctx)
    _check_completion(goal)
    uow.goals.create(goal)
    logger.info(
        "Goal created",
        extra={"goal_id": goal.id, "projected": goal.projected_completion_date},
    )
    return goal


_EDITABLE = (
    "title",
    "description",
    "type",
    "target_amount",
    "target_currency",
    "current_amount",
    "monthly_contribution",
    "start_date",
    "target_date",
    "priority",
)


def update_goal(uow, ctx: LedgerContext, goal_id: int, **changes) -> FinancialGoal:
    """Edit goal fields and recompute its projected completion date."""

    goal = _require_goal(uow, goal_id)
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise DomainRejection(INVALID_INPUT, f"Cannot edit fields: {sorted(unknown)}")
    if "target_amount" in changes:
        changes["target_amount"] = require_positive(
            changes["target_amount"], field_name="target_amount"
        )
    if "target_currency" in changes:
        changes["target_currency"] = normalize_currency_code(changes["target_currency"])
    if "monthly_contribution" in changes:
        if changes["monthly_contribution"] < 0:
            raise DomainRejection(INVALID_INPUT, "monthly_contribution cannot be negative")
        # Contributions are always entered in the current display currency
        goal.contribution_currency = ctx.display_currency
    for key, value in changes.items():
        setattr(goal, key, value)
    _refresh_projection(goal, ctx)
    _check_completion(goal)
    return uow.goals.update(goal)


def add_goal_contribution(
    uow, ctx: LedgerContext, goal_id: int, amount: float, currency: Optional[str] = None
) -> FinancialGoal:
    """Add money toward a goal, completing it once the target is reached."""

    value = require_positive(amount)
    goal = _require_goal(uow, goal_id)
    if goal.status in (COMPLETED, CANCELLED):
        raise DomainRejection(
            INVALID_STATE, f"Goal is {goal.status}", goal_id=goal_id, status=goal.status
        )
    source = normalize_currency_code(currency) if currency else goal.target_currency
    goal.current_amount += ctx.convert(value, source, goal.target_currency)
    _check_completion(goal)
    uow.goals.update(goal)
    logger.info(
        "Goal contribution added",
        extra={"goal_id": goal.id, "current_amount": goal.current_amount, "status": goal.status},
    )
    return goal


def set_goal_status(uow, goal_id: int, status: str) -> FinancialGoal:
    """Pause, resume or cancel a goal."""

    if status not in GOAL_STATUSES:
        raise DomainRejection(INVALID_INPUT, f"Unknown goal status: {status!r}")
    goal = _require_goal(uow, goal_id)
    if status == goal.status:
        return goal
    if status not in _TRANSITIONS[goal.status]:
        raise DomainRejection(
            INVALID_STATE,
            f"Cannot move goal from {goal.status} to {status}",
            goal_id=goal_id,
        )
    goal.status = status
    _check_completion(goal)
    return uow.goals.update(goal)


def delete_goal(uow, goal_id: int) -> None:
    _require_goal(uow, goal_id)
    uow.goals.delete(goal_id)


def list_goals(uow) -> list[FinancialGoal]:
    return uow.goals.list_all()
