"""Debt lifecycle manager.

Status flow is ``pending -> partiallyPaid -> paid`` with ``cancelled``
reachable from any open state. Overdue debts keep the ``overdue`` status
until they are settled.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..constants.categories import DEBT_CATEGORY
from ..domain.context import LedgerContext
from ..domain.errors import (
    DEBT_NOT_FOUND,
    INVALID_INPUT,
    INVALID_STATE,
    DomainRejection,
    IntegrityFault,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.debt import (
    CANCELLED,
    DEBT_TYPES,
    I_OWE,
    OVERDUE,
    OWED_TO_ME,
    PAID,
    PARTIALLY_PAID,
    PENDING,
    TERMINAL_STATUSES,
    Debt,
    DebtPayment,
)
from ..models.transaction import EXPENSE, INCOME
from . import ledger

logger = get_logger("services.debts")

PAID_EPSILON = 0.001


def status_after_payment(debt: Debt) -> str:
    """Status implied by ``paid_amount``; never moves an overdue debt back to open."""

    if debt.paid_amount >= debt.initial_amount - PAID_EPSILON:
        return PAID
    if debt.status == OVERDUE:
        return OVERDUE
    if debt.paid_amount > 0:
        return PARTIALLY_PAID
    return PENDING


def _require_debt(uow, debt_id: int) -> Debt:
    debt = uow.debts.get_by_id(debt_id)
    if debt is None:
        raise DomainRejection(DEBT_NOT_FOUND, "Debt not found", debt_id=debt_id)
    return debt


def _label(debt: Debt) -> str:
    return f"{debt.person_name or 'Unknown'} ({debt.title or debt.description or 'Debt'})"


def create_debt(
    uow,
    ctx: LedgerContext,
    *,
    type: str,
    person_name: str,
    amount: float,
    currency: str,
    wallet_id: int,
    title: Optional[str] = None,
    due_date: Optional[date] = None,
    interest_rate: float = 0.0,
    description: Optional[str] = None,
) -> Debt:
    """Record a debt and post the initial cash movement to *wallet_id*.

    Borrowing (``iOwe``) credits the wallet; lending (``owedToMe``) debits it
    and requires enough balance.
    """

    if type not in DEBT_TYPES:
        raise DomainRejection(INVALID_INPUT, f"Unknown debt type: {type!r}")
    value = require_positive(amount)
    code = normalize_currency_code(currency)
    wallet = ledger.require_wallet(uow, wallet_id)

    if type == OWED_TO_ME:
        ledger.require_funds(wallet, ctx.convert(value, code, wallet.currency))

    debt = Debt(
        type=type,
        person_name=(person_name or "").strip(),
        title=(title or description or "Debt").strip(),
        description=description,
        initial_amount=value,
        paid_amount=0.0,
        currency=code,
        interest_rate=float(interest_rate or 0.0),
        start_date=ctx.reference_date,
        due_date=due_date,
        status=PENDING,
        initial_wallet_id=wallet.id,
        created_at=ctx.now(),
    )
    uow.debts.create(debt)

    if type == I_OWE:
        txn_type, text = INCOME, f"Loan received from {_label(debt)}"
    else:
        txn_type, text = EXPENSE, f"Loan given to {_label(debt)}"
    ledger.post_transaction(
        uow,
        ctx,
        wallet_id=wallet.id,
        type=txn_type,
        amount=value,
        currency=code,
        category=DEBT_CATEGORY,
        description=text,
        debt_id=debt.id,
    )
    logger.info(
        "Debt created",
        extra={"debt_id": debt.id, "type": type, "amount": value, "currency": code},
    )
    return debt


def record_debt_payment(
    uow,
    ctx: LedgerContext,
    *,
    debt_id: int,
    wallet_id: int,
    amount: float,
    currency: Optional[str] = None,
    paid_on: Optional[date] = None,
    note: str = "",
) -> DebtPayment:
    """Apply a payment, clamped to what is still owed, and post its counter-transaction."""

    requested = require_positive(amount)
    debt = uow.debts.get_by_id(debt_id)
    if debt is None:
        raise IntegrityFault(
            DEBT_NOT_FOUND, "Payment references a debt that no longer exists", debt_id=debt_id
        )
    if debt.status in TERMINAL_STATUSES:
        raise DomainRejection(
            INVALID_STATE, f"Debt is already {debt.status}", debt_id=debt_id, status=debt.status
        )
    wallet = ledger.require_wallet(uow, wallet_id)

    source_currency = normalize_currency_code(currency) if currency else debt.currency
    in_debt_currency = ctx.convert(requested, source_currency, debt.currency)
    actual = min(in_debt_currency, debt.remaining)
    if actual <= 0:
        raise DomainRejection(INVALID_STATE, "Nothing left to pay on this debt", debt_id=debt_id)

    when = paid_on or ctx.reference_date
    txn_type = EXPENSE if debt.type == I_OWE else INCOME
    if debt.type == I_OWE:
        text = f"Debt payment to {_label(debt)}"
    else:
        text = f"Debt repayment from {_label(debt)}"
    if note:
        text = f"{text} - {note}"

    txn = ledger.post_transaction(
        uow,
        ctx,
        wallet_id=wallet.id,
        type=txn_type,
        amount=actual,
        currency=debt.currency,
        category=DEBT_CATEGORY,
        occurred_at=datetime.combine(when, time.min) if paid_on else ctx.now(),
        description=text,
        debt_id=debt.id,
    )

    debt.paid_amount = min(debt.paid_amount + actual, debt.initial_amount)
    debt.status = status_after_payment(debt)
    uow.debts.update(debt)

    payment = DebtPayment(
        debt_id=debt.id,
        amount=actual,
        currency=debt.currency,
        paid_on=when,
        description=note,
        wallet_id=wallet.id,
        transaction_id=txn.id,
    )
    uow.debts.add_payment(payment)
    logger.info(
        "Debt payment recorded",
        extra={
            "debt_id": debt.id,
            "requested": in_debt_currency,
            "applied": actual,
            "paid_amount": debt.paid_amount,
            "status": debt.status,
        },
    )
    return payment


def update_debt(
    uow,
    debt_id: int,
    *,
    person_name: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    interest_rate: Optional[float] = None,
) -> Debt:
    """Edit descriptive fields; amounts only change through payments."""

    debt = _require_debt(uow, debt_id)
    if person_name is not None:
        debt.person_name = person_name.strip()
    if title is not None:
        debt.title = title.strip()
    if description is not None:
        debt.description = description
    if due_date is not None:
        debt.due_date = due_date
    if interest_rate is not None:
        debt.interest_rate = float(interest_rate)
    return uow.debts.update(debt)


def cancel_debt(uow, debt_id: int) -> Debt:
    debt = _require_debt(uow, debt_id)
    if debt.status in TERMINAL_STATUSES:
        raise DomainRejection(
            INVALID_STATE, f"Debt is already {debt.status}", debt_id=debt_id, status=debt.status
        )
    debt.status = CANCELLED
    uow.debts.update(debt)
    logger.info("Debt cancelled", extra={"debt_id": debt_id})
    return debt


def delete_debt(uow, debt_id: int) -> None:
    """Remove the debt and its payments; posted ledger transactions stay."""

    _require_debt(uow, debt_id)
    uow.debts.delete(debt_id)
    logger.info("Debt deleted", extra={"debt_id": debt_id})


def mark_overdue_debts(uow, reference_date: date) -> list[int]:
    """Flag open debts whose due date has passed; returns the affected ids."""

    flagged: list[int] = []
    for debt in uow.debts.list_all():
        if debt.status not in (PENDING, PARTIALLY_PAID):
            continue
        if debt.due_date is not None and debt.due_date < reference_date:
            debt.status = OVERDUE
            uow.debts.update(debt)
            flagged.append(debt.id)
    if flagged:
        logger.info("Debts marked overdue", extra={"debt_ids": flagged})
    return flagged


def _open_debts(uow, debt_type: str) -> list[Debt]:
    return [
        d
        for d in uow.debts.list_all()
        if d.type == debt_type and d.status not in TERMINAL_STATUSES
    ]


def debts_i_owe(uow) -> list[Debt]:
    return _open_debts(uow, I_OWE)


def debts_owed_to_me(uow) -> list[Debt]:
    return _open_debts(uow, OWED_TO_ME)


def debt_payments(uow, debt_id: int) -> list[DebtPayment]:
    _require_debt(uow, debt_id)
    return uow.debts.list_payments(debt_id)


def outstanding_totals(uow, ctx: LedgerContext, currency: Optional[str] = None) -> dict[str, float]:
    """Remaining amounts of open debts per direction, in one currency."""

    target = currency or ctx.display_currency
    return {
        I_OWE: sum(ctx.convert(d.remaining, d.currency, target) for d in debts_i_owe(uow)),
        OWED_TO_ME: sum(
            ctx.convert(d.remaining, d.currency, target) for d in debts_owed_to_me(uow)
        ),
    }
