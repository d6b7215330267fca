"""Ledger core: wallets, transactions, transfers and custom categories.

Every function here runs inside a :class:`~monifly.infra.UnitOfWork` and
keeps ``wallet.balance == initial_balance + sum(signed effects)`` after each
call. Failures raise :class:`DomainRejection` or :class:`IntegrityFault` so
the surrounding unit of work rolls everything back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence

from ..constants.categories import (
    DEFAULT_TRANSACTION_CATEGORIES,
    DEFAULT_WALLET_ICON,
    TRANSFER_CATEGORY,
    is_default_category,
)
from ..domain.context import LedgerContext
from ..domain.errors import (
    INSUFFICIENT_FUNDS,
    INVALID_INPUT,
    INVALID_STATE,
    TRANSACTION_NOT_FOUND,
    WALLET_NOT_FOUND,
    DomainRejection,
    IntegrityFault,
    normalize_currency_code,
    require_positive,
)
from ..logging_config import get_logger
from ..models.category import CustomCategory
from ..models.transaction import (
    EXPENSE,
    INCOME,
    TRANSACTION_TYPES,
    TRANSFER,
    TRANSFER_IN,
    TRANSFER_OUT,
    Transaction,
)
from ..models.wallet import Wallet

logger = get_logger("services.ledger")


def signed_effect(transaction: Transaction) -> float:
    """Return the balance delta a transaction applies to its wallet."""

    if transaction.type == INCOME:
        return transaction.amount
    if transaction.type == EXPENSE:
        return -transaction.amount
    if transaction.type == TRANSFER:
        if transaction.direction == TRANSFER_IN:
            return transaction.amount
        if transaction.direction == TRANSFER_OUT:
            return -transaction.amount
        return 0.0
    raise ValueError(f"Unknown transaction type: {transaction.type!r}")


def _check_type(txn_type: str) -> str:
    if txn_type not in TRANSACTION_TYPES:
        raise ValueError(f"Unknown transaction type: {txn_type!r}")
    return txn_type


def require_wallet(uow, wallet_id: int) -> Wallet:
    wallet = uow.wallets.get_by_id(wallet_id)
    if wallet is None:
        raise DomainRejection(WALLET_NOT_FOUND, "Wallet not found", wallet_id=wallet_id)
    return wallet


def require_funds(wallet: Wallet, amount: float) -> None:
    """Reject when *amount* (wallet currency) exceeds the wallet balance."""

    if amount > wallet.balance:
        raise DomainRejection(
            INSUFFICIENT_FUNDS,
            "Insufficient funds in wallet",
            wallet_id=wallet.id,
            balance=wallet.balance,
            required=amount,
        )


def _owning_wallet(uow, transaction: Transaction) -> Wallet:
    wallet = uow.wallets.get_by_id(transaction.wallet_id)
    if wallet is None:
        raise IntegrityFault(
            WALLET_NOT_FOUND,
            "Transaction references a wallet that no longer exists",
            transaction_id=transaction.id,
            wallet_id=transaction.wallet_id,
        )
    return wallet


def _apply_delta(uow, wallet: Wallet, delta: float) -> None:
    if delta:
        wallet.balance += delta
        uow.wallets.update(wallet)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def register_category(uow, name: Optional[str]) -> Optional[str]:
    """Add *name* to the custom set unless blank or already known."""

    cleaned = (name or "").strip()
    if not cleaned or is_default_category(cleaned):
        return None
    if uow.categories.find(cleaned) is not None:
        return None
    uow.categories.create(CustomCategory(name=cleaned))
    logger.info("Custom category registered", extra={"category": cleaned})
    return cleaned


def list_categories(uow) -> list[str]:
    """Default categories followed by custom names in alphabetical order."""

    return list(DEFAULT_TRANSACTION_CATEGORIES) + uow.categories.list_names()


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


def _clear_default(uow, keep_id: Optional[int]) -> None:
    for wallet in uow.wallets.list_all():
        if wallet.is_default and wallet.id != keep_id:
            wallet.is_default = False
            uow.wallets.update(wallet)


def add_wallet(
    uow,
    *,
    name: str,
    currency: str,
    initial_balance: float = 0.0,
    icon: Optional[str] = None,
    color: Optional[str] = None,
    is_default: bool = False,
) -> Wallet:
    cleaned = (name or "").strip()
    if not cleaned:
        raise DomainRejection(INVALID_INPUT, "Wallet name is required")
    existing = uow.wallets.list_all()
    wallet = Wallet(
        name=cleaned,
        currency=normalize_currency_code(currency),
        balance=float(initial_balance),
        initial_balance=float(initial_balance),
        icon=icon or DEFAULT_WALLET_ICON,
        color=color,
        # The first wallet becomes the default one
        is_default=is_default or not existing,
        position=len(existing),
    )
    uow.wallets.create(wallet)
    if wallet.is_default:
        _clear_default(uow, wallet.id)
    logger.info(
        "Wallet created",
        extra={"wallet_id": wallet.id, "currency": wallet.currency, "balance": wallet.balance},
    )
    return wallet


def update_wallet(
    uow,
    wallet_id: int,
    *,
    name: Optional[str] = None,
    currency: Optional[str] = None,
    balance: Optional[float] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_default: Optional[bool] = None,
) -> Wallet:
    """Edit wallet attributes.

    A direct balance edit re-seeds ``initial_balance`` so that the
    seed-plus-effects invariant still holds afterwards.
    """

    wallet = require_wallet(uow, wallet_id)
    if name is not None:
        cleaned = name.strip()
        if not cleaned:
            raise DomainRejection(INVALID_INPUT, "Wallet name is required")
        wallet.name = cleaned
    if currency is not None:
        code = normalize_currency_code(currency)
        if code != wallet.currency:
            if uow.transactions.filter_by_wallet(wallet_id):
                raise DomainRejection(
                    INVALID_STATE,
                    "Cannot change the currency of a wallet with transactions",
                    wallet_id=wallet_id,
                )
            wallet.currency = code
    if balance is not None:
        effects = sum(signed_effect(t) for t in uow.transactions.filter_by_wallet(wallet_id))
        wallet.balance = float(balance)
        wallet.initial_balance = float(balance) - effects
    if icon is not None:
        wallet.icon = icon
    if color is not None:
        wallet.color = color
    if is_active is not None:
        wallet.is_active = is_active
    if is_default is not None:
        wallet.is_default = is_default
    uow.wallets.update(wallet)
    if wallet.is_default:
        _clear_default(uow, wallet.id)
    logger.info("Wallet updated", extra={"wallet_id": wallet.id})
    return wallet


def delete_wallet(uow, wallet_id: int) -> int:
    """Remove a wallet together with its transactions; returns the count removed."""

    wallet = require_wallet(uow, wallet_id)
    removed = 0
    for txn in uow.transactions.filter_by_wallet(wallet_id):
        if txn.transfer_peer_id is not None:
            peer = uow.transactions.get_by_id(txn.transfer_peer_id)
            if peer is not None and peer.wallet_id != wallet_id:
                peer_wallet = _owning_wallet(uow, peer)
                _apply_delta(uow, peer_wallet, -signed_effect(peer))
                uow.transactions.delete(peer.id)
                removed += 1
    removed += uow.transactions.delete_by_wallet(wallet_id)
    was_default = wallet.is_default
    uow.wallets.delete(wallet_id)
    if was_default:
        remaining = uow.wallets.list_all()
        if remaining:
            remaining[0].is_default = True
            uow.wallets.update(remaining[0])
    logger.info("Wallet deleted", extra={"wallet_id": wallet_id, "transactions": removed})
    return removed


def reorder_wallets(uow, wallet_ids: Sequence[int]) -> list[Wallet]:
    wallets = {w.id: w for w in uow.wallets.list_all()}
    if set(wallet_ids) != set(wallets):
        raise DomainRejection(INVALID_INPUT, "Reorder must list every wallet exactly once")
    for position, wallet_id in enumerate(wallet_ids):
        wallet = wallets[wallet_id]
        wallet.position = position
        uow.wallets.update(wallet)
    return uow.wallets.list_all()


def set_default_wallet(uow, wallet_id: int) -> Wallet:
    wallet = require_wallet(uow, wallet_id)
    wallet.is_default = True
    uow.wallets.update(wallet)
    _clear_default(uow, wallet.id)
    return wallet


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def post_transaction(
    uow,
    ctx: LedgerContext,
    *,
    wallet_id: int,
    type: str,
    amount: float,
    currency: Optional[str] = None,
    category: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    description: str = "",
    tags: Optional[Iterable[str]] = None,
    debt_id: Optional[int] = None,
) -> Transaction:
    """Create a transaction and apply its effect to the owning wallet.

    The amount is converted from *currency* into the wallet currency and
    stored in that form only.
    """

    _check_type(type)
    value = require_positive(amount)
    wallet = require_wallet(uow, wallet_id)
    source_currency = normalize_currency_code(currency) if currency else wallet.currency
    stored_amount = ctx.convert(value, source_currency, wallet.currency)
    category_name = (category or "").strip() or "other"

    txn = Transaction(
        wallet_id=wallet.id,
        type=type,
        category=category_name,
        amount=stored_amount,
        currency=wallet.currency,
        occurred_at=occurred_at or ctx.now(),
        description=description or "",
        tags=list(tags or []),
        debt_id=debt_id,
    )
    uow.transactions.create(txn)
    _apply_delta(uow, wallet, signed_effect(txn))
    register_category(uow, category_name)
    logger.info(
        "Transaction created",
        extra={
            "transaction_id": txn.id,
            "wallet_id": wallet.id,
            "type": type,
            "amount": stored_amount,
            "currency": wallet.currency,
        },
    )
    return txn


create_transaction = post_transaction


def update_transaction(
    uow,
    ctx: LedgerContext,
    transaction_id: int,
    *,
    wallet_id: Optional[int] = None,
    type: Optional[str] = None,
    amount: Optional[float] = None,
    currency: Optional[str] = None,
    category: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    description: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> Transaction:
    """Change a transaction and repair both affected wallets together."""

    txn = uow.transactions.get_by_id(transaction_id)
    if txn is None:
        raise DomainRejection(
            TRANSACTION_NOT_FOUND, "Transaction not found", transaction_id=transaction_id
        )
    if txn.transfer_peer_id is not None:
        raise DomainRejection(
            INVALID_STATE,
            "Transfer legs cannot be edited; delete and recreate the transfer",
            transaction_id=transaction_id,
        )
    if type is not None:
        _check_type(type)
    if amount is not None:
        require_positive(amount)

    old_wallet = _owning_wallet(uow, txn)
    new_wallet = require_wallet(uow, wallet_id) if wallet_id is not None else old_wallet

    # Undo the old effect before computing the new one
    _apply_delta(uow, old_wallet, -signed_effect(txn))

    source_amount = float(amount) if amount is not None else txn.amount
    source_currency = normalize_currency_code(currency) if currency else txn.currency
    txn.amount = ctx.convert(source_amount, source_currency, new_wallet.currency)
    txn.currency = new_wallet.currency
    txn.wallet_id = new_wallet.id
    if type is not None:
        txn.type = type
    if category is not None:
        txn.category = category.strip() or "other"
        register_category(uow, txn.category)
    if occurred_at is not None:
        txn.occurred_at = occurred_at
    if description is not None:
        txn.description = description
    if tags is not None:
        txn.tags = list(tags)

    uow.transactions.update(txn)
    _apply_delta(uow, new_wallet, signed_effect(txn))
    logger.info(
        "Transaction updated",
        extra={
            "transaction_id": txn.id,
            "old_wallet_id": old_wallet.id,
            "wallet_id": new_wallet.id,
            "amount": txn.amount,
        },
    )
    return txn


def delete_transaction(uow, transaction_id: int) -> None:
    """Remove a transaction (and its transfer peer) and reverse its effect."""

    txn = uow.transactions.get_by_id(transaction_id)
    if txn is None:
        raise DomainRejection(
            TRANSACTION_NOT_FOUND, "Transaction not found", transaction_id=transaction_id
        )
    wallet = _owning_wallet(uow, txn)
    peer = (
        uow.transactions.get_by_id(txn.transfer_peer_id)
        if txn.transfer_peer_id is not None
        else None
    )
    peer_wallet = _owning_wallet(uow, peer) if peer is not None else None

    _apply_delta(uow, wallet, -signed_effect(txn))
    uow.transactions.delete(txn.id)
    if peer is not None and peer_wallet is not None:
        _apply_delta(uow, peer_wallet, -signed_effect(peer))
        uow.transactions.delete(peer.id)
    logger.info(
        "Transaction deleted",
        extra={"transaction_id": transaction_id, "peer_id": peer.id if peer else None},
    )


def create_transfer(
    uow,
    ctx: LedgerContext,
    *,
    from_wallet_id: int,
    to_wallet_id: int,
    amount: float,
    currency: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    description: str = "",
) -> tuple[Transaction, Transaction]:
    """Post a linked pair of transfer legs between two wallets."""

    value = require_positive(amount)
    if from_wallet_id == to_wallet_id:
        raise DomainRejection(INVALID_INPUT, "Cannot transfer into the same wallet")
    source = require_wallet(uow, from_wallet_id)
    target = require_wallet(uow, to_wallet_id)
    entry_currency = normalize_currency_code(currency) if currency else source.currency
    when = occurred_at or ctx.now()

    outgoing = Transaction(
        wallet_id=source.id,
        type=TRANSFER,
        category=TRANSFER_CATEGORY,
        amount=ctx.convert(value, entry_currency, source.currency),
        currency=source.currency,
        occurred_at=when,
        description=description,
        tags=[],
        direction=TRANSFER_OUT,
    )
    incoming = Transaction(
        wallet_id=target.id,
        type=TRANSFER,
        category=TRANSFER_CATEGORY,
        amount=ctx.convert(value, entry_currency, target.currency),
        currency=target.currency,
        occurred_at=when,
        description=description,
        tags=[],
        direction=TRANSFER_IN,
    )
    uow.transactions.create(outgoing)
    uow.transactions.create(incoming)
    outgoing.transfer_peer_id = incoming.id
    incoming.transfer_peer_id = outgoing.id
    uow.transactions.update(outgoing)
    uow.transactions.update(incoming)

    _apply_delta(uow, source, signed_effect(outgoing))
    _apply_delta(uow, target, signed_effect(incoming))
    logger.info(
        "Transfer created",
        extra={
            "from_wallet_id": source.id,
            "to_wallet_id": target.id,
            "amount": value,
            "currency": entry_currency,
        },
    )
    return outgoing, incoming


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def list_transactions(uow) -> list[Transaction]:
    return uow.transactions.list_all()


def transactions_for_wallet(uow, wallet_id: int) -> list[Transaction]:
    return uow.transactions.filter_by_wallet(wallet_id)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def transactions_on_date(uow, day: date) -> list[Transaction]:
    start, end = day_bounds(day)
    return uow.transactions.filter_by_date_range(start, end)


def transactions_for_category(
    uow, category: str, start: Optional[date] = None, end: Optional[date] = None
) -> list[Transaction]:
    rows = uow.transactions.filter_by_category(category)
    if start is not None:
        rows = [t for t in rows if t.occurred_at.date() >= start]
    if end is not None:
        rows = [t for t in rows if t.occurred_at.date() <= end]
    return rows


def total_balance(uow, ctx: LedgerContext, currency: Optional[str] = None) -> float:
    """Sum of every wallet balance converted into *currency* (display by default)."""

    target = currency or ctx.display_currency
    return ctx.converter.convert_many(
        ((w.balance, w.currency) for w in uow.wallets.list_all()), target
    )


@dataclass(frozen=True)
class BalanceDrift:
    """A wallet whose stored balance disagrees with its transaction history."""

    wallet_id: int
    name: str
    stored: float
    expected: float

    @property
    def difference(self) -> float:
        return self.stored - self.expected


def verify_balances(uow, *, tolerance: float = 1e-6) -> list[BalanceDrift]:
    """Recompute every wallet from its seed and postings and report mismatches."""

    drifts: list[BalanceDrift] = []
    for wallet in uow.wallets.list_all():
        expected = wallet.initial_balance + sum(
            signed_effect(t) for t in uow.transactions.filter_by_wallet(wallet.id)
        )
        if abs(wallet.balance - expected) > tolerance:
            drifts.append(
                BalanceDrift(
                    wallet_id=wallet.id,
                    name=wallet.name,
                    stored=wallet.balance,
                    expected=expected,
                )
            )
    if drifts:
        logger.error(
            "Wallet balance drift detected",
            extra={"wallets": [d.wallet_id for d in drifts]},
        )
    return drifts
