"""Ledger error hierarchy and structured operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

REJECTED = "rejected"
INTEGRITY = "integrity"


class LedgerError(Exception):
    """Base class for failures raised inside a unit of work."""

    kind = REJECTED

    def __init__(self, code: str, message: str, **details: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class DomainRejection(LedgerError):
    """User-recoverable rejection (insufficient funds, bad amount, missing wallet...)."""

    kind = REJECTED


class IntegrityFault(LedgerError):
    """Stored state is already inconsistent; the operation is a no-op."""

    kind = INTEGRITY


# Rejection codes
INVALID_AMOUNT = "invalid_amount"
INSUFFICIENT_FUNDS = "insufficient_funds"
INSUFFICIENT_QUANTITY = "insufficient_quantity"
WALLET_NOT_FOUND = "wallet_not_found"
TRANSACTION_NOT_FOUND = "transaction_not_found"
HOLDING_NOT_FOUND = "holding_not_found"
DEBT_NOT_FOUND = "debt_not_found"
BUDGET_NOT_FOUND = "budget_not_found"
GOAL_NOT_FOUND = "goal_not_found"
CASE_NOT_FOUND = "case_not_found"
ASSET_NOT_FOUND = "asset_not_found"
NOTE_NOT_FOUND = "note_not_found"
INVALID_STATE = "invalid_state"
INVALID_INPUT = "invalid_input"
UNSUPPORTED_VERSION = "unsupported_version"


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a public ledger operation.

    ``kind`` is ``"rejected"`` for domain rejections and ``"integrity"`` for
    integrity faults so diagnostics can tell them apart.
    """

    ok: bool
    value: Optional[T] = None
    code: Optional[str] = None
    message: Optional[str] = None
    kind: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: LedgerError) -> "OperationResult[T]":
        return cls(
            ok=False,
            code=error.code,
            message=error.message,
            kind=error.kind,
            details=dict(error.details),
        )

    @property
    def rejected(self) -> bool:
        return not self.ok and self.kind == REJECTED

    @property
    def integrity_fault(self) -> bool:
        return not self.ok and self.kind == INTEGRITY

    def __bool__(self) -> bool:
        return self.ok


def require_positive(amount: float, *, field_name: str = "amount") -> float:
    """Reject zero, negative or non-finite amounts."""

    try:
        value = float(amount)
    except (TypeError, ValueError) as exc:
        raise DomainRejection(INVALID_AMOUNT, f"{field_name} must be a number") from exc
    if value != value or value in (float("inf"), float("-inf")) or value <= 0:
        raise DomainRejection(
            INVALID_AMOUNT, f"{field_name} must be greater than zero", value=value
        )
    return value


def normalize_currency_code(code: str) -> str:
    """Upper-case and validate a 3-letter currency code."""

    normalized = (code or "").strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise DomainRejection(INVALID_INPUT, f"Invalid currency code: {code!r}")
    return normalized
