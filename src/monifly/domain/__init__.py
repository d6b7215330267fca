"""Domain layer: errors, calculation context and repository contracts."""

from .context import LedgerContext
from .errors import DomainRejection, IntegrityFault, LedgerError, OperationResult

__all__ = [
    "DomainRejection",
    "IntegrityFault",
    "LedgerContext",
    "LedgerError",
    "OperationResult",
]
