from .ledger_service import LedgerService, LedgerState
from .export_service import ExportService

__all__ = [
    "LedgerService",
    "LedgerState",
    "ExportService",
]
