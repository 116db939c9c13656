"""
Reconciliation Matcher

Expected vs unexpected receipt classification for a scanned identifier.
"""

from .router import router as reconciliation_router
from .service import ReconciliationService

__all__ = [
    "reconciliation_router",
    "ReconciliationService"
]
