"""
Bin Registry

Storage slots scoped to a warehouse, capacity checks for stock placement and
the bin-contents view.
"""

from .router import router as bins_router
from .service import BinService
from .repository import BinRepository

__all__ = [
    "bins_router",
    "BinService",
    "BinRepository"
]
