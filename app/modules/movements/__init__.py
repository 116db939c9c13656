"""
Movement Engine

Ship, receive, assign-bin, add-unexpected and cancel. Every write to a
product row's quantity or location goes through here.
"""

from .router import router as movements_router
from .service import MovementService
from .repository import MovementRepository

__all__ = [
    "movements_router",
    "MovementService",
    "MovementRepository"
]
