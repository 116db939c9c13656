"""
Warehouse Registry

Physical stock locations. Warehouses are deactivated, never deleted, because
products and movements reference them historically.
"""

from .router import router as warehouses_router
from .service import WarehouseService
from .repository import WarehouseRepository

__all__ = [
    "warehouses_router",
    "WarehouseService",
    "WarehouseRepository"
]
