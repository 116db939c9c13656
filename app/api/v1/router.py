# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.config.settings import settings
from app.modules.warehouses import warehouses_router
from app.modules.bins import bins_router
from app.modules.movements import movements_router
from app.modules.reconciliation import reconciliation_router
from app.modules.barcode import barcode_router

# Main API router, mounted at /api
api_router = APIRouter()

# ==================== AUTH ====================

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

# ==================== INVENTORY ====================

inventory_router = APIRouter(prefix="/inventory")
inventory_router.include_router(warehouses_router)
inventory_router.include_router(bins_router)
inventory_router.include_router(movements_router)
inventory_router.include_router(reconciliation_router)
inventory_router.include_router(barcode_router)

api_router.include_router(inventory_router)


@api_router.get("/")
async def api_root():
    return {
        "message": settings.app_name,
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "authentication": "/api/auth",
            "warehouses": "/api/inventory/warehouses",
            "bins": "/api/inventory/bins",
            "bin_contents": "/api/inventory/bin-contents",
            "movements": "/api/inventory/movements",
            "reconciliation": "/api/inventory/reconciliation/match",
            "barcode": "/api/inventory/barcode"
        }
    }


@api_router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version
    }
