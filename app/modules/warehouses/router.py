from typing import Optional, Union
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import UserResponse
from app.modules.warehouses.service import WarehouseService
from app.modules.warehouses.schemas import (
    WarehouseCreate, WarehouseUpdate, WarehouseListResponse,
    WarehouseDetailResponse, WarehouseMutationResponse
)

router = APIRouter(prefix="/warehouses", tags=["Inventory - Warehouses"])


@router.get("", response_model=Union[WarehouseListResponse, WarehouseDetailResponse])
async def get_warehouses(
    id: Optional[int] = Query(None, description="Fetch a single warehouse"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    List active warehouses, or fetch one by `id`

    Each row carries `bin_count` and `product_count`. A single warehouse is
    returned even when inactive, since historical movements still point at it.
    """
    service = WarehouseService(db)
    if id is not None:
        return WarehouseDetailResponse(warehouse=service.get_warehouse(id))
    return WarehouseListResponse(warehouses=service.list_warehouses())


@router.post("", response_model=WarehouseMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_warehouse(
    data: WarehouseCreate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create a warehouse

    `location` is composed from address, city, state and zip when omitted.
    """
    service = WarehouseService(db)
    warehouse = service.create_warehouse(data, current_user)
    return WarehouseMutationResponse(message="Warehouse created successfully", warehouse=warehouse)


@router.put("", response_model=WarehouseMutationResponse)
async def update_warehouse(
    data: WarehouseUpdate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update the fields sent in the body; `status` switches active/inactive"""
    service = WarehouseService(db)
    warehouse = service.update_warehouse(data, current_user)
    return WarehouseMutationResponse(message="Warehouse updated successfully", warehouse=warehouse)


@router.delete("", response_model=WarehouseMutationResponse)
async def delete_warehouse(
    id: int = Query(..., description="Warehouse to deactivate"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft delete: the warehouse is marked inactive, never removed"""
    service = WarehouseService(db)
    warehouse = service.deactivate_warehouse(id, current_user)
    return WarehouseMutationResponse(message="Warehouse deleted successfully", warehouse=warehouse)
