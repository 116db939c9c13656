from typing import Optional, Union
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import UserResponse
from app.modules.bins.service import BinService
from app.modules.bins.schemas import (
    BinCreate, BinUpdate, BinListResponse, BinDetailResponse,
    BinMutationResponse, BinContentsResponse
)

router = APIRouter(tags=["Inventory - Bins"])


@router.get("/bins", response_model=Union[BinListResponse, BinDetailResponse])
async def get_bins(
    id: Optional[int] = Query(None, description="Fetch a single bin"),
    warehouse_id: Optional[int] = Query(None, description="Active bins of one warehouse"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    List bins

    - `id`: one bin (any status) with its warehouse name
    - `warehouse_id`: active bins of that warehouse with `product_count`
    - neither: all active bins ordered by warehouse name and bin number
    """
    service = BinService(db)
    if id is not None:
        return BinDetailResponse(bin=service.get_bin(id))
    return BinListResponse(bins=service.list_bins(warehouse_id))


@router.post("/bins", response_model=BinMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_bin(
    data: BinCreate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a bin; `bin_number` must be unique inside the warehouse"""
    service = BinService(db)
    return BinMutationResponse(message="Bin created successfully", bin=service.create_bin(data, current_user))


@router.put("/bins", response_model=BinMutationResponse)
async def update_bin(
    data: BinUpdate,
    id: int = Query(..., description="Bin to update"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update bin number, description, capacity or status"""
    service = BinService(db)
    return BinMutationResponse(message="Bin updated successfully", bin=service.update_bin(id, data, current_user))


@router.delete("/bins", response_model=BinMutationResponse)
async def delete_bin(
    id: int = Query(..., description="Bin to deactivate"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft delete: the bin is marked inactive"""
    service = BinService(db)
    return BinMutationResponse(message="Bin deleted successfully", bin=service.deactivate_bin(id, current_user))


@router.get("/bin-contents", response_model=BinContentsResponse)
async def get_bin_contents(
    warehouse_id: int = Query(..., description="Warehouse to inspect"),
    search: Optional[str] = Query(None, description="Part number, bin number or product name"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Products grouped by bin

    Products without a bin are grouped under `UNASSIGNED`. Each row lists the
    distinct part numbers and names, the number of product rows and the
    total quantity.
    """
    service = BinService(db)
    return service.get_bin_contents(warehouse_id, search)
