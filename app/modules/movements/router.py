from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import UserResponse
from app.modules.movements.service import MovementService
from app.modules.movements.schemas import (
    MovementAction, MovementStatus, MovementType, MovementFilters, MovementUpdate,
    ShipRequest, ReceiveRequest, AssignBinRequest, AddUnexpectedRequest, CancelRequest,
    MovementListResponse, MovementMutationResponse
)

router = APIRouter(prefix="/movements", tags=["Inventory - Movements"])


@router.get("", response_model=MovementListResponse)
async def get_movements(
    status_filter: Optional[MovementStatus] = Query(None, alias="status"),
    product_id: Optional[int] = Query(None),
    movement_type: Optional[MovementType] = Query(None),
    warehouse_id: Optional[int] = Query(None, description="Either side of the movement"),
    from_warehouse_id: Optional[int] = Query(None),
    to_warehouse_id: Optional[int] = Query(None),
    limit: int = Query(settings.movements_default_limit, ge=1),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Movement history, newest first"""
    filters = MovementFilters(
        status=status_filter,
        product_id=product_id,
        movement_type=movement_type,
        warehouse_id=warehouse_id,
        from_warehouse_id=from_warehouse_id,
        to_warehouse_id=to_warehouse_id,
        limit=limit
    )
    service = MovementService(db)
    return service.list_movements(filters)


@router.post("")
async def post_movement(
    response: Response,
    action: str = Query(..., description="ship | receive | assign-bin | add-unexpected | cancel"),
    payload: Dict[str, Any] = Body(...),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Stock-mutating actions

    - **ship**: `product_ids`, `from_warehouse_id`, `to_warehouse_id`, `quantity`, `notes`.
      Creates one in-transit movement per product and decrements the source.
    - **receive**: `movement_id` or `barcode`, optional `bin_number`.
      Completes the movement and merges the units into the destination row.
    - **assign-bin**: `product_id`, `bin_number`, optional `warehouse_id`.
    - **add-unexpected**: `part_number`, `quantity`, optional `bin_number` and `notes`.
    - **cancel**: `movement_id`, optional `reason`. Returns the units to the sender.
    """
    try:
        action = MovementAction(action)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action"
        )

    service = MovementService(db)

    if action == MovementAction.SHIP:
        response.status_code = status.HTTP_201_CREATED
        return service.ship(ShipRequest.model_validate(payload), current_user)
    if action == MovementAction.RECEIVE:
        return service.receive(ReceiveRequest.model_validate(payload), current_user)
    if action == MovementAction.ASSIGN_BIN:
        return service.assign_bin(AssignBinRequest.model_validate(payload), current_user)
    if action == MovementAction.ADD_UNEXPECTED:
        return service.add_unexpected(AddUnexpectedRequest.model_validate(payload), current_user)
    return service.cancel(CancelRequest.model_validate(payload), current_user)


@router.put("", response_model=MovementMutationResponse)
async def update_movement(
    data: MovementUpdate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Manual override

    Notes are always editable. Status may only move from `in_transit` to
    `cancelled`; completion happens through `action=receive`.
    """
    service = MovementService(db)
    return service.update_movement(data, current_user)
