from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import UserResponse
from app.modules.barcode.service import BarcodeService
from app.modules.barcode.schemas import (
    BarcodeAction, ScanResponse, GenerateBarcodeRequest, ProductIdsRequest
)

router = APIRouter(prefix="/barcode", tags=["Inventory - Barcode"])


@router.get("", response_model=ScanResponse)
async def scan_barcode(
    action: str = Query(..., description="scan"),
    barcode: Optional[str] = Query(None, description="Barcode or part number"),
    db: Session = Depends(get_db)
):
    """Public lookup by barcode or part number; no authentication"""
    if action != BarcodeAction.SCAN.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action or missing barcode"
        )
    service = BarcodeService(db)
    return service.scan(barcode)


@router.post("")
async def barcode_action(
    action: str = Query(..., description="generate | bulk-generate | print-data"),
    payload: Dict[str, Any] = Body(...),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Assign or read barcodes

    - **generate**: `{product_id}`; keeps an existing barcode unless `regenerate` is set
    - **bulk-generate**: `{product_ids}`
    - **print-data**: `{product_ids}` -> id, name, part number, barcode, price
    """
    service = BarcodeService(db)
    if action == BarcodeAction.GENERATE.value:
        data = GenerateBarcodeRequest.model_validate(payload)
        return service.generate(data.product_id, data.regenerate)
    if action == BarcodeAction.BULK_GENERATE.value:
        data = ProductIdsRequest.model_validate(payload)
        return service.bulk_generate(data.product_ids, data.regenerate)
    if action == BarcodeAction.PRINT_DATA.value:
        data = ProductIdsRequest.model_validate(payload)
        return service.print_data(data.product_ids)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid action"
    )
