from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_admin
from app.core.auth.schemas import UserResponse
from app.modules.reconciliation.service import ReconciliationService
from app.modules.reconciliation.schemas import MatchResult

router = APIRouter(prefix="/reconciliation", tags=["Inventory - Reconciliation"])


@router.get("/match", response_model=MatchResult)
async def match_scan(
    identifier: str = Query(..., description="Scanned barcode or part number"),
    warehouse_id: Optional[int] = Query(None, description="Receiving warehouse (admins without an assigned warehouse)"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Is this scan an expected receipt?

    `expected` carries the movement to pass to `action=receive`. The two
    `unexpected_*` classifications need explicit confirmation before
    calling `action=add-unexpected`. `candidates` reports how many
    in-transit movements matched.
    """
    service = ReconciliationService(db)
    return service.classify(identifier, current_user, warehouse_id)
