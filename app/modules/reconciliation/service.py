import logging
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.core.auth.dependencies import resolve_operator_warehouse
from app.core.auth.schemas import UserResponse
from app.modules.movements.repository import MovementRepository
from app.modules.movements.schemas import MovementAction
from app.modules.reconciliation.schemas import (
    MatchClassification, MatchResult, ProductDescriptor, ExpectedMovementInfo
)
from app.modules.warehouses.service import WarehouseService
from app.shared.database.models import InventoryMovement, Product

logger = logging.getLogger(__name__)


class ReconciliationService:
    """
    Classifies a scan at a destination warehouse.

    - expected: an in-transit movement addressed to the warehouse matches;
      the next step is `receive`.
    - unexpected_existing: no such movement, but the identifier is known
      somewhere; the operator must confirm `add-unexpected`.
    - unexpected_new: nothing known; confirming creates a new product row.

    When several movements match, exact (case-insensitive) part number or
    barcode matches win, then the earliest shipped, then the lowest id.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = MovementRepository(db)
        self.warehouses = WarehouseService(db)

    def classify(self, identifier: str, operator: UserResponse,
                 warehouse_id: Optional[int] = None) -> MatchResult:
        identifier = (identifier or "").strip()
        if not identifier:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required field(s): identifier"
            )

        warehouse_id = resolve_operator_warehouse(operator, warehouse_id)
        self.warehouses.get_or_404(warehouse_id)

        matches = self.repository.find_in_transit_matches(identifier, warehouse_id)
        if matches:
            chosen = matches[0]
            if len(matches) > 1:
                logger.info(
                    f"Scan '{identifier}' at warehouse {warehouse_id} matched {len(matches)} "
                    f"in-transit movements; picked {chosen.id}"
                )
            return MatchResult(
                identifier=identifier,
                warehouse_id=warehouse_id,
                classification=MatchClassification.EXPECTED,
                movement=self._describe_movement(chosen),
                candidates=len(matches),
                product=self._describe_product(chosen.product),
                requires_confirmation=False,
                next_action=MovementAction.RECEIVE.value
            )

        known = self.repository.find_product_by_identifier(identifier, prefer_warehouse_id=warehouse_id)
        classification = (MatchClassification.UNEXPECTED_EXISTING if known
                          else MatchClassification.UNEXPECTED_NEW)
        logger.info(f"Scan '{identifier}' at warehouse {warehouse_id} classified {classification.value}")
        return MatchResult(
            identifier=identifier,
            warehouse_id=warehouse_id,
            classification=classification,
            candidates=0,
            product=self._describe_product(known) if known else None,
            requires_confirmation=True,
            next_action=MovementAction.ADD_UNEXPECTED.value
        )

    def _describe_movement(self, movement: InventoryMovement) -> ExpectedMovementInfo:
        return ExpectedMovementInfo(
            movement_id=movement.id,
            quantity=movement.quantity,
            from_warehouse_id=movement.from_warehouse_id,
            from_warehouse_name=movement.from_warehouse.name if movement.from_warehouse else None,
            from_bin=movement.from_bin,
            shipped_at=movement.shipped_at,
            notes=movement.notes
        )

    def _describe_product(self, product: Product) -> ProductDescriptor:
        return ProductDescriptor(
            product_id=product.id,
            part_number=product.part_number,
            barcode=product.barcode,
            name=product.name,
            description=product.description,
            image_url=product.image_url,
            warehouse_id=product.warehouse_id,
            warehouse_name=product.warehouse.name if product.warehouse else None,
            bin_number=product.bin_number,
            quantity=product.quantity or 0
        )
