import logging
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.config.settings import settings
from app.core.auth.dependencies import resolve_operator_warehouse
from app.core.auth.schemas import UserResponse
from app.modules.barcode.service import barcode_for
from app.modules.bins.service import BinService
from app.modules.movements.repository import MovementRepository
from app.modules.movements.schemas import (
    ShipRequest, ReceiveRequest, AssignBinRequest, AddUnexpectedRequest,
    CancelRequest, MovementUpdate, MovementFilters, MovementStatus, MovementType,
    StockChangeType, MovementResponse, StockRowInfo, ShipResponse, ReceiveResponse,
    StockOperationResponse, MovementMutationResponse, MovementListResponse
)
from app.modules.warehouses.service import WarehouseService
from app.shared.database.models import InventoryChange, InventoryMovement, Product
from app.shared.database.transaction import atomic

logger = logging.getLogger(__name__)

DESCRIPTIVE_FIELDS = ("name", "description", "price", "category_id", "barcode",
                      "image_url", "condition_status")


class MovementService:
    """
    Movement Engine.

    Owns movement status transitions and every write to a product row's
    quantity, warehouse and bin. Each public operation is one transaction
    with the touched product rows (and the movement row) locked.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = MovementRepository(db)
        self.warehouses = WarehouseService(db)
        self.bins = BinService(db)

    # ===== SHIP =====

    def ship(self, request: ShipRequest, operator: UserResponse) -> ShipResponse:
        """Create one in_transit movement per product and take the units off the source"""
        if request.from_warehouse_id == request.to_warehouse_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Source and destination warehouses must be different"
            )

        resolve_operator_warehouse(operator, request.from_warehouse_id)
        self.warehouses.get_active_or_404(request.from_warehouse_id)
        self.warehouses.get_active_or_404(request.to_warehouse_id)

        movement_ids = []
        with atomic(self.db):
            now = datetime.utcnow()
            # lock in id order so concurrent batches cannot deadlock
            locked = {p.id: p for p in self.repository.lock_products(request.product_ids)}
            for product_id in request.product_ids:
                product = locked.get(product_id)
                if not product:
                    raise HTTPException(
                        status_code=status.HTTP_404_NOT_FOUND,
                        detail=f"Product {product_id} not found"
                    )
                if product.warehouse_id != request.from_warehouse_id:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Product {product_id} is not stocked at warehouse {request.from_warehouse_id}"
                    )
                if not product.part_number:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Missing required field(s): part_number (product {product_id} has none and cannot be matched on receipt)"
                    )

                quantity = self._shippable_quantity(product, request.quantity)
                movement = self.repository.create_movement(
                    product_id=product.id,
                    from_warehouse_id=request.from_warehouse_id,
                    to_warehouse_id=request.to_warehouse_id,
                    from_bin=product.bin_number,
                    quantity=quantity,
                    movement_type=MovementType.TRANSFER.value,
                    status=MovementStatus.IN_TRANSIT.value,
                    notes=request.notes,
                    created_by=operator.id,
                    shipped_at=now
                )
                self.repository.apply_quantity_change(
                    product, -quantity, StockChangeType.SHIP.value, operator.id,
                    reference_id=movement.id
                )
                movement_ids.append(movement.id)
                logger.info(
                    f"Shipped {quantity} x {product.part_number} (product {product.id}) "
                    f"{request.from_warehouse_id} -> {request.to_warehouse_id}, movement {movement.id}"
                )

        movements = [self._build_movement_response(self.repository.get_movement(mid)) for mid in movement_ids]
        return ShipResponse(
            message=f"{len(movements)} products shipped successfully",
            shipped_count=len(movements),
            movements=movements
        )

    # ===== RECEIVE =====

    def receive(self, request: ReceiveRequest, operator: UserResponse) -> ReceiveResponse:
        """Complete an in_transit movement at its destination, merging into or creating the stock row"""
        movement_id = request.movement_id
        warehouse_id = None
        if movement_id is None:
            warehouse_id = resolve_operator_warehouse(operator, request.warehouse_id)
            if not request.barcode:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="movement_id or barcode is required"
                )
            matches = self.repository.find_in_transit_matches(request.barcode, warehouse_id)
            if not matches:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="No pending shipment found for this barcode at your warehouse"
                )
            movement_id = matches[0].id

        with atomic(self.db, conflict_detail="Stock row changed concurrently, please re-scan"):
            movement = self.repository.lock_movement(movement_id)
            if not movement:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Movement not found"
                )
            if warehouse_id is None:
                # an unassigned admin receiving by id acts for the destination
                requested = request.warehouse_id
                if requested is None and operator.warehouse_id is None:
                    requested = movement.to_warehouse_id
                warehouse_id = resolve_operator_warehouse(operator, requested)
            if movement.to_warehouse_id != warehouse_id:
                logger.warning(
                    f"Receive of movement {movement.id} refused: addressed to warehouse "
                    f"{movement.to_warehouse_id}, attempted by warehouse {warehouse_id}"
                )
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="This shipment is addressed to a different warehouse"
                )
            self._ensure_in_transit(movement)

            source = movement.product
            target, created, _ = self._credit_stock(
                template=source,
                part_number=source.part_number,
                warehouse_id=warehouse_id,
                bin_number=request.bin_number,
                quantity=movement.quantity,
                change_type=StockChangeType.RECEIVE.value,
                operator=operator,
                reference_id=movement.id
            )

            if not self.repository.complete_movement(movement.id, target.bin_number):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Movement already received"
                )
            stock_row = self._build_stock_row(target, created)

        logger.info(
            f"Received movement {movement_id}: {stock_row.quantity} on hand for "
            f"{stock_row.part_number} at warehouse {warehouse_id} bin {stock_row.bin_number}"
        )
        return ReceiveResponse(
            message="Product received successfully",
            movement=self._build_movement_response(self.repository.get_movement(movement_id)),
            product=stock_row
        )

    # ===== ASSIGN BIN =====

    def assign_bin(self, request: AssignBinRequest, operator: UserResponse) -> StockOperationResponse:
        """Place a product row in a warehouse/bin directly; quantity is unchanged"""
        with atomic(self.db, conflict_detail="Part number already stocked at that warehouse"):
            product = self.repository.get_product(request.product_id, lock=True)
            if not product:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Product not found"
                )

            requested = request.warehouse_id if request.warehouse_id is not None else product.warehouse_id
            warehouse_id = resolve_operator_warehouse(operator, requested)
            self.warehouses.get_active_or_404(warehouse_id)

            if warehouse_id != product.warehouse_id:
                clash = self.repository.find_stock_row(product.part_number, warehouse_id)
                if clash and clash.id != product.id:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=f"Part {product.part_number} is already stocked at warehouse {warehouse_id}"
                    )

            if (warehouse_id, request.bin_number) != (product.warehouse_id, product.bin_number):
                self.bins.check_capacity(warehouse_id, request.bin_number, product.quantity or 0,
                                         exclude_product_id=product.id)

            movement = self.repository.create_movement(
                product_id=product.id,
                from_warehouse_id=product.warehouse_id,
                to_warehouse_id=warehouse_id,
                from_bin=product.bin_number,
                to_bin=request.bin_number,
                quantity=product.quantity or 0,
                movement_type=MovementType.ADJUSTMENT.value,
                status=MovementStatus.COMPLETED.value,
                created_by=operator.id,
                received_at=datetime.utcnow()
            )
            product.warehouse_id = warehouse_id
            product.bin_number = request.bin_number
            movement_id = movement.id
            stock_row = self._build_stock_row(product, False)

        logger.info(f"Product {request.product_id} assigned to warehouse {warehouse_id} bin {request.bin_number}")
        return StockOperationResponse(
            message="Product assigned to bin successfully",
            product=stock_row,
            movement=self._build_movement_response(self.repository.get_movement(movement_id))
        )

    # ===== ADD UNEXPECTED =====

    def add_unexpected(self, request: AddUnexpectedRequest, operator: UserResponse) -> StockOperationResponse:
        """
        Credit stock that arrived without a matching in-transit movement.

        There is no balancing decrement anywhere, so the addition is recorded
        as a completed `unexpected` movement plus an inventory change.
        """
        warehouse_id = resolve_operator_warehouse(operator, request.warehouse_id)
        self.warehouses.get_active_or_404(warehouse_id)
        part_number = request.part_number.strip()
        if not part_number:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required field(s): part_number"
            )

        with atomic(self.db, conflict_detail="Stock row changed concurrently, please re-scan"):
            template = self.repository.find_product_by_identifier(part_number, prefer_warehouse_id=warehouse_id)
            if template and template.part_number:
                part_number = template.part_number

            target, created, change = self._credit_stock(
                template=template,
                part_number=part_number,
                warehouse_id=warehouse_id,
                bin_number=request.bin_number,
                quantity=request.quantity,
                change_type=StockChangeType.UNEXPECTED.value,
                operator=operator,
                notes=request.notes
            )
            now = datetime.utcnow()
            movement = self.repository.create_movement(
                product_id=target.id,
                to_warehouse_id=warehouse_id,
                to_bin=target.bin_number,
                quantity=request.quantity,
                movement_type=MovementType.UNEXPECTED.value,
                status=MovementStatus.COMPLETED.value,
                notes=request.notes or "Unexpected receipt",
                created_by=operator.id,
                received_at=now,
                scanned_at=now
            )
            change.reference_id = movement.id
            movement_id = movement.id
            stock_row = self._build_stock_row(target, created)

        logger.warning(
            f"Unexpected stock added: {request.quantity} x {part_number} at warehouse {warehouse_id} "
            f"by user {operator.id} (movement {movement_id})"
        )
        return StockOperationResponse(
            message="Unexpected product added to inventory",
            product=stock_row,
            movement=self._build_movement_response(self.repository.get_movement(movement_id))
        )

    # ===== CANCEL =====

    def cancel(self, request: CancelRequest, operator: UserResponse) -> StockOperationResponse:
        """in_transit -> cancelled, returning the units to the sender"""
        with atomic(self.db, conflict_detail="Stock row changed concurrently, please retry"):
            movement = self._lock_movement_or_404(request.movement_id)
            stock_row = self._cancel_locked(movement, operator, request.reason)

        return StockOperationResponse(
            message="Movement cancelled, stock returned to sender",
            product=stock_row,
            movement=self._build_movement_response(self.repository.get_movement(request.movement_id))
        )

    # ===== MANUAL OVERRIDE =====

    def update_movement(self, request: MovementUpdate, operator: UserResponse) -> MovementMutationResponse:
        """
        Edit notes, or cancel through a status change.

        Completion only happens through receive; completed and cancelled
        movements are terminal.
        """
        with atomic(self.db):
            movement = self._lock_movement_or_404(request.id)

            if request.status is not None and request.status.value != movement.status:
                if movement.status != MovementStatus.IN_TRANSIT.value:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Movement is {movement.status} and can no longer change status"
                    )
                if request.status == MovementStatus.COMPLETED:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail="Use the receive action to complete a movement"
                    )
                self._cancel_locked(movement, operator, request.notes)
            elif request.notes is not None:
                movement.notes = request.notes

        logger.info(f"Movement {request.id} updated by user {operator.id}")
        return MovementMutationResponse(
            message="Movement updated successfully",
            movement=self._build_movement_response(self.repository.get_movement(request.id))
        )

    # ===== HISTORY =====

    def list_movements(self, filters: MovementFilters) -> MovementListResponse:
        filters.limit = max(1, min(filters.limit, settings.movements_max_limit))
        movements = self.repository.list_movements(filters)
        return MovementListResponse(
            movements=[self._build_movement_response(m) for m in movements],
            total=len(movements)
        )

    def get_movement(self, movement_id: int) -> MovementResponse:
        movement = self.repository.get_movement(movement_id)
        if not movement:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Movement not found"
            )
        return self._build_movement_response(movement)

    # ===== HELPER METHODS =====

    def _shippable_quantity(self, product: Product, requested: int) -> int:
        on_hand = product.quantity or 0
        if on_hand >= requested:
            return requested
        if settings.ship_allow_partial and on_hand > 0:
            logger.info(f"Partial shipment for product {product.id}: {on_hand} of {requested}")
            return on_hand
        logger.warning(f"Over-shipment refused for product {product.id}: on hand {on_hand}, requested {requested}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Insufficient stock for {product.part_number or product.name}: on hand {on_hand}, requested {requested}"
        )

    def _ensure_in_transit(self, movement: InventoryMovement):
        if movement.status == MovementStatus.COMPLETED.value:
            logger.warning(f"Duplicate receive refused for movement {movement.id}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Movement already received"
            )
        if movement.status != MovementStatus.IN_TRANSIT.value:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Movement is {movement.status} and cannot be processed"
            )

    def _lock_movement_or_404(self, movement_id: int) -> InventoryMovement:
        movement = self.repository.lock_movement(movement_id)
        if not movement:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Movement not found"
            )
        return movement

    def _cancel_locked(self, movement: InventoryMovement, operator: UserResponse,
                       reason: Optional[str]) -> StockRowInfo:
        if movement.status != MovementStatus.IN_TRANSIT.value:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only in-transit movements can be cancelled (current: {movement.status})"
            )
        resolve_operator_warehouse(operator, movement.from_warehouse_id)

        source = movement.product
        if source.warehouse_id == movement.from_warehouse_id:
            product = self.repository.get_product(source.id, lock=True)
            self.repository.apply_quantity_change(
                product, movement.quantity, StockChangeType.CANCEL.value, operator.id,
                reference_id=movement.id, notes=reason
            )
            created = False
        else:
            # The source row was re-placed since shipping; credit the sender's row for the part
            product, created, _ = self._credit_stock(
                template=source,
                part_number=source.part_number,
                warehouse_id=movement.from_warehouse_id,
                bin_number=movement.from_bin,
                quantity=movement.quantity,
                change_type=StockChangeType.CANCEL.value,
                operator=operator,
                reference_id=movement.id,
                notes=reason
            )

        notes = f"Cancelled: {reason}" if reason else movement.notes
        if not self.repository.cancel_movement(movement.id, notes):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Movement is no longer in transit"
            )
        logger.info(f"Movement {movement.id} cancelled by user {operator.id}; {movement.quantity} returned to warehouse {movement.from_warehouse_id}")
        return self._build_stock_row(product, created)

    def _credit_stock(self, template: Optional[Product], part_number: Optional[str],
                      warehouse_id: int, bin_number: Optional[str], quantity: int,
                      change_type: str, operator: UserResponse,
                      reference_id: Optional[int] = None,
                      notes: Optional[str] = None) -> Tuple[Product, bool, InventoryChange]:
        """
        Merge `quantity` into the (part_number, warehouse) row or create it.

        An existing row keeps its bin unless a bin is supplied.
        """
        existing = self.repository.find_stock_row(part_number, warehouse_id, lock=True)
        if existing and bin_number and bin_number != existing.bin_number:
            # the whole row moves into the new bin
            self.bins.check_capacity(warehouse_id, bin_number, (existing.quantity or 0) + quantity,
                                     exclude_product_id=existing.id)
        else:
            effective_bin = bin_number or (existing.bin_number if existing else None)
            self.bins.check_capacity(warehouse_id, effective_bin, quantity)

        if existing:
            if bin_number:
                existing.bin_number = bin_number
            change = self.repository.apply_quantity_change(
                existing, quantity, change_type, operator.id, reference_id, notes
            )
            return existing, False, change

        values = {field: getattr(template, field) for field in DESCRIPTIVE_FIELDS} if template else {}
        values.setdefault("name", part_number)
        product = self.repository.create_product(
            part_number=part_number,
            warehouse_id=warehouse_id,
            bin_number=bin_number,
            quantity=0,
            **values
        )
        if not product.barcode:
            product.barcode = barcode_for(product)
        change = self.repository.apply_quantity_change(
            product, quantity, change_type, operator.id, reference_id, notes
        )
        return product, True, change

    def _build_stock_row(self, product: Product, created: bool) -> StockRowInfo:
        return StockRowInfo(
            product_id=product.id,
            part_number=product.part_number,
            name=product.name,
            warehouse_id=product.warehouse_id,
            bin_number=product.bin_number,
            quantity=product.quantity or 0,
            created=created
        )

    def _build_movement_response(self, movement: InventoryMovement) -> MovementResponse:
        product = movement.product
        return MovementResponse(
            id=movement.id,
            product_id=movement.product_id,
            product_name=product.name if product else None,
            part_number=product.part_number if product else None,
            barcode=product.barcode if product else None,
            from_warehouse_id=movement.from_warehouse_id,
            from_warehouse_name=movement.from_warehouse.name if movement.from_warehouse else None,
            to_warehouse_id=movement.to_warehouse_id,
            to_warehouse_name=movement.to_warehouse.name if movement.to_warehouse else None,
            from_bin=movement.from_bin,
            to_bin=movement.to_bin,
            quantity=movement.quantity,
            movement_type=MovementType(movement.movement_type),
            status=MovementStatus(movement.status),
            notes=movement.notes,
            created_by=movement.created_by,
            created_by_name=movement.creator.full_name if movement.creator else None,
            shipped_at=movement.shipped_at,
            received_at=movement.received_at,
            scanned_at=movement.scanned_at,
            cancelled_at=movement.cancelled_at,
            created_at=movement.created_at
        )
