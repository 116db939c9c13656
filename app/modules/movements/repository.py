from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, or_, asc, desc, func, case

from app.shared.database.models import InventoryMovement, InventoryChange, Product
from app.modules.movements.schemas import MovementFilters, MovementStatus


class MovementRepository:
    """
    Data access for movements and the stock ledger.

    Nothing here commits: callers wrap each operation in one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    # ===== MOVEMENTS =====

    def get_movement(self, movement_id: int) -> Optional[InventoryMovement]:
        """Movement with product, warehouses and creator loaded"""
        return self.db.query(InventoryMovement).options(
            joinedload(InventoryMovement.product),
            joinedload(InventoryMovement.from_warehouse),
            joinedload(InventoryMovement.to_warehouse),
            joinedload(InventoryMovement.creator)
        ).filter(InventoryMovement.id == movement_id).first()

    def lock_movement(self, movement_id: int) -> Optional[InventoryMovement]:
        """SELECT ... FOR UPDATE on the movement row"""
        return self.db.query(InventoryMovement).filter(
            InventoryMovement.id == movement_id
        ).with_for_update().populate_existing().first()

    def create_movement(self, **data) -> InventoryMovement:
        movement = InventoryMovement(**data)
        self.db.add(movement)
        self.db.flush()
        return movement

    def complete_movement(self, movement_id: int, to_bin: Optional[str]) -> bool:
        """in_transit -> completed; False when another receive got there first"""
        now = datetime.utcnow()
        rows_updated = self.db.query(InventoryMovement).filter(
            and_(
                InventoryMovement.id == movement_id,
                InventoryMovement.status == MovementStatus.IN_TRANSIT.value
            )
        ).update({
            "status": MovementStatus.COMPLETED.value,
            "received_at": now,
            "scanned_at": now,
            "to_bin": to_bin
        }, synchronize_session="fetch")
        return rows_updated > 0

    def cancel_movement(self, movement_id: int, notes: Optional[str]) -> bool:
        """in_transit -> cancelled"""
        values = {
            "status": MovementStatus.CANCELLED.value,
            "cancelled_at": datetime.utcnow()
        }
        if notes is not None:
            values["notes"] = notes
        rows_updated = self.db.query(InventoryMovement).filter(
            and_(
                InventoryMovement.id == movement_id,
                InventoryMovement.status == MovementStatus.IN_TRANSIT.value
            )
        ).update(values, synchronize_session="fetch")
        return rows_updated > 0

    def list_movements(self, filters: MovementFilters) -> List[InventoryMovement]:
        query = self.db.query(InventoryMovement).options(
            joinedload(InventoryMovement.product),
            joinedload(InventoryMovement.from_warehouse),
            joinedload(InventoryMovement.to_warehouse),
            joinedload(InventoryMovement.creator)
        )

        if filters.status:
            query = query.filter(InventoryMovement.status == filters.status.value)
        if filters.product_id:
            query = query.filter(InventoryMovement.product_id == filters.product_id)
        if filters.movement_type:
            query = query.filter(InventoryMovement.movement_type == filters.movement_type.value)
        if filters.warehouse_id:
            query = query.filter(
                or_(
                    InventoryMovement.from_warehouse_id == filters.warehouse_id,
                    InventoryMovement.to_warehouse_id == filters.warehouse_id
                )
            )
        if filters.from_warehouse_id:
            query = query.filter(InventoryMovement.from_warehouse_id == filters.from_warehouse_id)
        if filters.to_warehouse_id:
            query = query.filter(InventoryMovement.to_warehouse_id == filters.to_warehouse_id)

        return query.order_by(
            desc(InventoryMovement.created_at),
            desc(InventoryMovement.id)
        ).limit(filters.limit).all()

    def find_in_transit_matches(self, identifier: str, warehouse_id: int) -> List[InventoryMovement]:
        """
        In-transit movements addressed to `warehouse_id` whose product part
        number or barcode contains `identifier` (case-insensitive).

        Ordered exact matches first, then earliest shipped_at, then id.
        """
        needle = identifier.strip().lower()
        part_number = func.lower(Product.part_number)
        barcode = func.lower(Product.barcode)
        exact_first = case(
            (or_(part_number == needle, barcode == needle), 0),
            else_=1
        )

        return self.db.query(InventoryMovement).join(
            Product, InventoryMovement.product_id == Product.id
        ).options(
            joinedload(InventoryMovement.product),
            joinedload(InventoryMovement.from_warehouse),
            joinedload(InventoryMovement.to_warehouse)
        ).filter(
            and_(
                InventoryMovement.status == MovementStatus.IN_TRANSIT.value,
                InventoryMovement.to_warehouse_id == warehouse_id,
                or_(
                    part_number.contains(needle, autoescape=True),
                    barcode.contains(needle, autoescape=True)
                )
            )
        ).order_by(
            exact_first,
            asc(InventoryMovement.shipped_at),
            asc(InventoryMovement.id)
        ).all()

    # ===== STOCK LEDGER =====

    def get_product(self, product_id: int, lock: bool = False) -> Optional[Product]:
        query = self.db.query(Product).filter(Product.id == product_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    def lock_products(self, product_ids: List[int]) -> List[Product]:
        """SELECT ... FOR UPDATE on the given product rows, always in id order"""
        return self.db.query(Product).filter(
            Product.id.in_(sorted(set(product_ids)))
        ).order_by(asc(Product.id)).with_for_update().populate_existing().all()

    def find_stock_row(self, part_number: Optional[str], warehouse_id: int,
                       lock: bool = False) -> Optional[Product]:
        """The product row for (part_number, warehouse_id); part numbers compare case-insensitively"""
        if not part_number or not part_number.strip():
            return None
        query = self.db.query(Product).filter(
            and_(
                func.lower(Product.part_number) == part_number.strip().lower(),
                Product.warehouse_id == warehouse_id
            )
        )
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    def find_product_by_identifier(self, identifier: str,
                                   prefer_warehouse_id: Optional[int] = None) -> Optional[Product]:
        """Any product whose barcode or part number equals `identifier` (case-insensitive)"""
        needle = identifier.strip().lower()
        query = self.db.query(Product).options(
            joinedload(Product.warehouse)
        ).filter(
            or_(
                func.lower(Product.barcode) == needle,
                func.lower(Product.part_number) == needle
            )
        )
        if prefer_warehouse_id is not None:
            query = query.order_by(
                case((Product.warehouse_id == prefer_warehouse_id, 0), else_=1),
                asc(Product.id)
            )
        else:
            query = query.order_by(asc(Product.id))
        return query.first()

    def create_product(self, **data) -> Product:
        product = Product(**data)
        self.db.add(product)
        self.db.flush()
        return product

    def apply_quantity_change(self, product: Product, delta: int, change_type: str,
                              user_id: Optional[int], reference_id: Optional[int] = None,
                              notes: Optional[str] = None) -> InventoryChange:
        """Move on-hand quantity by `delta` and record the audit row"""
        before = product.quantity or 0
        after = before + delta
        if after < 0:
            raise ValueError(
                f"Quantity for product {product.id} would become negative ({before} {delta:+d})"
            )
        product.quantity = after

        change = InventoryChange(
            product_id=product.id,
            change_type=change_type,
            quantity_before=before,
            quantity_after=after,
            reference_id=reference_id,
            user_id=user_id,
            notes=notes,
            created_at=datetime.utcnow()
        )
        self.db.add(change)
        self.db.flush()
        return change
