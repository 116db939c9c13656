from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import Warehouse, Bin, Product, RegistryStatus


class WarehouseRepository:

    def __init__(self, db: Session):
        self.db = db

    # ===== QUERIES =====

    def get_by_id(self, warehouse_id: int) -> Optional[Warehouse]:
        return self.db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()

    def get_by_code(self, code: str) -> Optional[Warehouse]:
        return self.db.query(Warehouse).filter(func.lower(Warehouse.code) == code.lower()).first()

    def list_active(self) -> List[Warehouse]:
        return self.db.query(Warehouse).filter(
            Warehouse.status == RegistryStatus.ACTIVE
        ).order_by(Warehouse.name).all()

    def get_counts(self, warehouse_ids: List[int]) -> Dict[int, Tuple[int, int]]:
        """(bin_count, product_count) per warehouse"""
        if not warehouse_ids:
            return {}

        bin_counts = dict(
            self.db.query(Bin.warehouse_id, func.count(Bin.id))
            .filter(Bin.warehouse_id.in_(warehouse_ids))
            .group_by(Bin.warehouse_id)
            .all()
        )
        product_counts = dict(
            self.db.query(Product.warehouse_id, func.count(Product.id))
            .filter(Product.warehouse_id.in_(warehouse_ids))
            .group_by(Product.warehouse_id)
            .all()
        )
        return {
            wid: (bin_counts.get(wid, 0), product_counts.get(wid, 0))
            for wid in warehouse_ids
        }

    # ===== WRITES =====

    def create(self, data: dict) -> Warehouse:
        try:
            warehouse = Warehouse(**data)
            self.db.add(warehouse)
            self.db.commit()
            self.db.refresh(warehouse)
            return warehouse
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def update(self, warehouse: Warehouse, data: dict) -> Warehouse:
        try:
            for key, value in data.items():
                setattr(warehouse, key, value)
            self.db.commit()
            self.db.refresh(warehouse)
            return warehouse
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def set_status(self, warehouse: Warehouse, status: str) -> Warehouse:
        return self.update(warehouse, {"status": status})
