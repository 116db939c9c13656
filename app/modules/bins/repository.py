from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError

from app.shared.database.models import Bin, Product, Warehouse, RegistryStatus


class BinRepository:

    def __init__(self, db: Session):
        self.db = db

    # ===== QUERIES =====

    def get_by_id(self, bin_id: int) -> Optional[Bin]:
        return self.db.query(Bin).options(
            joinedload(Bin.warehouse)
        ).filter(Bin.id == bin_id).first()

    def get_by_number(self, warehouse_id: int, bin_number: str) -> Optional[Bin]:
        return self.db.query(Bin).filter(
            and_(
                Bin.warehouse_id == warehouse_id,
                Bin.bin_number == bin_number
            )
        ).first()

    def list_for_warehouse(self, warehouse_id: int) -> List[Bin]:
        return self.db.query(Bin).filter(
            and_(
                Bin.warehouse_id == warehouse_id,
                Bin.status == RegistryStatus.ACTIVE
            )
        ).order_by(Bin.bin_number).all()

    def list_active(self) -> List[Bin]:
        return self.db.query(Bin).join(
            Warehouse, Bin.warehouse_id == Warehouse.id
        ).options(
            joinedload(Bin.warehouse)
        ).filter(
            Bin.status == RegistryStatus.ACTIVE
        ).order_by(Warehouse.name, Bin.bin_number).all()

    def get_product_counts(self, bins: List[Bin]) -> Dict[Tuple[int, str], int]:
        """Number of product rows per (warehouse_id, bin_number)"""
        if not bins:
            return {}
        warehouse_ids = {b.warehouse_id for b in bins}
        rows = self.db.query(
            Product.warehouse_id, Product.bin_number, func.count(Product.id)
        ).filter(
            Product.warehouse_id.in_(warehouse_ids),
            Product.bin_number.isnot(None)
        ).group_by(Product.warehouse_id, Product.bin_number).all()
        return {(wid, number): count for wid, number, count in rows}

    def count_products_in_bin(self, warehouse_id: int, bin_number: str) -> int:
        return self.db.query(func.count(Product.id)).filter(
            and_(
                Product.warehouse_id == warehouse_id,
                Product.bin_number == bin_number
            )
        ).scalar() or 0

    def quantity_in_bin(self, warehouse_id: int, bin_number: str,
                        exclude_product_id: Optional[int] = None) -> int:
        """Units currently stored in a bin"""
        query = self.db.query(func.coalesce(func.sum(Product.quantity), 0)).filter(
            and_(
                Product.warehouse_id == warehouse_id,
                Product.bin_number == bin_number
            )
        )
        if exclude_product_id is not None:
            query = query.filter(Product.id != exclude_product_id)
        return int(query.scalar() or 0)

    def get_products_for_contents(self, warehouse_id: int,
                                  search: Optional[str] = None) -> List[Product]:
        query = self.db.query(Product).filter(Product.warehouse_id == warehouse_id)
        if search:
            needle = search.strip().lower()
            query = query.filter(
                or_(
                    func.lower(Product.part_number).contains(needle, autoescape=True),
                    func.lower(Product.bin_number).contains(needle, autoescape=True),
                    func.lower(Product.name).contains(needle, autoescape=True)
                )
            )
        return query.all()

    # ===== WRITES =====

    def create(self, data: dict) -> Bin:
        try:
            bin_ = Bin(**data)
            self.db.add(bin_)
            self.db.commit()
            self.db.refresh(bin_)
            return bin_
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def update(self, bin_: Bin, data: dict) -> Bin:
        try:
            for key, value in data.items():
                setattr(bin_, key, value)
            self.db.commit()
            self.db.refresh(bin_)
            return bin_
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e
