from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import asc, func, or_

from app.shared.database.models import Product


class BarcodeRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_code(self, code: str) -> Optional[Product]:
        """First product whose barcode or part number equals `code` (case-insensitive)"""
        needle = code.strip().lower()
        return self.db.query(Product).options(
            joinedload(Product.warehouse)
        ).filter(
            or_(
                func.lower(Product.barcode) == needle,
                func.lower(Product.part_number) == needle
            )
        ).order_by(asc(Product.id)).first()

    def get_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_by_ids(self, product_ids: List[int]) -> List[Product]:
        return self.db.query(Product).filter(
            Product.id.in_(product_ids)
        ).order_by(asc(Product.id)).all()
