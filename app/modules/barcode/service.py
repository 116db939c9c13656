import logging
import re
from typing import List
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.config.settings import settings
from app.modules.barcode.repository import BarcodeRepository
from app.modules.barcode.schemas import (
    ScannedProduct, ScanResponse, GeneratedBarcode, GenerateBarcodeResponse,
    BulkGenerateResponse, PrintLabel, PrintDataResponse
)
from app.shared.database.models import Product
from app.shared.database.transaction import atomic

logger = logging.getLogger(__name__)

_STRIP_CHARS = re.compile(r"[\s\-]+")


def barcode_for(product: Product) -> str:
    """Part number upper-cased without spaces or hyphens, else prefix + zero-padded id"""
    if product.part_number:
        code = _STRIP_CHARS.sub("", product.part_number).upper()
        if code:
            return code
    return f"{settings.barcode_prefix}{product.id:06d}"


class BarcodeService:

    def __init__(self, db: Session):
        self.db = db
        self.repository = BarcodeRepository(db)

    def scan(self, code: str) -> ScanResponse:
        if not code or not code.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid action or missing barcode"
            )
        product = self.repository.find_by_code(code)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )
        warehouse = product.warehouse
        return ScanResponse(product=ScannedProduct(
            id=product.id,
            name=product.name,
            part_number=product.part_number,
            barcode=product.barcode,
            description=product.description,
            price=product.price,
            category_id=product.category_id,
            image_url=product.image_url,
            condition_status=product.condition_status,
            quantity=product.quantity or 0,
            warehouse_id=product.warehouse_id,
            warehouse_name=warehouse.name if warehouse else None,
            warehouse_location=warehouse.location if warehouse else None,
            bin_number=product.bin_number
        ))

    def generate(self, product_id: int, regenerate: bool = False) -> GenerateBarcodeResponse:
        with atomic(self.db):
            product = self.repository.get_by_id(product_id)
            if not product:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Product not found"
                )
            code = self._assign(product, regenerate)

        return GenerateBarcodeResponse(message="Barcode generated", barcode=code)

    def bulk_generate(self, product_ids: List[int], regenerate: bool = False) -> BulkGenerateResponse:
        with atomic(self.db):
            products = self.repository.get_by_ids(product_ids)
            barcodes = [GeneratedBarcode(id=p.id, barcode=self._assign(p, regenerate)) for p in products]

        found = {b.id for b in barcodes}
        missing = [pid for pid in product_ids if pid not in found]
        if missing:
            logger.warning(f"Bulk barcode generation skipped unknown products: {missing}")
        return BulkGenerateResponse(message="Barcodes generated", barcodes=barcodes, missing_ids=missing)

    def print_data(self, product_ids: List[int]) -> PrintDataResponse:
        products = self.repository.get_by_ids(product_ids)
        return PrintDataResponse(products=[
            PrintLabel(id=p.id, name=p.name, part_number=p.part_number, barcode=p.barcode, price=p.price)
            for p in products
        ])

    def _assign(self, product: Product, regenerate: bool) -> str:
        if product.barcode and not regenerate:
            return product.barcode
        product.barcode = barcode_for(product)
        logger.info(f"Barcode {product.barcode} assigned to product {product.id}")
        return product.barcode
