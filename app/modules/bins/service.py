import logging
from collections import defaultdict
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.config.settings import settings
from app.modules.bins.repository import BinRepository
from app.modules.bins.schemas import (
    BinCreate, BinUpdate, BinResponse, BinStatus,
    BinContentsRow, BinContentsResponse
)
from app.modules.warehouses.schemas import WarehouseSummary
from app.modules.warehouses.service import WarehouseService
from app.core.auth.schemas import UserResponse
from app.shared.database.models import Bin

logger = logging.getLogger(__name__)

UNASSIGNED_BIN = "UNASSIGNED"


class BinService:

    def __init__(self, db: Session):
        self.db = db
        self.repository = BinRepository(db)
        self.warehouses = WarehouseService(db)

    # ===== CRUD =====

    def get_bin(self, bin_id: int) -> BinResponse:
        bin_ = self._get_or_404(bin_id)
        count = self.repository.count_products_in_bin(bin_.warehouse_id, bin_.bin_number)
        return self._build_response(bin_, count)

    def list_bins(self, warehouse_id: Optional[int] = None) -> List[BinResponse]:
        if warehouse_id is not None:
            bins = self.repository.list_for_warehouse(warehouse_id)
        else:
            bins = self.repository.list_active()
        counts = self.repository.get_product_counts(bins)
        return [
            self._build_response(b, counts.get((b.warehouse_id, b.bin_number), 0))
            for b in bins
        ]

    def create_bin(self, data: BinCreate, admin: UserResponse) -> BinResponse:
        warehouse = self.warehouses.get_or_404(data.warehouse_id)
        if not warehouse.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Warehouse {data.warehouse_id} not found"
            )

        bin_number = data.bin_number.strip()
        if self.repository.get_by_number(warehouse.id, bin_number):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Bin {bin_number} already exists in warehouse {warehouse.name}"
            )

        bin_ = self.repository.create({
            "warehouse_id": warehouse.id,
            "bin_number": bin_number,
            "description": data.description,
            "capacity": data.capacity if data.capacity is not None else settings.default_bin_capacity,
            "status": BinStatus.ACTIVE.value
        })
        logger.info(f"Bin {bin_number} created in warehouse {warehouse.id} by user {admin.id}")
        return self._build_response(bin_, 0)

    def update_bin(self, bin_id: int, data: BinUpdate, admin: UserResponse) -> BinResponse:
        bin_ = self._get_or_404(bin_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        new_number = changes.get("bin_number")
        if new_number is not None:
            new_number = new_number.strip()
            changes["bin_number"] = new_number
        if new_number and new_number != bin_.bin_number:
            if self.repository.get_by_number(bin_.warehouse_id, new_number):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Bin {new_number} already exists in this warehouse"
                )
            # Products reference bins by number; renaming would orphan their placement
            if self.repository.count_products_in_bin(bin_.warehouse_id, bin_.bin_number):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Bin {bin_.bin_number} still holds products and cannot be renamed"
                )
        if "status" in changes:
            changes["status"] = BinStatus(changes["status"]).value

        bin_ = self.repository.update(bin_, changes)
        logger.info(f"Bin {bin_.id} updated by user {admin.id}: {sorted(changes)}")
        return self.get_bin(bin_.id)

    def deactivate_bin(self, bin_id: int, admin: UserResponse) -> BinResponse:
        bin_ = self._get_or_404(bin_id)
        bin_ = self.repository.update(bin_, {"status": BinStatus.INACTIVE.value})
        logger.info(f"Bin {bin_.id} deactivated by user {admin.id}")
        return self.get_bin(bin_.id)

    # ===== CAPACITY =====

    def check_capacity(self, warehouse_id: int, bin_number: Optional[str], incoming: int,
                       exclude_product_id: Optional[int] = None):
        """
        Reject a placement that would overflow a registered, active bin.

        Free-form bin numbers with no registry row are accepted as-is.
        """
        if not settings.enforce_bin_capacity or not bin_number:
            return

        bin_ = self.repository.get_by_number(warehouse_id, bin_number)
        if not bin_ or not bin_.is_active:
            return

        current = self.repository.quantity_in_bin(warehouse_id, bin_number, exclude_product_id)
        if current + incoming > bin_.capacity:
            logger.warning(
                f"Bin {bin_number} in warehouse {warehouse_id} over capacity: "
                f"{current} + {incoming} > {bin_.capacity}"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Bin {bin_number} capacity exceeded: holds {current}, "
                    f"adding {incoming}, capacity {bin_.capacity}"
                )
            )

    # ===== BIN CONTENTS =====

    def get_bin_contents(self, warehouse_id: int, search: Optional[str] = None) -> BinContentsResponse:
        """Products at a warehouse grouped by bin, with totals"""
        warehouse = self.warehouses.repository.get_by_id(warehouse_id)
        products = self.repository.get_products_for_contents(warehouse_id, search)

        grouped = defaultdict(list)
        for product in products:
            grouped[product.bin_number or UNASSIGNED_BIN].append(product)

        rows = []
        for bin_number in sorted(grouped):
            items = grouped[bin_number]
            rows.append(BinContentsRow(
                bin_number=bin_number,
                part_numbers=", ".join(sorted({p.part_number for p in items if p.part_number})),
                product_names=", ".join(sorted({p.name for p in items if p.name})),
                unique_products=len({p.id for p in items}),
                total_quantity=sum(p.quantity or 0 for p in items)
            ))

        return BinContentsResponse(
            warehouse=WarehouseSummary.model_validate(warehouse) if warehouse else None,
            bins=rows,
            total_bins=len(rows),
            generated_at=datetime.utcnow()
        )

    # ===== HELPERS =====

    def _get_or_404(self, bin_id: int) -> Bin:
        bin_ = self.repository.get_by_id(bin_id)
        if not bin_:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Bin not found"
            )
        return bin_

    def _build_response(self, bin_: Bin, product_count: int) -> BinResponse:
        response = BinResponse.model_validate(bin_)
        response.warehouse_name = bin_.warehouse.name if bin_.warehouse else None
        response.product_count = product_count
        return response
