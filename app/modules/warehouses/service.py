import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.modules.warehouses.repository import WarehouseRepository
from app.modules.warehouses.schemas import (
    WarehouseCreate, WarehouseUpdate, WarehouseResponse, WarehouseStatus
)
from app.core.auth.schemas import UserResponse
from app.shared.database.models import Warehouse, User

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("address", "city", "state", "zip")


def compose_location(address: Optional[str], city: Optional[str],
                     state: Optional[str], zip: Optional[str]) -> str:
    """'address, city, state, zip' skipping blanks"""
    return ", ".join(part for part in (address, city, state, zip) if part)


class WarehouseService:

    def __init__(self, db: Session):
        self.db = db
        self.repository = WarehouseRepository(db)

    # ===== LOOKUPS USED BY OTHER MODULES =====

    def get_or_404(self, warehouse_id: int) -> Warehouse:
        warehouse = self.repository.get_by_id(warehouse_id)
        if not warehouse:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Warehouse {warehouse_id} not found"
            )
        return warehouse

    def get_active_or_404(self, warehouse_id: int) -> Warehouse:
        warehouse = self.get_or_404(warehouse_id)
        if not warehouse.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Warehouse {warehouse.name} is inactive"
            )
        return warehouse

    # ===== CRUD =====

    def list_warehouses(self) -> List[WarehouseResponse]:
        warehouses = self.repository.list_active()
        counts = self.repository.get_counts([w.id for w in warehouses])
        return [self._build_response(w, *counts.get(w.id, (0, 0))) for w in warehouses]

    def get_warehouse(self, warehouse_id: int) -> WarehouseResponse:
        warehouse = self.get_or_404(warehouse_id)
        return self._build_response(warehouse, *self.repository.get_counts([warehouse.id])[warehouse.id])

    def create_warehouse(self, data: WarehouseCreate, admin: UserResponse) -> WarehouseResponse:
        if data.code and self.repository.get_by_code(data.code):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Warehouse code {data.code} already exists"
            )
        if data.admin_user_id is not None:
            self._ensure_user_exists(data.admin_user_id)

        values = data.model_dump()
        values["status"] = data.status.value
        values["location"] = data.location or compose_location(
            data.address, data.city, data.state, data.zip
        )

        warehouse = self.repository.create(values)
        logger.info(f"Warehouse {warehouse.id} ({warehouse.name}) created by user {admin.id}")
        return self._build_response(warehouse, 0, 0)

    def update_warehouse(self, data: WarehouseUpdate, admin: UserResponse) -> WarehouseResponse:
        warehouse = self.get_or_404(data.id)

        changes = data.model_dump(exclude_unset=True, exclude={"id"})
        if "status" in changes:
            if changes["status"] is None:
                changes.pop("status")
            else:
                changes["status"] = WarehouseStatus(changes["status"]).value
        if changes.get("name") is None:
            changes.pop("name", None)

        code = changes.get("code")
        if code and code.lower() != (warehouse.code or "").lower():
            existing = self.repository.get_by_code(code)
            if existing and existing.id != warehouse.id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Warehouse code {code} already exists"
                )
        if changes.get("admin_user_id") is not None:
            self._ensure_user_exists(changes["admin_user_id"])

        # Recompose the display location when the address moves and no explicit one is sent
        if not changes.get("location") and any(field in changes for field in ADDRESS_FIELDS):
            merged = {field: changes.get(field, getattr(warehouse, field)) for field in ADDRESS_FIELDS}
            changes["location"] = compose_location(**merged)

        warehouse = self.repository.update(warehouse, changes)
        logger.info(f"Warehouse {warehouse.id} updated by user {admin.id}: {sorted(changes)}")
        return self._build_response(warehouse, *self.repository.get_counts([warehouse.id])[warehouse.id])

    def deactivate_warehouse(self, warehouse_id: int, admin: UserResponse) -> WarehouseResponse:
        """Soft delete: movements and products keep referencing the row"""
        warehouse = self.get_or_404(warehouse_id)
        warehouse = self.repository.set_status(warehouse, WarehouseStatus.INACTIVE.value)
        logger.info(f"Warehouse {warehouse.id} deactivated by user {admin.id}")
        return self._build_response(warehouse, *self.repository.get_counts([warehouse.id])[warehouse.id])

    # ===== HELPERS =====

    def _ensure_user_exists(self, user_id: int):
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found"
            )

    def _build_response(self, warehouse: Warehouse, bin_count: int,
                        product_count: int) -> WarehouseResponse:
        response = WarehouseResponse.model_validate(warehouse)
        response.bin_count = bin_count
        response.product_count = product_count
        return response
