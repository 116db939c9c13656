from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from enum import Enum

# ===== ENUMS =====

class MatchClassification(str, Enum):
    EXPECTED = "expected"
    UNEXPECTED_EXISTING = "unexpected_existing"
    UNEXPECTED_NEW = "unexpected_new"

# ===== RESPONSE SCHEMAS =====

class ProductDescriptor(BaseModel):
    """What the operator sees for the scanned unit"""
    product_id: int
    part_number: Optional[str] = None
    barcode: Optional[str] = None
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None
    bin_number: Optional[str] = None
    quantity: int = 0

class ExpectedMovementInfo(BaseModel):
    movement_id: int
    quantity: int
    from_warehouse_id: Optional[int] = None
    from_warehouse_name: Optional[str] = None
    from_bin: Optional[str] = None
    shipped_at: Optional[datetime] = None
    notes: Optional[str] = None

class MatchResult(BaseModel):
    identifier: str
    warehouse_id: int
    classification: MatchClassification
    movement: Optional[ExpectedMovementInfo] = None
    candidates: int = 0
    product: Optional[ProductDescriptor] = None
    requires_confirmation: bool
    next_action: str
