from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum

from app.modules.warehouses.schemas import WarehouseSummary

# ===== ENUMS =====

class BinStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

# ===== REQUEST SCHEMAS =====

class BinCreate(BaseModel):
    """Create a bin inside a warehouse"""
    warehouse_id: int = Field(..., gt=0, description="Owning warehouse")
    bin_number: str = Field(..., min_length=1, max_length=50, description="Bin label, unique per warehouse")
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0, description="Maximum units; defaults to the configured capacity")

class BinUpdate(BaseModel):
    """Partial update; only the fields sent are changed"""
    bin_number: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    status: Optional[BinStatus] = None

# ===== RESPONSE SCHEMAS =====

class BinResponse(BaseModel):
    id: int
    warehouse_id: int
    warehouse_name: Optional[str] = None
    bin_number: str
    description: Optional[str] = None
    capacity: int
    status: BinStatus
    is_active: bool
    product_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BinListResponse(BaseModel):
    bins: List[BinResponse]

class BinDetailResponse(BaseModel):
    bin: BinResponse

class BinMutationResponse(BaseModel):
    message: str
    bin: Optional[BinResponse] = None

# ===== BIN CONTENTS =====

class BinContentsRow(BaseModel):
    """Aggregated view of one bin"""
    bin_number: str
    part_numbers: str
    product_names: str
    unique_products: int
    total_quantity: int

class BinContentsResponse(BaseModel):
    warehouse: Optional[WarehouseSummary] = None
    bins: List[BinContentsRow]
    total_bins: int
    generated_at: datetime
