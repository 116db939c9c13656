from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum

# ===== ENUMS =====

class WarehouseStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

# ===== REQUEST SCHEMAS =====

class WarehouseCreate(BaseModel):
    """Create a warehouse"""
    name: str = Field(..., min_length=1, max_length=255, description="Warehouse name")
    code: Optional[str] = Field(None, max_length=50, description="Short code, e.g. CA-TOR")
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=120)
    zip: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, description="Display location; composed from the address when omitted")
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    admin_user_id: Optional[int] = Field(None, description="Administrator in charge")
    status: WarehouseStatus = WarehouseStatus.ACTIVE

class WarehouseUpdate(BaseModel):
    """Partial update; only the fields sent are changed"""
    id: int = Field(..., gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=120)
    zip: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    admin_user_id: Optional[int] = None
    status: Optional[WarehouseStatus] = None

# ===== RESPONSE SCHEMAS =====

class WarehouseResponse(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    admin_user_id: Optional[int] = None
    status: WarehouseStatus
    is_active: bool
    bin_count: int = 0
    product_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class WarehouseSummary(BaseModel):
    """Minimal warehouse reference embedded in other responses"""
    id: int
    name: str
    code: Optional[str] = None

    class Config:
        from_attributes = True

class WarehouseListResponse(BaseModel):
    warehouses: List[WarehouseResponse]

class WarehouseDetailResponse(BaseModel):
    warehouse: WarehouseResponse

class WarehouseMutationResponse(BaseModel):
    message: str
    warehouse: Optional[WarehouseResponse] = None
