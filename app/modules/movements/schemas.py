from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field
from enum import Enum

# ===== ENUMS =====

class MovementStatus(str, Enum):
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class MovementType(str, Enum):
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"
    UNEXPECTED = "unexpected"

class MovementAction(str, Enum):
    SHIP = "ship"
    RECEIVE = "receive"
    ASSIGN_BIN = "assign-bin"
    ADD_UNEXPECTED = "add-unexpected"
    CANCEL = "cancel"

class StockChangeType(str, Enum):
    SHIP = "ship"
    RECEIVE = "receive"
    CANCEL = "cancel"
    UNEXPECTED = "unexpected"

# ===== REQUEST SCHEMAS =====

class ShipRequest(BaseModel):
    """Ship products from one warehouse to another"""
    product_ids: List[int] = Field(..., min_length=1, description="Product rows at the source warehouse")
    from_warehouse_id: int = Field(..., gt=0, description="Source warehouse")
    to_warehouse_id: int = Field(..., gt=0, description="Destination warehouse")
    quantity: int = Field(default=1, gt=0, description="Units shipped per product")
    notes: Optional[str] = Field(None, max_length=500)

class ReceiveRequest(BaseModel):
    """Receive an in-transit movement at its destination"""
    movement_id: Optional[int] = Field(None, gt=0)
    barcode: Optional[str] = Field(None, min_length=1, description="Scanned barcode or part number")
    bin_number: Optional[str] = Field(None, max_length=50, description="Destination bin")
    warehouse_id: Optional[int] = Field(None, gt=0, description="Receiving warehouse")

class AssignBinRequest(BaseModel):
    """Place a product row in a warehouse/bin without a transfer"""
    product_id: int = Field(..., gt=0)
    bin_number: str = Field(..., min_length=1, max_length=50)
    warehouse_id: Optional[int] = Field(None, gt=0, description="Defaults to the product's warehouse")

class AddUnexpectedRequest(BaseModel):
    """Add stock that arrived with no matching in-transit movement"""
    part_number: str = Field(..., min_length=1, max_length=100)
    warehouse_id: Optional[int] = Field(None, gt=0)
    bin_number: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(default=1, gt=0)
    notes: Optional[str] = Field(None, max_length=500)

class CancelRequest(BaseModel):
    """Return an in-transit movement to its sender"""
    movement_id: int = Field(..., gt=0)
    reason: Optional[str] = Field(None, max_length=300)

class MovementUpdate(BaseModel):
    """Manual notes/status override"""
    id: int = Field(..., gt=0)
    status: Optional[MovementStatus] = None
    notes: Optional[str] = Field(None, max_length=500)

# ===== FILTERS =====

class MovementFilters(BaseModel):
    status: Optional[MovementStatus] = None
    product_id: Optional[int] = None
    movement_type: Optional[MovementType] = None
    warehouse_id: Optional[int] = None
    from_warehouse_id: Optional[int] = None
    to_warehouse_id: Optional[int] = None
    limit: int = 50

# ===== RESPONSE SCHEMAS =====

class MovementResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    part_number: Optional[str] = None
    barcode: Optional[str] = None
    from_warehouse_id: Optional[int] = None
    from_warehouse_name: Optional[str] = None
    to_warehouse_id: Optional[int] = None
    to_warehouse_name: Optional[str] = None
    from_bin: Optional[str] = None
    to_bin: Optional[str] = None
    quantity: int
    movement_type: MovementType
    status: MovementStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_by_name: Optional[str] = None
    shipped_at: Optional[datetime] = None
    received_at: Optional[datetime] = None
    scanned_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class StockRowInfo(BaseModel):
    """Product row touched by a stock operation"""
    product_id: int
    part_number: Optional[str] = None
    name: str
    warehouse_id: Optional[int] = None
    bin_number: Optional[str] = None
    quantity: int
    created: bool = False

class ShipResponse(BaseModel):
    message: str
    shipped_count: int
    movements: List[MovementResponse]

class ReceiveResponse(BaseModel):
    message: str
    movement: MovementResponse
    product: StockRowInfo

class StockOperationResponse(BaseModel):
    """assign-bin, add-unexpected and cancel"""
    message: str
    product: StockRowInfo
    movement: Optional[MovementResponse] = None

class MovementMutationResponse(BaseModel):
    message: str
    movement: MovementResponse

class MovementListResponse(BaseModel):
    movements: List[MovementResponse]
    total: int
