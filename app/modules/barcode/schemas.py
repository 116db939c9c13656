from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class BarcodeAction(str, Enum):
    SCAN = "scan"
    GENERATE = "generate"
    BULK_GENERATE = "bulk-generate"
    PRINT_DATA = "print-data"

# ===== REQUEST SCHEMAS =====

class GenerateBarcodeRequest(BaseModel):
    product_id: int = Field(..., gt=0)
    regenerate: bool = Field(default=False, description="Replace an existing barcode")

class ProductIdsRequest(BaseModel):
    """bulk-generate and print-data"""
    product_ids: List[int] = Field(..., min_length=1)
    regenerate: bool = False

# ===== RESPONSE SCHEMAS =====

class ScannedProduct(BaseModel):
    id: int
    name: str
    part_number: Optional[str] = None
    barcode: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    condition_status: Optional[str] = None
    quantity: int = 0
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None
    warehouse_location: Optional[str] = None
    bin_number: Optional[str] = None

class ScanResponse(BaseModel):
    product: ScannedProduct

class GeneratedBarcode(BaseModel):
    id: int
    barcode: str

class GenerateBarcodeResponse(BaseModel):
    message: str
    barcode: str

class BulkGenerateResponse(BaseModel):
    message: str
    barcodes: List[GeneratedBarcode]
    missing_ids: List[int] = []

class PrintLabel(BaseModel):
    id: int
    name: str
    part_number: Optional[str] = None
    barcode: Optional[str] = None
    price: Optional[Decimal] = None

class PrintDataResponse(BaseModel):
    products: List[PrintLabel]
