from .router import router as barcode_router
from .service import BarcodeService, barcode_for

__all__ = [
    "barcode_router",
    "BarcodeService",
    "barcode_for"
]
