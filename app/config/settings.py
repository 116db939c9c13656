from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App Info
    app_name: str = "PartsDepot Inventory API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str
    auto_create_tables: bool = False

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 1 week

    # CORS
    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the API from a browser"
    )

    # Inventory rules
    ship_allow_partial: bool = Field(
        default=False,
        description="Ship min(requested, on hand) instead of rejecting an over-shipment"
    )
    enforce_bin_capacity: bool = Field(
        default=True,
        description="Reject stock placements that overflow a registered bin"
    )
    default_bin_capacity: int = 100
    movements_default_limit: int = 50
    movements_max_limit: int = 500
    barcode_prefix: str = "MP-"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
