from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Text, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.config.database import Base

class TimestampMixin:
    """Automatic created/updated timestamps"""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class RegistryStatus:
    """Values of the `status` tag on warehouses and bins"""
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = (ACTIVE, INACTIVE)

# ===== LOCATIONS =====

class Warehouse(Base, TimestampMixin):
    """Physical stock location"""
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), index=True)
    address = Column(Text)
    city = Column(String(120))
    state = Column(String(120))
    zip = Column(String(20))
    country = Column(String(120))
    location = Column(Text)
    phone = Column(String(50))
    notes = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    admin_user_id = Column(Integer, ForeignKey("users.id", use_alter=True, name="fk_warehouses_admin_user"))
    status = Column(String(20), nullable=False, default=RegistryStatus.ACTIVE, index=True)

    # Relationships
    bins = relationship("Bin", back_populates="warehouse")
    products = relationship("Product", back_populates="warehouse")
    admin_user = relationship("User", foreign_keys=[admin_user_id])

    @property
    def is_active(self) -> bool:
        return self.status == RegistryStatus.ACTIVE


class Bin(Base, TimestampMixin):
    """Storage slot inside a warehouse"""
    __tablename__ = "bins"

    id = Column(Integer, primary_key=True, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    bin_number = Column(String(50), nullable=False)
    description = Column(Text)
    capacity = Column(Integer, nullable=False, default=100)
    status = Column(String(20), nullable=False, default=RegistryStatus.ACTIVE, index=True)

    __table_args__ = (
        UniqueConstraint('warehouse_id', 'bin_number', name='bins_unique_per_warehouse'),
    )

    # Relationships
    warehouse = relationship("Warehouse", back_populates="bins")

    @property
    def is_active(self) -> bool:
        return self.status == RegistryStatus.ACTIVE


class User(Base):
    """Operator or administrator"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    role = Column(String(50), default='customer', nullable=False)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    warehouse = relationship("Warehouse", foreign_keys=[warehouse_id])

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

# ===== PRODUCTS =====

class Product(Base, TimestampMixin):
    """Per-warehouse product row; (part_number, warehouse_id) is the stock identity"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    part_number = Column(String(100), index=True)
    barcode = Column(String(100), index=True)
    category_id = Column(Integer)
    price = Column(Numeric(10, 2), default=0)
    image_url = Column(String(500))
    condition_status = Column(String(50))
    quantity = Column(Integer, nullable=False, default=0)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), index=True)
    bin_number = Column(String(50))

    __table_args__ = (
        UniqueConstraint('part_number', 'warehouse_id', name='products_unique_per_warehouse'),
    )

    # Relationships
    warehouse = relationship("Warehouse", back_populates="products")
    inventory_changes = relationship("InventoryChange", back_populates="product")


class InventoryChange(Base):
    """Audit trail of every on-hand quantity change"""
    __tablename__ = "inventory_changes"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    change_type = Column(String(50), nullable=False)
    quantity_before = Column(Integer)
    quantity_after = Column(Integer)
    reference_id = Column(Integer)
    user_id = Column(Integer)
    notes = Column(String(255))
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)

    # Relationships
    product = relationship("Product", back_populates="inventory_changes")

# ===== MOVEMENTS =====

class InventoryMovement(Base, TimestampMixin):
    """Stock movement between warehouses (in_transit -> completed)"""
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    from_warehouse_id = Column(Integer, ForeignKey("warehouses.id"), index=True)
    to_warehouse_id = Column(Integer, ForeignKey("warehouses.id"), index=True)
    from_bin = Column(String(50))
    to_bin = Column(String(50))
    quantity = Column(Integer, nullable=False, default=1)
    movement_type = Column(String(50), nullable=False, default='transfer')
    status = Column(String(50), nullable=False, default='in_transit', index=True)
    notes = Column(Text)
    created_by = Column(Integer, ForeignKey("users.id"))
    shipped_at = Column(DateTime)
    received_at = Column(DateTime)
    scanned_at = Column(DateTime)
    cancelled_at = Column(DateTime)

    # Relationships
    product = relationship("Product")
    from_warehouse = relationship("Warehouse", foreign_keys=[from_warehouse_id])
    to_warehouse = relationship("Warehouse", foreign_keys=[to_warehouse_id])
    creator = relationship("User", foreign_keys=[created_by])
