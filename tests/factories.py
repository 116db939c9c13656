# tests/factories.py
import itertools
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.core.auth.security import create_access_token, get_password_hash
from app.shared.database.models import Bin, Product, User, Warehouse

_seq = itertools.count(1)

DEFAULT_PASSWORD = "secret-pass"


def make_warehouse(db: Session, name: Optional[str] = None, code: Optional[str] = None,
                   status: str = "active", **extra) -> Warehouse:
    n = next(_seq)
    warehouse = Warehouse(
        name=name or f"Warehouse {n}",
        code=code,
        location=extra.pop("location", f"{n} Test Street"),
        status=status,
        **extra
    )
    db.add(warehouse)
    db.commit()
    db.refresh(warehouse)
    return warehouse


def make_bin(db: Session, warehouse: Warehouse, bin_number: str, capacity: int = 100,
             status: str = "active") -> Bin:
    bin_ = Bin(warehouse_id=warehouse.id, bin_number=bin_number, capacity=capacity, status=status)
    db.add(bin_)
    db.commit()
    db.refresh(bin_)
    return bin_


def make_product(db: Session, warehouse: Optional[Warehouse], part_number: Optional[str],
                 quantity: int = 0, bin_number: Optional[str] = None, name: Optional[str] = None,
                 barcode: Optional[str] = None, price: Decimal = Decimal("19.99")) -> Product:
    product = Product(
        name=name or f"Part {part_number}",
        description=f"Description of {part_number}",
        part_number=part_number,
        barcode=barcode,
        price=price,
        quantity=quantity,
        warehouse_id=warehouse.id if warehouse else None,
        bin_number=bin_number,
        condition_status="new"
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_user(db: Session, role: str = "admin", warehouse: Optional[Warehouse] = None,
              email: Optional[str] = None, password: str = DEFAULT_PASSWORD,
              is_active: bool = True) -> User:
    n = next(_seq)
    user = User(
        email=email or f"user{n}@example.com",
        password_hash=get_password_hash(password),
        first_name="Test",
        last_name=f"User{n}",
        role=role,
        warehouse_id=warehouse.id if warehouse else None,
        is_active=is_active
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token({
        "id": user.id,
        "sub": str(user.id),
        "role": user.role,
        "warehouse_id": user.warehouse_id
    })
    return {"Authorization": f"Bearer {token}"}
