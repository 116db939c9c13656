from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.schemas import UserResponse
from app.core.auth.security import decode_access_token
from app.shared.database.models import User

ADMIN_ROLES = ["admin", "super_admin"]

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> UserResponse:
    """Resolve the bearer token to an active user"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("id") or payload.get("sub") if payload else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return UserResponse.model_validate(user)


def require_roles(allowed_roles: List[str]):
    """Dependency factory: the caller must hold one of `allowed_roles`"""
    def checker(current_user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required"
            )
        return current_user
    return checker


require_admin = require_roles(ADMIN_ROLES)


def resolve_operator_warehouse(operator: UserResponse, requested_warehouse_id=None) -> int:
    """
    Warehouse the operator is acting for.

    An operator with an assigned warehouse may only act for it; an unassigned
    head-office admin acts for whichever warehouse the request names.
    """
    if operator.warehouse_id is not None:
        if requested_warehouse_id is not None and int(requested_warehouse_id) != operator.warehouse_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only operate on your assigned warehouse"
            )
        return operator.warehouse_id

    if requested_warehouse_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="warehouse_id is required"
        )
    return int(requested_warehouse_id)
