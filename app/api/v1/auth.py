import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import get_current_user
from app.core.auth.schemas import LoginRequest, TokenResponse, UserResponse
from app.core.auth.security import create_access_token, verify_password
from app.shared.database.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email + password for a bearer token"""
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    token = create_access_token({
        "id": user.id,
        "sub": str(user.id),
        "role": user.role,
        "warehouse_id": user.warehouse_id
    })
    return TokenResponse(
        access_token=token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user)
    )


@router.get("/me", response_model=UserResponse)
async def me(current_user: UserResponse = Depends(get_current_user)):
    """Current authenticated principal"""
    return current_user
