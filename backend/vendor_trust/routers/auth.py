"""
Vendor Trust Engine - Authentication Router
Handles vendor registration, login, and session verification.
"""
from uuid import uuid4
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.db_models import UserDB
from ..auth import hash_password, verify_password, create_access_token, get_current_user
from ..services.trust import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    username: str
    password: str
    shop_name: Optional[str] = None

    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters')
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    message: str
    user_id: str
    vendor_id: str


class UserResponse(BaseModel):
    id: str
    email: str
    username: str
    role: str = "vendor"
    vendor_id: Optional[str] = None


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a vendor account.

    Provisions the vendor's trust profile with default trust state.
    """
    existing = db.query(UserDB).filter(
        (UserDB.email == request.email) | (UserDB.username == request.username)
    ).first()
    if existing:
        detail = "Email already registered" if existing.email == request.email else "Username already taken"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    user = UserDB(
        id=str(uuid4()),
        email=request.email,
        username=request.username,
        password_hash=hash_password(request.password),
        role="vendor",
    )
    db.add(user)
    db.flush()

    profile = ProfileStore(db).create_profile(shop_name=request.shop_name, user_id=user.id)
    db.commit()

    logger.info(f"Vendor registered: {request.email} (vendor {profile.vendor_id})")
    return RegisterResponse(
        message="Vendor created successfully",
        user_id=user.id,
        vendor_id=profile.vendor_id,
    )


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token.
    """
    user = db.query(UserDB).filter(UserDB.email == request.email).first()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    vendor_id = user.vendor_profile.id if user.vendor_profile else None
    access_token = create_access_token(user.id, user.email, user.role or "vendor", vendor_id)

    logger.info(f"User logged in: {request.email}")
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserDB = Depends(get_current_user)):
    """
    Get current authenticated user info.
    """
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        username=current_user.username,
        role=current_user.role or "vendor",
        vendor_id=current_user.vendor_profile.id if current_user.vendor_profile else None,
    )
