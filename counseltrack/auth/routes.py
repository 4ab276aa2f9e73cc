import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Header
from counseltrack.auth.schemas import LoginRequest, TokenResponse, UserProfile
from counseltrack.auth.users import User, get_user_by_email, get_user_by_id, list_users
from counseltrack.auth.utils import verify_password, create_jwt_token, decode_jwt_token
from counseltrack.core.config import Settings
from counseltrack.db.database import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

def to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        is_admin=user.is_admin,
    )

@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, settings: Settings = Depends(get_settings)):
    """Login user and return JWT token"""

    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        logger.info("Failed login attempt for %s", request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    token = create_jwt_token(user.id, user.email, user.role, settings)
    logger.info("User %s signed in as %s", user.email, user.role)

    return TokenResponse(
        access_token=token,
        username=user.email,
        full_name=user.full_name,
        role=user.role,
    )

def get_user_from_token(authorization: Optional[str], settings: Optional[Settings] = None) -> User:
    """Helper function to extract and validate user from JWT token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header"
        )

    token = authorization.split(" ")[1]
    payload = decode_jwt_token(token, settings)
    user_id = payload.get("user_id")

    user = get_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return user

def get_current_user(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> User:
    """FastAPI dependency for the signed-in user"""
    return get_user_from_token(authorization, settings)

def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user

@router.get("/me", response_model=UserProfile)
def get_profile(user: User = Depends(get_current_user)):
    """Get current user profile (protected route)"""
    return to_profile(user)

@router.get("/users", response_model=List[UserProfile])
def get_users(admin: User = Depends(require_admin)):
    """List all user profiles (admin only)"""
    return [to_profile(user) for user in list_users()]
