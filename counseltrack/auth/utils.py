from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import JWTError, jwt
from fastapi import HTTPException, status
from counseltrack.core.config import Settings, settings as default_settings

BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]

def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))

def create_jwt_token(
    user_id: str,
    email: str,
    role: str,
    settings: Optional[Settings] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Create a signed access token carrying the user's id, email and role"""
    settings = settings or default_settings
    lifetime = expires_in or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    payload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_jwt_token(token: str, settings: Optional[Settings] = None) -> dict:
    """Decode and verify a JWT token; expired or tampered tokens are a 401"""
    settings = settings or default_settings
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )
