from pydantic import BaseModel, EmailStr

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str  # email address
    full_name: str
    role: str

class UserProfile(BaseModel):
    id: str
    email: str
    role: str
    first_name: str
    last_name: str
    full_name: str
    is_admin: bool

    class Config:
        from_attributes = True
