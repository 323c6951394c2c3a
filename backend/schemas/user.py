from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime

# Shared properties for user models
class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(BaseModel):
    username: str
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)
    phone_number: Optional[str] = None
    address: Optional[str] = None

# Output schema for user profile details (never includes the password)
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    merged_cart_lines: int = 0
