from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class UserRole(str, Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    ADMIN = "admin"


# Roles a caller may pick for themselves; admins are created by admins.
SELF_ASSIGNABLE_ROLES = (UserRole.CUSTOMER.value, UserRole.SELLER.value)


class AccountStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING_VERIFICATION = "pending_verification"


class AuthProvider(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    OAUTH = "oauth"


class Address(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    # Validated by the account service so a bad role maps to ValidationError.
    role: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None

    # Seller-only fields, ignored for customers
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_description: Optional[str] = None


class OAuthUserCreate(BaseModel):
    email: EmailStr
    provider: str
    provider_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
    role: Optional[str] = None


class AdminCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str
    last_name: str
    admin_permissions: List[str] = Field(default_factory=list)


class UserLogin(BaseModel):
    username: str
    password: str


class ProfileUpsert(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None


class AccountStatusUpdate(BaseModel):
    status: str


class RegisterResponse(BaseModel):
    user_id: str
    username: str
    role: str
    account_status: str


class UserCreated(BaseModel):
    user_id: str
    username: Optional[str] = None
    role: Optional[str] = None


class OAuthLoginResponse(UserCreated):
    access_token: str
    token_type: str = "bearer"


class UserSummary(BaseModel):
    """What a successful login hands back. Never carries the password digest."""

    user_id: str
    username: Optional[str] = None
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    account_status: str
    profile_picture: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class UserResponse(BaseModel):
    id: str
    auth_user_id: Optional[str] = None
    username: Optional[str] = None
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
    provider: str
    role: Optional[str] = None
    account_status: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_description: Optional[str] = None
    business_verified: Optional[bool] = None
    rating: Optional[float] = None
    total_sales: Optional[int] = None
    total_orders: Optional[int] = None
    admin_permissions: Optional[List[str]] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None

    class Config:
        from_attributes = True
