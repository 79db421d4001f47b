from typing import List, Optional
from pydantic import BaseModel, EmailStr


# -----------------------------------------------------
# LOGIN REQUEST (using Supabase email/password)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# TOKEN RESPONSE (Supabase session JWT)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    company_id: Optional[str] = None
    roles: List[str] = []


# -----------------------------------------------------
# PROFILE
# -----------------------------------------------------
class ProfileUpdate(BaseModel):
    """Self-service fields; roles and company are admin-managed."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


# -----------------------------------------------------
# ROLE ASSIGNMENT (admin)
# -----------------------------------------------------
class UserRolesUpdate(BaseModel):
    roles: List[str]
