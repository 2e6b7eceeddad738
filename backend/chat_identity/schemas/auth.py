from pydantic import BaseModel, EmailStr, validator
from typing import Optional

from ..utils.validators import validate_otp_code, validate_phone_number, validate_required


# Email signup / signin
class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str

    @validator('password')
    def validate_password(cls, v):
        if not v or len(v) > 72:
            raise ValueError('Password must be between 1 and 72 characters')
        return v

    @validator('full_name')
    def validate_full_name(cls, v):
        return validate_required(v, 'Full name')


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# Phone + OTP signup / login
class OTPSignupRequest(BaseModel):
    phone_number: str
    otp_code: str
    full_name: Optional[str] = None

    @validator('phone_number')
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @validator('otp_code')
    def validate_code(cls, v):
        return validate_otp_code(v)


# Responses
class SignupResponse(BaseModel):
    token: str
    is_authenticated: bool = True
    user_id: str
    requires_otp_verification: bool


class LoginResponse(BaseModel):
    token: str
    refresh_token: str
    is_authenticated: bool = True
    is_profile_complete: bool
