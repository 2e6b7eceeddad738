from pydantic import BaseModel, validator
from typing import Optional

from ..utils.validators import validate_otp_code, validate_phone_number


class OTPRequest(BaseModel):
    phone_number: str

    @validator('phone_number')
    def validate_phone(cls, v):
        return validate_phone_number(v)


class OTPVerify(BaseModel):
    phone_number: str
    otp_code: str

    @validator('phone_number')
    def validate_phone(cls, v):
        return validate_phone_number(v)

    @validator('otp_code')
    def validate_code(cls, v):
        return validate_otp_code(v)


class OTPResponse(BaseModel):
    success: bool
    message: str
    expires_in: Optional[int] = None
    code: Optional[str] = None  # development only


class ApiResponse(BaseModel):
    status: bool
    message: str
