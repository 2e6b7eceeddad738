from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AccountResponse(BaseModel):
    id: str
    email: Optional[str]
    phone_number: Optional[str]
    full_name: Optional[str]
    profile_picture: Optional[str]
    otp_verified: Optional[bool]
    is_online: bool
    is_profile_complete: bool
    last_login: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
