from fastapi import APIRouter, Depends

from ..deps import get_current_account
from ..models.account import Account
from ..schemas.account import AccountResponse
from .auth import account_response

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=AccountResponse)
async def get_user_profile(current_account: Account = Depends(get_current_account)):
    """Account behind the bearer token, as seen by other subsystems"""
    return account_response(current_account)
