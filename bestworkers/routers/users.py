from fastapi import APIRouter, Depends

from bestworkers.deps import get_current_account_id
from bestworkers.schemas.accounts import (
    AccountDetailsResponse,
    AccountUpdate,
    ChangePinRequest,
    MessageResponse,
)
from bestworkers.services.registration import registration_service

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/update", response_model=AccountDetailsResponse)
def update_user(
    payload: AccountUpdate, account_id: int = Depends(get_current_account_id)
) -> AccountDetailsResponse:
    account = registration_service.update_details(account_id, payload)
    return AccountDetailsResponse(data=account)


@router.put("/change-pin", response_model=MessageResponse)
def change_pin(
    payload: ChangePinRequest, account_id: int = Depends(get_current_account_id)
) -> MessageResponse:
    registration_service.change_pin(account_id, payload)
    return MessageResponse(message="PIN changed successfully")
