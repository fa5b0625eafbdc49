from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bestworkers.deps import get_current_account_id
from bestworkers.schemas.profiles import (
    ProfileCreate,
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileUpdate,
)
from bestworkers.services.profiles import profile_store

router = APIRouter(prefix="/professions", tags=["professions"])


@router.post("", response_model=ProfileDetailResponse, status_code=status.HTTP_201_CREATED)
def create_profession(
    payload: ProfileCreate, account_id: int = Depends(get_current_account_id)
) -> ProfileDetailResponse:
    return ProfileDetailResponse(data=profile_store.create(account_id, payload))


@router.get("", response_model=ProfileListResponse)
def get_professionals_by_service(
    service_name: Optional[str] = Query(default=None, alias="serviceName"),
    service_category: Optional[str] = Query(default=None, alias="serviceCategory"),
) -> ProfileListResponse:
    profiles = profile_store.find_by_service_name(service_name, service_category)
    return ProfileListResponse(count=len(profiles), data=profiles)


@router.get("/me", response_model=ProfileDetailResponse)
def get_own_profession(
    account_id: int = Depends(get_current_account_id),
) -> ProfileDetailResponse:
    return ProfileDetailResponse(data=profile_store.get_own(account_id))


@router.put("/me", response_model=ProfileDetailResponse)
def update_own_profession(
    payload: ProfileUpdate, account_id: int = Depends(get_current_account_id)
) -> ProfileDetailResponse:
    return ProfileDetailResponse(data=profile_store.update_own(account_id, payload))
