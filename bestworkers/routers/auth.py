from fastapi import APIRouter, Depends, status

from bestworkers.config import settings
from bestworkers.deps import get_current_account_id
from bestworkers.schemas.accounts import AccountViewResponse
from bestworkers.schemas.auth import (
    AuthTokenResponse,
    LoginRequest,
    OtpIssuedResponse,
    RegisterRequest,
    ResendOtpRequest,
    VerifyOtpRequest,
)
from bestworkers.services.registration import AuthResult, OtpIssue, registration_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _otp_response(issue: OtpIssue, message: str) -> OtpIssuedResponse:
    return OtpIssuedResponse(
        message=message,
        email=issue.email,
        expires_in_seconds=issue.expires_in_seconds,
        otp=issue.code if settings.otp_debug else None,
    )


def _token_response(result: AuthResult) -> AuthTokenResponse:
    return AuthTokenResponse(
        token=result.token.token,
        expires_in_seconds=result.token.expires_in_seconds,
        data=result.account,
    )


@router.post(
    "/register",
    response_model=OtpIssuedResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: RegisterRequest) -> OtpIssuedResponse:
    issue = registration_service.initiate_registration(payload)
    return _otp_response(issue, "OTP sent to your email")


@router.post("/resend-otp", response_model=OtpIssuedResponse, response_model_exclude_none=True)
def resend_otp(payload: ResendOtpRequest) -> OtpIssuedResponse:
    issue = registration_service.resend_otp(payload.email)
    return _otp_response(issue, "New OTP sent to your email")


@router.post(
    "/verify-otp",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def verify_otp(payload: VerifyOtpRequest) -> AuthTokenResponse:
    return _token_response(registration_service.verify_otp(payload))


@router.post("/login", response_model=AuthTokenResponse)
def login(payload: LoginRequest) -> AuthTokenResponse:
    return _token_response(registration_service.login(payload.email, payload.pin))


@router.get("/me", response_model=AccountViewResponse)
def get_me(account_id: int = Depends(get_current_account_id)) -> AccountViewResponse:
    return AccountViewResponse(data=registration_service.get_current_account(account_id))
