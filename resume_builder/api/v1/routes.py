"""
API v1 routes - registration, password reset and login.

Rejected codes always produce the same 400 "Invalid or expired OTP",
whatever the underlying reason, so the endpoints cannot be used to tell
an unknown code from an expired or superseded one.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from resume_builder.api.dependencies import (
    get_authentication_service,
    get_basic_auth_credentials,
    get_password_reset_service,
    get_registration_service,
)
from resume_builder.api.models import (
    EmailRequest,
    ErrorResponse,
    LoginResponse,
    MessageResponse,
    OtpIssuedResponse,
    OtpRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from resume_builder.config.settings import Settings, get_settings
from resume_builder.domain.authentication import AuthenticationService
from resume_builder.domain.exceptions import (
    DomainNotAllowed,
    EmailAlreadyRegistered,
    EmailNotRegistered,
    MissingRequiredField,
    NoPendingRegistration,
)
from resume_builder.domain.models import RegistrationCandidate, normalize_email
from resume_builder.domain.password_reset import PasswordResetService
from resume_builder.domain.registration import RegistrationService
from resume_builder.domain.security import OTP_VALIDITY

router = APIRouter(tags=["v1"])

INVALID_CODE_DETAIL = "Invalid or expired OTP"


def _otp_issued(message: str, email: str, otp: str, settings: Settings) -> OtpIssuedResponse:
    return OtpIssuedResponse(
        message=message,
        email=normalize_email(email),
        expires_in_seconds=int(OTP_VALIDITY.total_seconds()),
        otp=otp if settings.expose_otp_in_response else None,
    )


@router.post(
    "/register/initiate",
    response_model=OtpIssuedResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Missing required field"},
        403: {"model": ErrorResponse, "description": "Email outside the organization domain"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
    },
    summary="Start a registration",
    description="Submit account details to begin registration. "
    "A 6-digit verification code is sent to the provided email.",
)
async def initiate_registration(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_settings),
) -> OtpIssuedResponse:
    """
    Start a registration and send the verification code.

    The first account registered becomes admin and the second manager;
    both must use the organization's email domain.
    """
    candidate = RegistrationCandidate(
        email=request_data.email,
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        password=request_data.password,
        confirm_password=request_data.confirm_password,
    )
    try:
        otp = await service.initiate(candidate)
    except MissingRequiredField as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except DomainNotAllowed as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{e.role.capitalize()} must belong to the organization",
        ) from None
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None
    return _otp_issued(
        "OTP sent successfully. Please verify your email to complete registration.",
        request_data.email,
        otp,
        settings,
    )


@router.post(
    "/register/verify",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired code"},
        422: {"description": "Validation error"},
    },
    summary="Complete a registration",
    description="Submit the 6-digit code received by email to create the account.",
)
def verify_registration(
    request_data: OtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    if not service.verify(request_data.otp):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE_DETAIL)
    return MessageResponse(message="Email verified and registration completed successfully")


@router.post(
    "/register/resend-otp",
    response_model=OtpIssuedResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "No pending registration"},
        422: {"description": "Validation error"},
    },
    summary="Resend a registration code",
)
async def resend_registration_otp(
    request_data: EmailRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_settings),
) -> OtpIssuedResponse:
    try:
        otp = await service.resend(request_data.email)
    except NoPendingRegistration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No pending registration found for this email",
        ) from None
    return _otp_issued("OTP resent successfully", request_data.email, otp, settings)


@router.post(
    "/password/forgot",
    response_model=OtpIssuedResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Email not registered"},
        422: {"description": "Validation error"},
    },
    summary="Request a password reset code",
)
async def forgot_password(
    request_data: EmailRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
    settings: Settings = Depends(get_settings),
) -> OtpIssuedResponse:
    try:
        otp = await service.initiate(request_data.email)
    except EmailNotRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email not registered",
        ) from None
    return _otp_issued(
        "Password reset OTP sent successfully. Please check your email.",
        request_data.email,
        otp,
        settings,
    )


@router.post(
    "/password/verify-otp",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired code"},
        422: {"description": "Validation error"},
    },
    summary="Check a password reset code",
    description="Checks the code without consuming it; the reset itself consumes it.",
)
def verify_password_reset_otp(
    request_data: OtpRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    if not service.verify_code(request_data.otp):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE_DETAIL)
    return MessageResponse(message="OTP verified successfully. Please set your new password.")


@router.patch(
    "/password/reset",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid code or reset failed"},
        422: {"description": "Validation error (including mismatched passwords)"},
    },
    summary="Set a new password",
)
def reset_password(
    request_data: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    if not service.reset_with_code(request_data.otp, request_data.new_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to reset password. Please try again.",
        )
    return MessageResponse(message="Password reset successfully")


@router.post(
    "/password/resend-otp",
    response_model=OtpIssuedResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Email not registered"},
        422: {"description": "Validation error"},
    },
    summary="Resend a password reset code",
)
async def resend_password_reset_otp(
    request_data: EmailRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
    settings: Settings = Depends(get_settings),
) -> OtpIssuedResponse:
    try:
        otp = await service.resend(request_data.email)
    except EmailNotRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email not registered",
        ) from None
    return _otp_issued("OTP resent successfully", request_data.email, otp, settings)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
    summary="Check account credentials",
    description="Credentials (email:password) are provided via HTTP BASIC AUTH header.",
)
def login(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    service: AuthenticationService = Depends(get_authentication_service),
) -> LoginResponse:
    email, password = credentials
    account = service.authenticate(email, password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return LoginResponse(message="Login successful", email=account.email, role=account.role.value)
