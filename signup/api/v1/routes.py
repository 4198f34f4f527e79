"""
API v1 routes.

Defines REST endpoints for account registration and email-link verification.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from signup.api.dependencies import get_is_authenticated, get_registration_service
from signup.api.models import (
    ConfirmResponse,
    ErrorResponse,
    RegisterRequest,
    RegisterResponse,
    RegistrationErrorResponse,
    ResendRequest,
    ResendResponse,
    ViolationModel,
)
from signup.config.settings import get_settings
from signup.domain.exceptions import AlreadyAuthenticated, InvalidRegistration
from signup.domain.registration import ConfirmStatus, RegistrationService

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Caller is already authenticated"},
        422: {"model": RegistrationErrorResponse, "description": "Validation error or email taken"},
    },
    summary="Register a new account",
    description="Submit identity and password to create an unverified account. "
    "A signed confirmation link is sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    authenticated: bool = Depends(get_is_authenticated),
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse | JSONResponse:
    """
    Register a new account and send the confirmation link.

    Returns the link lifetime on success. A duplicate email is reported as
    a violation on the email field, like any other validation failure.
    """
    try:
        pending = service.register(request_data.to_input(), authenticated=authenticated)
    except AlreadyAuthenticated:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Already authenticated",
        ) from None
    except InvalidRegistration as e:
        body = RegistrationErrorResponse(
            detail="Registration failed",
            violations=[ViolationModel(field=v.field, message=v.message) for v in e.violations],
        )
        return JSONResponse(status_code=422, content=body.model_dump())

    return RegisterResponse(
        message="Confirmation link sent",
        email=pending.email,
        expires_in_seconds=get_settings().verification_ttl_seconds,
        notification_sent=pending.notification_sent,
    )


@router.get(
    "/verify/email",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ConfirmResponse, "description": "Link invalid, expired or unknown"},
    },
    summary="Confirm an email address",
    description="Target of the link sent by /register. Always answers with "
    "where the client should go next, never with a hard error.",
)
def verify_email(
    token: str | None = Query(None, description="Signed verification token"),
    service: RegistrationService = Depends(get_registration_service),
) -> ConfirmResponse | JSONResponse:
    """Validate the signed link and mark the account verified."""
    settings = get_settings()
    result = service.confirm(token)

    if result.status is ConfirmStatus.VERIFIED:
        return ConfirmResponse(
            status=result.status.value,
            message=result.message,
            redirect_to=settings.welcome_path,
        )

    body = ConfirmResponse(
        status=result.status.value,
        message=result.message,
        redirect_to=settings.registration_path,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


@router.post(
    "/verify/resend",
    response_model=ResendResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a new confirmation link",
    description="Issues a fresh link when an unverified account uses this email. "
    "The response is identical whether or not such an account exists.",
)
def resend_verification(
    request_data: ResendRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> ResendResponse:
    """Re-send the confirmation link without revealing account existence."""
    service.resend_verification(request_data.email)
    return ResendResponse(message="If an unverified account uses this email, a new link was sent")
