"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from auth.dependencies import (
    enforce_login_rate_limit,
    enforce_otp_rate_limit,
    get_auth_service,
    get_current_user,
)
from auth.exceptions import AuthException
from auth.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    ResendOtpRequest,
    SendOtpRequest,
    UpdateProfileRequest,
    VerifyOtpRequest,
    serialize_user,
)
from auth.services.auth_service import AuthService
from auth.services.otp_service import OtpDispatch

router = APIRouter()


def _http_error(exc: AuthException) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _dispatch_data(dispatch: OtpDispatch) -> dict:
    return {"maskedNumber": dispatch.masked_number, "expiresIn": dispatch.expires_in}


def _session_data(result: dict) -> dict:
    tokens = result["tokens"]
    return {
        "user": serialize_user(result["user"]),
        "token": tokens.access_token,
        "refreshToken": tokens.refresh_token,
    }


@router.post("/send-otp", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def send_otp(
    payload: SendOtpRequest,
    _: None = Depends(enforce_otp_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        dispatch = await auth_service.initiate_registration(
            first_name=payload.first_name,
            last_name=payload.last_name,
            contact_number=payload.contact_number,
            password=payload.password,
            barangay=payload.barangay,
        )
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(
        success=True,
        message="OTP sent successfully to your mobile number",
        data=_dispatch_data(dispatch),
    )


@router.post("/verify-otp", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def verify_otp(
    payload: VerifyOtpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        result = await auth_service.complete_registration(payload.contact_number, payload.otp)
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(
        success=True,
        message="Registration successful",
        data=_session_data(result),
    )


@router.post("/resend-otp", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def resend_otp(
    payload: ResendOtpRequest,
    _: None = Depends(enforce_otp_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        dispatch = await auth_service.resend_registration_otp(payload.contact_number)
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(success=True, message="OTP resent successfully", data=_dispatch_data(dispatch))


@router.post("/login", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    _: None = Depends(enforce_login_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        result = await auth_service.login(payload.contact_number, payload.password)
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(success=True, message="Login successful", data=_session_data(result))


@router.post("/refresh-token", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def refresh_token(
    payload: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        result = await auth_service.refresh(payload.refresh_token)
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(
        success=True,
        message="Token refreshed",
        data={"token": result["token"], "user": serialize_user(result["user"])},
    )


@router.get("/barangays", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def barangays(auth_service: AuthService = Depends(get_auth_service)) -> ApiResponse:
    names = auth_service.list_barangays()
    return ApiResponse(
        success=True,
        message="Barangays retrieved",
        data={"barangays": names, "count": len(names)},
    )


@router.get("/me", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def me(current_user: dict = Depends(get_current_user)) -> ApiResponse:
    return ApiResponse(
        success=True,
        message="User retrieved",
        data={"user": serialize_user(current_user)},
    )


@router.put("/profile", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_profile(
    payload: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    profile = payload.profile
    try:
        user = await auth_service.update_profile(
            current_user["id"],
            first_name=payload.first_name,
            last_name=payload.last_name,
            barangay=payload.barangay,
            bio=profile.bio if profile else None,
            address=profile.address if profile else None,
        )
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(
        success=True,
        message="Profile updated successfully",
        data={"user": serialize_user(user)},
    )


@router.put("/change-password", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        await auth_service.change_password(
            current_user["id"], payload.current_password, payload.new_password
        )
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(success=True, message="Password changed successfully")


@router.post("/logout", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def logout(_: dict = Depends(get_current_user)) -> ApiResponse:
    # Tokens are stateless; the client discards them.
    return ApiResponse(success=True, message="Logged out successfully")


@router.delete("/deactivate", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def deactivate(
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    try:
        await auth_service.deactivate(current_user["id"])
    except AuthException as exc:
        raise _http_error(exc) from exc

    return ApiResponse(success=True, message="Account deactivated successfully")
