"""Admin user-management routes."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from auth.dependencies import get_admin_service, require_admin
from auth.exceptions import AuthException
from auth.schemas import (
    AdminCreateUserRequest,
    AdminResetPasswordRequest,
    AdminUpdateUserRequest,
    ApiResponse,
    serialize_user,
)
from auth.services.admin_service import AdminService

router = APIRouter()


@router.post("/users", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: AdminCreateUserRequest,
    admin: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        user, temporary_password = await admin_service.create_user(
            admin,
            first_name=payload.first_name,
            last_name=payload.last_name,
            contact_number=payload.contact_number,
            barangay=payload.barangay,
            role=payload.role,
            password=payload.password,
        )
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    data = {"user": serialize_user(user)}
    if temporary_password:
        data["temporaryPassword"] = temporary_password
    return ApiResponse(success=True, message="User created successfully", data=data)


@router.get("/users", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    role: str | None = Query(default=None, pattern=r"^(citizen|admin)$"),
    barangay: str | None = None,
    search: str | None = None,
    is_active: bool | None = Query(default=None, alias="isActive"),
    is_verified: bool | None = Query(default=None, alias="isVerified"),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder", pattern=r"^(asc|desc)$"),
    _: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        result = await admin_service.list_users(
            page=page,
            limit=limit,
            role=role,
            barangay=barangay,
            search=search,
            is_active=is_active,
            is_verified=is_verified,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ApiResponse(
        success=True,
        message="Users retrieved",
        data={
            "users": [serialize_user(user) for user in result["users"]],
            "pagination": result["pagination"],
        },
    )


@router.get("/users/{user_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def get_user(
    user_id: int,
    _: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        user = await admin_service.get_user(user_id)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ApiResponse(success=True, message="User retrieved", data={"user": serialize_user(user)})


@router.put("/users/{user_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def update_user(
    user_id: int,
    payload: AdminUpdateUserRequest,
    admin: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        user = await admin_service.update_user(
            admin, user_id, payload.model_dump(exclude_none=True)
        )
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ApiResponse(
        success=True, message="User updated successfully", data={"user": serialize_user(user)}
    )


@router.put(
    "/users/{user_id}/toggle-active", response_model=ApiResponse, status_code=status.HTTP_200_OK
)
async def toggle_active(
    user_id: int,
    admin: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        is_active = await admin_service.toggle_active(admin, user_id)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ApiResponse(
        success=True,
        message=f"User {'activated' if is_active else 'deactivated'} successfully",
        data={"isActive": is_active},
    )


@router.put(
    "/users/{user_id}/reset-password", response_model=ApiResponse, status_code=status.HTTP_200_OK
)
async def reset_password(
    user_id: int,
    payload: AdminResetPasswordRequest | None = Body(default=None),
    admin: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        temporary_password = await admin_service.reset_password(
            admin, user_id, payload.new_password if payload else None
        )
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    data = {"temporaryPassword": temporary_password} if temporary_password else {}
    return ApiResponse(success=True, message="Password reset successfully", data=data)


@router.delete("/users/{user_id}", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def delete_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> ApiResponse:
    try:
        await admin_service.delete_user(admin, user_id)
    except AuthException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ApiResponse(success=True, message="User deleted successfully")
