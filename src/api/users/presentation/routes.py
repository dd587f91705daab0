"""HTTP routes for the user resource.

Each handler calls the UserService and maps the tagged result it returns
to a status code and JSON body.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from infrastructure.settings import Settings, get_settings
from users.application.results import Internal, Invalid, NotFound, Ok
from users.application.services import UserService
from users.dependencies import get_user_read_service, get_user_service
from users.domain.value_objects import UserId
from users.presentation.models import (
    CreateUserRequest,
    ErrorResponse,
    MessageResponse,
    UpdateUserRequest,
    UserDetailResponse,
    UserListResponse,
    UserMutationResponse,
    UserPageResponse,
    UserResponse,
    ValidationErrorResponse,
)

router = APIRouter(
    prefix="/v1",
    tags=["users"],
)

USER_NOT_FOUND = "User not found"
VALIDATION_FAILED = "Validation failed."
GENERIC_ERROR_DETAIL = "Internal server error"

_NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {"model": MessageResponse, "description": "No such user"}
}
_INVALID_RESPONSE = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {
        "model": ValidationErrorResponse,
        "description": "Validation failed",
    }
}
_ERROR_RESPONSE = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponse,
        "description": "Unexpected failure",
    }
}


def _json(status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _parse_user_id(raw: str) -> UserId | None:
    """Parse a path id; unparseable ids can never match a user."""
    try:
        return UserId.from_string(raw)
    except ValueError:
        return None


def _not_found() -> JSONResponse:
    return _json(status.HTTP_404_NOT_FOUND, MessageResponse(message=USER_NOT_FOUND))


def _invalid(result: Invalid) -> JSONResponse:
    return _json(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ValidationErrorResponse(message=VALIDATION_FAILED, errors=result.errors),
    )


def _internal(message: str, result: Internal, settings: Settings) -> JSONResponse:
    """500 response; the raw cause is only shown when explicitly enabled."""
    detail = result.message if settings.expose_error_details else GENERIC_ERROR_DETAIL
    return _json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message=message, error=detail),
    )


@router.get(
    "/users",
    response_model=UserListResponse,
    responses=_ERROR_RESPONSE,
)
async def list_users(
    request: Request,
    service: Annotated[UserService, Depends(get_user_read_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    cursor: Annotated[
        str | None, Query(description="Opaque cursor from a previous page")
    ] = None,
    per_page: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
) -> JSONResponse:
    """List users in ascending id order with cursor pagination.

    Args:
        request: Incoming request, used to build page URLs
        service: User service
        settings: Application settings
        cursor: Cursor returned as next_cursor by the previous page
        per_page: Maximum number of users per page

    Returns:
        200 with the page of users under "users"
    """
    match await service.list_users(cursor=cursor, page_size=per_page):
        case Ok(value=page):
            next_token = page.next_cursor.encode() if page.next_cursor else None
            next_url = None
            if next_token is not None:
                next_url = str(request.url.include_query_params(cursor=next_token))
            body = UserListResponse(
                users=UserPageResponse(
                    data=[UserResponse.from_domain(u) for u in page.users],
                    path=str(request.url.replace(query="")),
                    per_page=page.per_page,
                    next_cursor=next_token,
                    next_page_url=next_url,
                )
            )
            return _json(status.HTTP_200_OK, body)
        case Internal() as failure:
            return _internal("An error occurred.", failure, settings)
        case other:
            raise AssertionError(f"Unexpected result from list_users: {other!r}")


@router.post(
    "/user",
    status_code=status.HTTP_201_CREATED,
    response_model=UserMutationResponse,
    responses={**_INVALID_RESPONSE, **_ERROR_RESPONSE},
)
async def create_user(
    request: CreateUserRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Create a user.

    The password is hashed before it is stored and is never returned.

    Args:
        request: Name, email and password
        service: User service
        settings: Application settings

    Returns:
        201 with the created user, 422 with field errors, or 500
    """
    result = await service.create_user(
        name=request.name,
        email=request.email,
        password=request.password,
    )
    match result:
        case Ok(value=user):
            return _json(
                status.HTTP_201_CREATED,
                UserMutationResponse(
                    message="User created successfully",
                    user=UserResponse.from_domain(user),
                ),
            )
        case Invalid() as invalid:
            return _invalid(invalid)
        case Internal() as failure:
            return _internal("An error occurred.", failure, settings)
        case other:
            raise AssertionError(f"Unexpected result from create_user: {other!r}")


@router.get(
    "/user/{user_id}",
    response_model=UserDetailResponse,
    responses={**_NOT_FOUND_RESPONSE, **_ERROR_RESPONSE},
)
async def show_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_read_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Get a user by id.

    Args:
        user_id: User id from the path
        service: User service
        settings: Application settings

    Returns:
        200 with the user, 404 if it does not exist, or 500
    """
    match await service.get_user(_parse_user_id(user_id)):
        case Ok(value=user):
            return _json(
                status.HTTP_200_OK,
                UserDetailResponse(user=UserResponse.from_domain(user)),
            )
        case NotFound():
            return _not_found()
        case Internal() as failure:
            return _internal("An error occurred.", failure, settings)
        case other:
            raise AssertionError(f"Unexpected result from get_user: {other!r}")


@router.api_route(
    "/user/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=UserMutationResponse,
    responses={**_NOT_FOUND_RESPONSE, **_INVALID_RESPONSE, **_ERROR_RESPONSE},
)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Update a user's name and email.

    Both fields are required for PUT and PATCH alike. Validation errors
    take precedence over a missing user.

    Args:
        user_id: User id from the path
        request: New name and email
        service: User service
        settings: Application settings

    Returns:
        200 with the updated user, 404, 422 with field errors, or 500
    """
    result = await service.update_user(
        _parse_user_id(user_id),
        name=request.name,
        email=request.email,
    )
    match result:
        case Ok(value=user):
            return _json(
                status.HTTP_200_OK,
                UserMutationResponse(
                    message="User updated successfully",
                    user=UserResponse.from_domain(user),
                ),
            )
        case NotFound():
            return _not_found()
        case Invalid() as invalid:
            return _invalid(invalid)
        case Internal() as failure:
            return _internal("An unexpected error occurred", failure, settings)
        case other:
            raise AssertionError(f"Unexpected result from update_user: {other!r}")


@router.delete(
    "/user/{user_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND_RESPONSE, **_ERROR_RESPONSE},
)
async def delete_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Permanently delete a user.

    Args:
        user_id: User id from the path
        service: User service
        settings: Application settings

    Returns:
        200 with a confirmation message, 404 if the user does not exist, or 500
    """
    match await service.delete_user(_parse_user_id(user_id)):
        case Ok():
            return _json(
                status.HTTP_200_OK, MessageResponse(message="User deleted successfully")
            )
        case NotFound():
            return _not_found()
        case Internal() as failure:
            return _internal("User deletion failed", failure, settings)
        case other:
            raise AssertionError(f"Unexpected result from delete_user: {other!r}")
