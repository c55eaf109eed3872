from fastapi import Depends, Path, Query, status

from admin_api.forge import app
from admin_api.forge.sdk.routes.routers import base_router
from admin_api.forge.sdk.schemas.users import User, UserPage, UserRole, UserUpdateRequest
from admin_api.forge.sdk.services.user_auth_service import get_current_user, require_roles

admin_access = require_roles(UserRole.admin)


@base_router.get("/users", tags=["Users"], response_model=UserPage)
async def list_users(
    page: int = Query(1, description="1 based page number"),
    page_size: int = Query(50),
    current_user: User = Depends(admin_access),
) -> UserPage:
    users, total = await app.IDENTITY_GATEWAY.list_users(page, page_size)
    return UserPage(users=users, total=total)


@base_router.get("/users/all", tags=["Users"], response_model=list[User])
async def list_all_users(current_user: User = Depends(admin_access)) -> list[User]:
    return await app.IDENTITY_GATEWAY.list_all_users()


@base_router.get("/users/me", tags=["Users"], response_model=User)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@base_router.get("/users/{user_id}", tags=["Users"], response_model=User)
async def get_user(
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> User:
    return await app.IDENTITY_GATEWAY.get_user(user_id)


@base_router.patch("/users/{user_id}", tags=["Users"], status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_update: UserUpdateRequest,
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> None:
    await app.IDENTITY_GATEWAY.update_user(User(id=user_id, **user_update.model_dump()))


@base_router.delete("/users/{user_id}", tags=["Users"], status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> None:
    await app.IDENTITY_GATEWAY.delete_user(user_id)


@base_router.get("/users/{user_id}/roles", tags=["Users"], response_model=list[UserRole])
async def list_user_roles(
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> list[UserRole]:
    return await app.IDENTITY_GATEWAY.list_user_roles(user_id)


@base_router.post("/users/{user_id}/roles/{role}", tags=["Users"], status_code=status.HTTP_204_NO_CONTENT)
async def assign_user_role(
    role: UserRole,
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> None:
    await app.IDENTITY_GATEWAY.assign_user_role(user_id, role)


@base_router.delete("/users/{user_id}/roles/{role}", tags=["Users"], status_code=status.HTTP_204_NO_CONTENT)
async def remove_user_role(
    role: UserRole,
    user_id: str = Path(..., examples=["auth0|64f1c2"]),
    current_user: User = Depends(admin_access),
) -> None:
    await app.IDENTITY_GATEWAY.remove_user_role(user_id, role)
