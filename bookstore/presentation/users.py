from typing import Optional, List, Union

from fastapi import APIRouter, Depends, status

from bookstore.application.accounts import (
    DeleteUserUseCase,
    FindUserByEmailUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginUseCase,
    LogoutUseCase,
    RegisterDTO,
    RegisterUseCase,
    UpdateUserUseCase,
    UserUpdateDTO,
)
from bookstore.domain.models import Identity
from bookstore.presentation.dependencies import (
    get_bearer_token,
    get_current_identity,
    get_delete_user_use_case,
    get_find_user_by_email_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_login_use_case,
    get_logout_use_case,
    get_register_use_case,
    get_update_user_use_case,
)
from bookstore.presentation.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    UserUpdateRequest,
    UserUpdateResponse,
)

router = APIRouter(tags=["Users"])


@router.post(
    "/register",
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    use_case: RegisterUseCase = Depends(get_register_use_case),
):
    """Create an account and return an access token"""
    dto = RegisterDTO(
        email=request.email,
        password=request.password,
        fullname=request.fullname,
        phone=request.phone,
    )
    result = await use_case(dto)
    return AuthResponse(access_token=result.access_token, user=UserResponse.from_domain(result.user))


@router.post("/login", response_model=AuthResponse, responses={401: {"model": ErrorResponse}})
async def login(
    request: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    result = await use_case(request.email, request.password)
    return AuthResponse(access_token=result.access_token, user=UserResponse.from_domain(result.user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    identity: Identity = Depends(get_current_identity),
    use_case: LogoutUseCase = Depends(get_logout_use_case),
):
    await use_case(token)


@router.get("/users", response_model=Union[UserResponse, List[UserResponse]])
async def get_users(
    email: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    find_by_email: FindUserByEmailUseCase = Depends(get_find_user_by_email_use_case),
    list_users: ListUsersUseCase = Depends(get_list_users_use_case),
):
    """Look a user up by email, or list every user (admin only)"""
    if email:
        return UserResponse.from_domain(await find_by_email(identity, email))
    return [UserResponse.from_domain(user) for user in await list_users(identity)]


@router.get("/users/me", response_model=UserResponse)
async def get_me(
    identity: Identity = Depends(get_current_identity),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    return UserResponse.from_domain(await use_case(identity, identity.id))


@router.get("/users/{user_id}", response_model=UserResponse, responses={404: {"model": ErrorResponse}})
async def get_user(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    return UserResponse.from_domain(await use_case(identity, user_id))


@router.put(
    "/users/{user_id}",
    response_model=UserUpdateResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
):
    """Owner or admin; only an admin can change a role"""
    dto = UserUpdateDTO(
        fullname=request.fullname,
        email=request.email,
        phone=request.phone,
        role=request.role,
    )
    user = await use_case(identity, user_id, dto)
    return UserUpdateResponse(
        success=True,
        message="User updated successfully",
        user=UserResponse.from_domain(user),
    )


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
):
    await use_case(identity, user_id)
