from fastapi import APIRouter

from hotelx.core.common_deps import AuthServiceDep, CurrentUserDep, StaffUserDep
from hotelx.schemas.responses import CurrentUserResponse, UserRegistrationResponse
from hotelx.schemas.user import LoginRequest, Token, UserCreate

router = APIRouter()


@router.post("/login", response_model=Token)
async def login(login_data: LoginRequest, service: AuthServiceDep):
    result = await service.login(login_data)

    return {"access_token": result["access_token"], "token_type": result["token_type"]}


@router.post("/register", response_model=UserRegistrationResponse)
async def register(
    user_data: UserCreate,
    service: AuthServiceDep,
    current_user: StaffUserDep,
):
    new_user = await service.create_user(user_data)

    return UserRegistrationResponse(
        message="User created successfully", user_id=new_user.id
    )


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(current_user: CurrentUserDep):
    return CurrentUserResponse(
        id=current_user.id,
        username=current_user.username,
        email=current_user.email,
        role=current_user.role.value,
        is_active=current_user.is_active,
    )
