from fastapi import APIRouter, Depends

from app.dependencies import get_user_service
from app.entities import User
from app.schemas import PasswordUpdate, UserCreate, UserResponse, UserUpdate, envelope
from app.security import hash_password, rotate_password
from app.services import UserService
from app.services.updates import merge

router = APIRouter(prefix="/v1/api/users", tags=["users"])


def _user_out(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


@router.post("", status_code=201)
async def create_user(data: UserCreate, users: UserService = Depends(get_user_service)):
    # Empty passwords are left unhashed so the service can reject them.
    user = User(
        email=data.email,
        password=hash_password(data.password) if data.password else None,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return envelope(_user_out(await users.create(user)))


@router.get("")
async def list_users(users: UserService = Depends(get_user_service)):
    return envelope([_user_out(u) for u in await users.get_all()])


@router.get("/{user_id}")
async def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return envelope(_user_out(await users.get_one(user_id)))


@router.put("/{user_id}")
async def update_user(user_id: int, data: UserUpdate, users: UserService = Depends(get_user_service)):
    current = await users.get_one(user_id)
    user = await users.update(merge(current, data.model_dump(exclude_unset=True)))
    return envelope(_user_out(user))


@router.patch("/{user_id}/update_password")
async def update_password(
    user_id: int,
    data: PasswordUpdate,
    users: UserService = Depends(get_user_service),
):
    current = await users.get_one_with_password(user_id)
    await users.update_password(rotate_password(current, data.password))
    return envelope("password updated successfully")


@router.delete("/{user_id}")
async def delete_user(user_id: int, users: UserService = Depends(get_user_service)):
    await users.delete(user_id)
    return envelope("user deleted successfully")
