from __future__ import annotations

from fastapi import APIRouter, Depends

from tasktime.api.deps import Services, get_current_user, get_services
from tasktime.api.schemas import LoginBody, ProfileBody, SignupBody, envelope, user_to_dict
from tasktime.domain.entities import UserEntity

router = APIRouter(tags=["users"])


@router.post("/signup", status_code=201)
def signup(body: SignupBody, services: Services = Depends(get_services)):
    user = services.users.signup(body.name, body.email, body.password)
    return envelope("User created successfully.", user=user_to_dict(user))


@router.post("/login")
def login(body: LoginBody, services: Services = Depends(get_services)):
    token, user = services.users.login(body.email, body.password)
    return envelope("Login successful.", token=token, user=user_to_dict(user))


@router.get("/user/profile")
def get_profile(user: UserEntity = Depends(get_current_user), services: Services = Depends(get_services)):
    return envelope(user=user_to_dict(services.users.get_profile(user.id)))


@router.put("/user/profile")
def update_profile(
    body: ProfileBody,
    user: UserEntity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    updated, token = services.users.update_profile(user.id, name=body.name, email=body.email)
    return envelope("Profile updated successfully.", user=user_to_dict(updated), token=token)


@router.delete("/user/profile")
def delete_account(user: UserEntity = Depends(get_current_user), services: Services = Depends(get_services)):
    services.users.delete_account(user.id)
    return envelope("Account deleted successfully.")
