from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from fieldreports.core.config import Settings
from fieldreports.core.dependencies import get_current_user, get_settings, require_roles
from fieldreports.core.errors import AuthenticationError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from fieldreports.core.permissions import ADMIN_ROLES
from fieldreports.core.security import create_access_token, verify_password
from fieldreports.db.session import get_db
from fieldreports.models.user import Role, User
from fieldreports.schemas.auth import LoginIn, PasswordUpdateIn, SignupIn, UpdateMeIn
from fieldreports.schemas.users import UserCreate, UserOut, UserUpdate
from fieldreports.services.auth_service import (
    authenticate,
    change_password,
    create_user,
    deactivate_user,
    find_region,
    get_user_by_id,
    get_user_by_username,
)

router = APIRouter()

LOGGED_OUT = "loggedout"


# ----------------------------
# Helpers
# ----------------------------

def _set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        samesite=settings.cookie_samesite,
        secure=settings.cookie_secure,
        max_age=60 * 60 * 24 * settings.cookie_expire_days,
        path=settings.cookie_path,
    )


def _clear_auth_cookie(response: Response, settings: Settings) -> None:
    # Overwrite with a sentinel that expires almost immediately
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=LOGGED_OUT,
        httponly=True,
        samesite=settings.cookie_samesite,
        secure=settings.cookie_secure,
        max_age=10,
        path=settings.cookie_path,
    )


def _token_payload(user: User, response: Response, settings: Settings) -> dict:
    token = create_access_token(subject=user.id, settings=settings, role=user.role)
    _set_auth_cookie(response, token, settings)
    return {
        "status": "success",
        "token": token,
        "data": {"user": UserOut.model_validate(user)},
    }


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("No user found with that ID")
    return user


def _ensure_username_free(db: Session, username: str, exclude_id: int | None = None) -> None:
    existing = get_user_by_username(db, username)
    if existing and existing.id != exclude_id:
        raise ConflictError("Username already exists!")


# ----------------------------
# Public auth
# ----------------------------

@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    data: SignupIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if data.role not in (None, Role.ENG):
        raise ForbiddenError("Roles other than ENG can only be granted by an administrator")

    _ensure_username_free(db, data.username)

    if data.password != data.password_confirm:
        raise ValidationError("Passwords are not the same!")

    region = None
    if data.region:
        region = find_region(db, data.region)
        if not region:
            raise ValidationError("Invalid region code!")

    user = create_user(
        db,
        username=data.username,
        password=data.password,
        name=data.name,
        role=Role.ENG,
        region=region,
    )
    return _token_payload(user, response, settings)


@router.post("/login")
def login(
    data: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not data.username or not data.password:
        raise ValidationError("Please provide username and password!")

    user = authenticate(db, data.username, data.password)
    if not user:
        raise AuthenticationError("Incorrect username or password")

    return _token_payload(user, response, settings)


@router.get("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    _clear_auth_cookie(response, settings)
    return {"status": "success"}


# ----------------------------
# Current user
# ----------------------------

@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"status": "success", "data": {"user": UserOut.model_validate(user)}}


@router.patch("/updateMe")
def update_me(
    payload: UpdateMeIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if payload.password or payload.password_confirm:
        raise ValidationError("This route is not for password updates. Please use /updateMyPassword.")

    if payload.username is not None:
        _ensure_username_free(db, payload.username, exclude_id=user.id)
        user.username = payload.username.strip()
    if payload.name is not None:
        user.name = payload.name.strip()

    db.add(user)
    db.commit()
    db.refresh(user)
    return {"status": "success", "data": {"user": UserOut.model_validate(user)}}


@router.patch("/updateMyPassword")
def update_my_password(
    payload: PasswordUpdateIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.password_current, user.password_hash):
        raise AuthenticationError("Your current password is wrong.")
    if payload.password != payload.password_confirm:
        raise ValidationError("Passwords are not the same!")

    user = change_password(db, user, payload.password)

    body = _token_payload(user, response, settings)
    body["message"] = "Password updated successfully."
    return body


# ----------------------------
# Administration
# ----------------------------

@router.get("", dependencies=[Depends(require_roles(*ADMIN_ROLES))])
def list_users(db: Session = Depends(get_db)):
    users = db.scalars(select(User).order_by(User.id.asc())).all()
    return {
        "status": "success",
        "results": len(users),
        "data": {"users": [UserOut.model_validate(u) for u in users]},
    }


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_roles(*ADMIN_ROLES))])
def create_user_admin(payload: UserCreate, db: Session = Depends(get_db)):
    _ensure_username_free(db, payload.username)

    region = None
    if payload.region:
        region = find_region(db, payload.region)
        if not region:
            raise ValidationError(f"Invalid region: {payload.region}")

    user = create_user(
        db,
        username=payload.username,
        password=payload.password,
        name=payload.name,
        role=payload.role,
        region=region,
    )
    return {"status": "success", "data": {"user": UserOut.model_validate(user)}}


@router.get("/{user_id}", dependencies=[Depends(require_roles(*ADMIN_ROLES))])
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)
    return {"status": "success", "data": {"user": UserOut.model_validate(user)}}


@router.patch("/{user_id}", dependencies=[Depends(require_roles(*ADMIN_ROLES))])
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)
    data = payload.model_dump(exclude_unset=True)

    if "region" in data:
        if data["region"]:
            region = find_region(db, data["region"])
            if not region:
                raise ValidationError(f"Invalid region: {data['region']}")
            user.region_id = region.id
        else:
            user.region_id = None

    if data.get("username") is not None:
        _ensure_username_free(db, data["username"], exclude_id=user.id)
        user.username = data["username"].strip()
    if data.get("name") is not None:
        user.name = data["name"].strip()
    if data.get("role") is not None:
        user.role = data["role"].value
    if data.get("is_active") is not None:
        user.is_active = data["is_active"]

    db.add(user)
    db.commit()
    # region relationship is eager; reload it after the FK change
    db.refresh(user)
    return {"status": "success", "data": {"user": UserOut.model_validate(user)}}


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = _get_user_or_404(db, user_id)
    deactivate_user(db, user)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_auth_cookie(response, settings)
    return response
