# backend/api/user.py

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from backend.database import get_db
from backend.core.security import Identity, authenticate, create_access_token
from backend.core.users import (
    ChangePasswordParams,
    ChangePictureParams,
    CreateUserParams,
    LoginParams,
    change_user_password,
    change_user_picture,
    create_user,
    login_user,
    username_exists,
)


router = APIRouter()


class Token(BaseModel):
    token: str


class UsernameCheck(BaseModel):
    exists: bool


def issue_token(request: Request, identity: Identity) -> Token:
    settings = request.app.state.settings
    token = create_access_token(identity, request.app.state.keys, settings.token_expire_minutes)
    return Token(token=token)


# -------------------------------
# Public Endpoints
# -------------------------------

@router.post("/signup", response_model=Token)
def signup(params: CreateUserParams, request: Request, db: Session = Depends(get_db)):
    user = create_user(db, params)
    return issue_token(request, user)


@router.post("/login", response_model=Token)
def login(params: LoginParams, request: Request, db: Session = Depends(get_db)):
    user = login_user(db, params)
    return issue_token(request, user)


@router.get("/username-free", response_model=UsernameCheck)
def username_free(username: str, db: Session = Depends(get_db)):
    return UsernameCheck(exists=username_exists(db, username))


# -------------------------------
# Authenticated Endpoints
# -------------------------------

@router.patch("/password", response_model=Identity)
def change_password(
    params: ChangePasswordParams,
    user: Identity = Depends(authenticate),
    db: Session = Depends(get_db)
):
    return change_user_password(db, user, params.password)


@router.patch("/picture", response_model=Identity)
def change_picture(
    params: ChangePictureParams,
    user: Identity = Depends(authenticate),
    db: Session = Depends(get_db)
):
    return change_user_picture(db, user, params.picture)


@router.get("", response_model=Identity)
def read_current_user(user: Identity = Depends(authenticate)):
    return user
