# backend/core/users.py

import logging
import re
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from backend.core.errors import InvalidCredentials, UserNotFound, UsernameTaken, ValidationFailed
from backend.core.security import Identity, get_password_hash, verify_password
from backend.models.user import User as UserModel


logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{3,32}$")
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PICTURE_MAX_LENGTH = 2048


# -------------------------------
# Request Schemas
# -------------------------------

class CreateUserParams(BaseModel):
    username: str
    password: str
    picture: str | None = None


class LoginParams(BaseModel):
    username: str
    password: str


class ChangePasswordParams(BaseModel):
    password: str


class ChangePictureParams(BaseModel):
    picture: str


# -------------------------------
# Validation
# -------------------------------

def validate_username(username: str):
    if not USERNAME_PATTERN.match(username):
        raise ValidationFailed(
            "Username must be 3-32 characters of letters, digits, '_', '.' or '-'"
        )


def validate_password(password: str):
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationFailed(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
        )


def validate_picture(picture: str):
    if not picture.strip() or len(picture) > PICTURE_MAX_LENGTH:
        raise ValidationFailed(
            f"Picture must be a non-empty reference of at most {PICTURE_MAX_LENGTH} characters"
        )


def to_identity(user: UserModel) -> Identity:
    return Identity(id=user.id, username=user.username, picture=user.picture)


def get_user(db: Session, identity: Identity) -> UserModel:
    user = db.get(UserModel, identity.id)
    if user is None:
        raise UserNotFound(f"User {identity.username} not found")
    return user


# -------------------------------
# Provider Operations
# -------------------------------

def username_exists(db: Session, username: str) -> bool:
    return db.query(UserModel).filter(UserModel.username == username).first() is not None


def create_user(db: Session, params: CreateUserParams) -> Identity:
    validate_username(params.username)
    validate_password(params.password)
    if params.picture is not None:
        validate_picture(params.picture)

    if username_exists(db, params.username):
        raise UsernameTaken(f"Username {params.username} is already taken")

    user = UserModel(
        username=params.username,
        hashed_password=get_password_hash(params.password),
        picture=params.picture,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise UsernameTaken(f"Username {params.username} is already taken")
    db.refresh(user)

    logger.info("Created user %s (id=%s)", user.username, user.id)
    return to_identity(user)


def login_user(db: Session, params: LoginParams) -> Identity:
    user = db.query(UserModel).filter(UserModel.username == params.username).first()
    if not user or not verify_password(params.password, user.hashed_password):
        logger.info("Failed login for %s", params.username)
        raise InvalidCredentials("Incorrect username or password")
    return to_identity(user)


def change_user_password(db: Session, identity: Identity, password: str) -> Identity:
    validate_password(password)
    user = get_user(db, identity)
    user.hashed_password = get_password_hash(password)
    db.commit()
    return to_identity(user)


def change_user_picture(db: Session, identity: Identity, picture: str) -> Identity:
    validate_picture(picture)
    user = get_user(db, identity)
    user.picture = picture
    db.commit()
    db.refresh(user)
    return to_identity(user)
