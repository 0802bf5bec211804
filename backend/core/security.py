# backend/core/security.py

from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
from backend.core.keys import KeyPair


pwd_context = CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/user/login")


class Identity(BaseModel):
    """
    The user claims carried by an access token.
    """
    id: int
    username: str
    picture: str | None = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(identity: Identity, keys: KeyPair, expires_minutes: int = 60) -> str:
    now = datetime.now(timezone.utc)
    to_encode = identity.model_dump()
    to_encode.update({
        "sub": str(identity.id),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    })
    return jwt.encode(to_encode, keys.signing_key, algorithm=keys.algorithm)


def decode_access_token(token: str, keys: KeyPair) -> Identity:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, keys.verification_key, algorithms=[keys.algorithm])
        return Identity.model_validate(payload)
    except (JWTError, ValidationError):
        raise credentials_exception


def authenticate(request: Request, token: str = Depends(oauth2_scheme)) -> Identity:
    """
    Route guard: verifies the bearer token and hands the decoded identity
    to the route. Rejects the request with 401 otherwise.
    """
    return decode_access_token(token, request.app.state.keys)
