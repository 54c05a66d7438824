import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from database import get_db, is_object_id, to_obj_id

logger = logging.getLogger(__name__)

# Auth setup
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password_policy(password: Optional[str], status_code: int = 422) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status_code,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )


def hash_password(password: str) -> str:
    verify_password_policy(password)
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    return pwd_context.verify(password, hashed)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for(user: Dict[str, Any]) -> str:
    """Issue a bearer token for a stored user document."""
    return create_access_token({"sub": str(user["_id"]), "email": user["email"], "role": user.get("role", "user")})


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Resolve the bearer token to the raw user document.

    Routes receive the stored document (with `_id`) so the cart helpers can
    mutate it in place.
    """
    if not token:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    credentials_exception = HTTPException(status_code=401, detail="Token is not valid")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None or not is_object_id(user_id):
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    user = get_db()["user"].find_one({"_id": to_obj_id(user_id)})
    if not user:
        raise credentials_exception
    return user


def require_role(*roles: str):
    async def role_dep(current_user=Depends(get_current_user)):
        if current_user.get("role") not in roles:
            logger.info("User %s denied, role %s not in %s", current_user["_id"], current_user.get("role"), roles)
            raise HTTPException(status_code=403, detail="Access denied. Admin only.")
        return current_user
    return role_dep


require_admin = require_role("admin")
