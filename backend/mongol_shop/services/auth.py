from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional
from jose import JWTError, jwt
from sqlalchemy.orm import Session
import hashlib
import hmac
import os
import re
import binascii
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from mongol_shop.config import settings
from mongol_shop.database import get_db
from mongol_shop.db_models.user import User
from mongol_shop.models.user import UserRole, AccountStatus
from mongol_shop.utils.logger import logger

security = HTTPBearer()

# Claim carrying an external auth subject id on tokens issued for profile setup.
EXTERNAL_SUBJECT_CLAIM = "auth_sub"

# Password hashing scheme: PBKDF2-HMAC-SHA256 with salt and iterations.
# Stored format: "pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>".
_PBKDF2_ALGO_PREFIX = "pbkdf2_sha256"
_PBKDF2_ITERATIONS = 100_000
_PBKDF2_SALT_BYTES = 16

# Accounts created by the first version of the shop store a 32-bit rolling
# hash rendered as a signed decimal string.
_LEGACY_HASH_RE = re.compile(r"-?[0-9]+")


def _pbkdf2_hash_password(password: str) -> str:
    """Return a PBKDF2-SHA256 hash string for the given password.

    The raw key is derived using a random salt and a fixed number of iterations.
    """
    if not isinstance(password, str):
        raise TypeError("password must be a string")

    salt = os.urandom(_PBKDF2_SALT_BYTES)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    salt_hex = binascii.hexlify(salt).decode("ascii")
    hash_hex = binascii.hexlify(dk).decode("ascii")
    return f"{_PBKDF2_ALGO_PREFIX}${_PBKDF2_ITERATIONS}${salt_hex}${hash_hex}"


def _pbkdf2_verify_password(password: str, encoded: str) -> bool:
    """Verify a password against a PBKDF2-SHA256 encoded hash.

    Returns False if the hash is malformed.
    """
    try:
        prefix, iter_str, salt_hex, hash_hex = encoded.split("$", 3)
        if prefix != _PBKDF2_ALGO_PREFIX:
            return False
        iterations = int(iter_str)
        salt = binascii.unhexlify(salt_hex.encode("ascii"))
        expected = binascii.unhexlify(hash_hex.encode("ascii"))
    except (ValueError, binascii.Error):
        return False

    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk, expected)


def legacy_rolling_hash(password: str) -> str:
    """Reproduce the legacy digest: h = h * 31 + unit over UTF-16 code units, as int32."""
    data = password.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def is_legacy_hash(stored: Optional[str]) -> bool:
    return bool(stored) and bool(_LEGACY_HASH_RE.fullmatch(stored))


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against either a PBKDF2 hash or a legacy rolling hash."""
    if not hashed_password:
        return False

    if hashed_password.startswith(_PBKDF2_ALGO_PREFIX + "$"):
        return _pbkdf2_verify_password(plain_password, hashed_password)

    if is_legacy_hash(hashed_password):
        return hmac.compare_digest(legacy_rolling_hash(plain_password), hashed_password)

    return False


def get_password_hash(password: str) -> str:
    """Return a password hash for storage. Always PBKDF2-SHA256."""
    return _pbkdf2_hash_password(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.ALGORITHM)
    return encoded_jwt


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_payload(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.error(f"JWT validation error: {str(e)}")
        raise _credentials_exception()


def _decode_subject(token: str) -> str:
    subject: Optional[str] = _decode_payload(token).get("sub")
    if subject is None:
        raise _credentials_exception()
    return subject


class ProfileIdentity(NamedTuple):
    """Who is calling a profile endpoint.

    Shop tokens carry the user id in `sub`; tokens minted for an external
    auth subject carry it in `auth_sub` and have no shop user yet.
    """
    user_id: Optional[str]
    auth_subject: Optional[str]


def get_profile_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> ProfileIdentity:
    payload = _decode_payload(credentials.credentials)
    external = payload.get(EXTERNAL_SUBJECT_CLAIM)
    if external:
        return ProfileIdentity(user_id=None, auth_subject=external)
    user_id = payload.get("sub")
    if not user_id:
        raise _credentials_exception()
    return ProfileIdentity(user_id=user_id, auth_subject=None)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    user_id = _decode_subject(credentials.credentials)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.error(f"User not found for token: {user_id}")
        raise _credentials_exception()

    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if (current_user.account_status or AccountStatus.ACTIVE.value) == AccountStatus.SUSPENDED.value:
        logger.warning(f"Suspended user attempted access: {current_user.username}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is suspended"
        )
    return current_user


def admin_required(current_user: User = Depends(get_current_active_user)) -> User:
    if current_user.role != UserRole.ADMIN.value:
        logger.warning(f"Non-admin user attempted admin action: {current_user.username}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
