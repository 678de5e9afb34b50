# market/core/security.py
# Password hashing, JWT issuing/decoding and the auth dependencies used by the routers.
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from market.core.config import settings
from market.core.errors import Forbidden, Unauthorized
from market.db.session import SessionLocal
from market.models.user import Role

bearer_scheme = HTTPBearer(auto_error=False)


class PasswordHasher:
    """Opaque hash/verify capability backed by passlib."""

    def __init__(self, schemes: list[str] | None = None):
        self._context = CryptContext(schemes=schemes or settings.PASSWORD_HASH_SCHEMES, deprecated="auto")

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, digest: str) -> bool:
        try:
            return self._context.verify(plain, digest)
        except ValueError:
            # Unknown or malformed digest
            return False


password_hasher = PasswordHasher()


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by a bearer token."""

    user_id: int
    role: Role
    email: str | None = None
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


def create_access_token(claims: TokenClaims, expires_delta: timedelta | None = None) -> str:
    """Create a JWT carrying user_id and role (plus email/username for clients)."""
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(claims.user_id),
        "user_id": claims.user_id,
        "role": claims.role.value,
        "email": claims.email,
        "username": claims.username,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """Verify the signature and expiry of a token and build typed claims, or raise Unauthorized."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthorized("invalid or expired token")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise Unauthorized("user_id not found in token")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthorized("invalid role in token")
    return TokenClaims(
        user_id=user_id,
        role=role,
        email=payload.get("email"),
        username=payload.get("username"),
    )


def get_db():
    """Dependency yielding a DB session for the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Returns the verified claims of the bearer token or raises 401."""
    if credentials is None:
        raise Unauthorized("missing authorization header")
    if credentials.scheme.lower() != "bearer":
        raise Unauthorized("invalid token format")
    return decode_access_token(credentials.credentials)


def requires(*roles: Role):
    """Dependency factory: lets the request through only for the given roles."""
    def _checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in roles:
            raise Forbidden("admin access required" if roles == (Role.admin,) else "Insufficient privileges")
        return claims
    return _checker
