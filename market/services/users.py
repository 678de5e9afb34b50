# market/services/users.py
# Registration, login, profile and admin bootstrap.
import logging

from market.core.errors import Conflict, Unauthorized, UserNotFound, ValidationError
from market.core.security import PasswordHasher, TokenClaims, create_access_token, password_hasher
from market.models.user import Role, User
from market.services.base import BaseService, transactional

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserService(BaseService):

    def __init__(self, db, hasher: PasswordHasher | None = None):
        super().__init__(db)
        self.hasher = hasher or password_hasher

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFound()
        return user

    def all_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    @transactional("failed to register user")
    def register(self, email: str, password: str, username: str, role: Role = Role.customer) -> User:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if self.get_by_email(email) is not None:
            raise Conflict("email already registered")
        user = User(
            email=email.lower(),
            hashed_password=self.hasher.hash(password),
            username=username,
            role=role,
        )
        self.db.add(user)
        self.db.flush()
        logger.info(f"Registered user {user.id} with role {role.value}")
        return user

    def login(self, email: str, password: str) -> str:
        """Check credentials and return a signed access token."""
        user = self.get_by_email(email)
        if user is None or not self.hasher.verify(password, user.hashed_password):
            logger.info(f"Failed login for {email}")
            raise Unauthorized("invalid email or password")
        claims = TokenClaims(user_id=user.id, role=user.role, email=user.email, username=user.username)
        return create_access_token(claims)

    @transactional("failed to update user profile")
    def update_profile(
        self,
        user_id: int,
        username: str | None = None,
        password: str | None = None,
        new_password: str | None = None,
    ) -> User:
        """Change the username and, when the current password checks out, the password."""
        user = self.get_user(user_id)
        if username:
            user.username = username
        if new_password:
            if not password or not self.hasher.verify(password, user.hashed_password):
                raise ValidationError("current password is incorrect")
            if len(new_password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
            user.hashed_password = self.hasher.hash(new_password)
        self.db.flush()
        return user

    @transactional("failed to create admin")
    def ensure_admin(self, email: str, password: str, username: str) -> User:
        """Create an admin account, or promote the existing account with that email."""
        user = self.get_by_email(email)
        if user is None:
            user = User(
                email=email.lower(),
                hashed_password=self.hasher.hash(password),
                username=username,
                role=Role.admin,
            )
            self.db.add(user)
        else:
            user.role = Role.admin
        self.db.flush()
        logger.info(f"Admin account ready: {user.email}")
        return user
