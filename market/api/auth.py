# market/api/auth.py
# Registration and login (JWT issuing).
from fastapi import APIRouter, Depends, status

from market.api.deps import get_user_service
from market.schemas.common import ok
from market.schemas.user import LoginRequest, RegisterRequest, TokenOut, UserOut
from market.services.users import UserService

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, users: UserService = Depends(get_user_service)):
    """Create a customer account. Registration never grants the admin role."""
    user = users.register(email=body.email, password=body.password, username=body.username)
    return ok("User registered successfully", UserOut.model_validate(user))


@router.post("/login")
def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    """Check email + password and return a bearer token."""
    token = users.login(body.email, body.password)
    return ok("Login successful", TokenOut(access_token=token))
