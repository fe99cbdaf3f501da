import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.db import get_db
from tasktracker.errors import Conflict, ValidationError
from tasktracker.models import User
from tasktracker.schemas import AuthResponse, LoginRequest, MeResponse, SignupRequest, UserPublic
from tasktracker.services.credentials import hash_password, verify_password
from tasktracker.services.directory import AccountDirectory
from tasktracker.services.identity import get_current_user
from tasktracker.services.policy import signup_teacher_id

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)

BAD_CREDENTIALS = "Invalid email or password"


def _auth_response(request: Request, user: User, message: str) -> AuthResponse:
    token = request.app.state.credentials.issue(user.id, user.role, user.teacher_id)
    return AuthResponse(
        message=message,
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/signup", response_model=AuthResponse)
async def signup(req: SignupRequest, request: Request, db: AsyncSession = Depends(get_db)):
    teacher_id = signup_teacher_id(req.role, req.teacher_id)

    directory = AccountDirectory(db)
    if await directory.find_by_email(req.email):
        raise Conflict("Email already in use")

    password_hash = await hash_password(req.password)
    user = await directory.create_user(req.email, password_hash, req.role, teacher_id)
    logger.info("signup user_id=%s role=%s", user.id, user.role)

    return _auth_response(request, user, "User created successfully")


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await AccountDirectory(db).find_by_email(req.email)
    # same answer for unknown email and wrong password
    if user is None or not await verify_password(req.password, user.password_hash):
        logger.info("failed login attempt")
        raise ValidationError(BAD_CREDENTIALS)

    return _auth_response(request, user, "Login successful")


@router.get("/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Currently authenticated user, as stored."""
    return MeResponse(user=UserPublic.model_validate(current_user))
