# Authentication API routes for user registration, login, and identity lookup

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError

from app.db_handlers import UserDBHandler
from app.dependencies.auth import get_current_identity
from app.schemas import (
    LoginResponse,
    MessageResponse,
    TokenIdentity,
    UserLogin,
    UserRegister,
)
from app.services.errors import InvalidOperationError
from app.services.history_service import log_action
from app.utils.auth import (
    MAX_PASSWORD_BYTES,
    create_user_token,
    get_password_hash,
    password_too_long,
    verify_password,
)
from app.utils.logger import setup_logger

logger = setup_logger("api.auth")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    user_data: UserRegister,
    user_db_handler: UserDBHandler = Depends(),
):
    """Register a new user with name, email and password."""
    email = (user_data.email or "").strip()
    if not user_data.name or not email or not user_data.password:
        await log_action(
            None, f"Registration Failed: Missing fields for {email or 'N/A'}"
        )
        raise InvalidOperationError("Missing required fields")

    if password_too_long(user_data.password):
        await log_action(None, f"Registration Failed: Password too long for {email}")
        raise InvalidOperationError(
            f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
        )

    existing_user = await user_db_handler.get_user_by_email(email)
    if existing_user:
        await log_action(None, f"Registration Failed: User already exists - {email}")
        raise InvalidOperationError("User already exists")

    # Password is hashed using bcrypt before storage
    hashed_password = get_password_hash(user_data.password)
    try:
        user = await user_db_handler.create(
            {
                "name": user_data.name,
                "email": email,
                "hashed_password": hashed_password,
                "is_admin": bool(user_data.is_admin),
            }
        )
    except IntegrityError as e:
        # Lost a race against a concurrent registration of the same email.
        await log_action(None, f"Registration Failed: User already exists - {email}")
        raise InvalidOperationError("User already exists") from e

    await log_action(user.id, f"User Registered: {email}")
    logger.info(f"Registered user {user.id} ({email}, admin={user.is_admin})")
    return MessageResponse(message="User registered successfully!")


@router.post("/login", response_model=LoginResponse)
async def login_user(
    user_data: UserLogin,
    user_db_handler: UserDBHandler = Depends(),
):
    """Authenticate user and return JWT token for API access."""
    email = (user_data.email or "").strip()
    if not email or not user_data.password:
        await log_action(None, f"Login Failed: Missing credentials for {email or 'N/A'}")
        raise InvalidOperationError("Missing email or password")

    user = await user_db_handler.get_user_by_email(email)
    if user is None:
        await log_action(None, f"Login Failed: User not found - {email}")
        raise InvalidOperationError("User not found")

    if not verify_password(user_data.password, user.hashed_password):
        await log_action(user.id, f"Login Failed: Invalid credentials for {email}")
        raise InvalidOperationError("Invalid credentials")

    token = create_user_token(user)
    await log_action(user.id, f"User logged in: {user.email}")
    return LoginResponse(message="Login successful", token=token)


@router.get("/me", response_model=TokenIdentity)
async def get_current_user_info(
    identity: TokenIdentity = Depends(get_current_identity),
):
    """Return the identity carried by the caller's token."""
    return identity
