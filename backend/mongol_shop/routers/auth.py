from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from mongol_shop.database import get_db
from mongol_shop.db_models.user import User
from mongol_shop.models.user import (
    LoginResponse,
    OAuthLoginResponse,
    OAuthUserCreate,
    RegisterResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from mongol_shop.services.auth import create_access_token, get_current_active_user
from mongol_shop.services.user_service import UserService
from mongol_shop.utils.logger import logger, sanitize

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=RegisterResponse)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    logger.info(f"Registration attempt: {sanitize(user_data.model_dump(include={'username', 'email', 'role', 'password'}))}")
    return UserService(db).register(user_data)


@router.post("/oauth", response_model=OAuthLoginResponse)
def oauth_sign_in(payload: OAuthUserCreate, db: Session = Depends(get_db)):
    """Sign in with an identity the OAuth provider has already verified."""
    logger.info(f"OAuth sign-in attempt provider={payload.provider} email={payload.email}")
    created = UserService(db).register_oauth_user(payload)
    access_token = create_access_token(data={"sub": created.user_id})
    return OAuthLoginResponse(**created.model_dump(), access_token=access_token)


@router.post("/login", response_model=LoginResponse)
def login(user_credentials: UserLogin, request: Request, db: Session = Depends(get_db)):
    rid = getattr(request.state, "rid", "unknown")
    logger.info(f"Login attempt username={user_credentials.username} rid={rid}")

    summary = UserService(db).login(user_credentials)
    access_token = create_access_token(data={"sub": summary.user_id})

    logger.info(f"User logged in successfully: {summary.username} (role: {summary.role}) rid={rid}")
    return LoginResponse(access_token=access_token, user=summary)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_active_user)):
    return current_user
