from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from ..core.database import get_session
from ..core.logging import get_logger
from ..models.User import RegisterRequest, LoginRequest, UserResponse, User
from ..models.JWTAuthToken import Token
from ..tokens.context import AuthContext, Principal
from ..tokens.service import TokenLifecycleService
from .service import (
    authenticate_user,
    register_user,
    get_auth_context,
    get_current_user,
    get_token_service,
    require_principal,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, session: Session = Depends(get_session)):
    """
    Create a regular user account.
    """
    return register_user(session, request)

@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    session: Session = Depends(get_session),
    service: TokenLifecycleService = Depends(get_token_service),
):
    """
    Login with username and password to get an access token.
    """
    user = authenticate_user(session, login_data.username, login_data.password)

    if not user:
        logger.warning("login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    record = service.issue(user)
    return Token(access_token=record.access_token, token_type="bearer", expires_at=record.expires_at)


@router.post("/logout")
async def logout(
    principal: Annotated[Principal, Depends(require_principal)],
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TokenLifecycleService, Depends(get_token_service)],
):
    """
    Logout the current user by revoking the token used for this request.
    """
    service.revoke(service.current_token(context))
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def me(
    principal: Annotated[Principal, Depends(require_principal)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Get current user information.
    """
    return current_user
