from typing import Annotated

from fastapi import Depends, HTTPException, Request
from passlib.context import CryptContext
from sqlmodel import Session, select

from ..core.settings import settings
from ..core.logging import get_logger
from ..models.User import User, RegisterRequest
from ..tokens.context import ANONYMOUS, AuthContext, Principal
from ..tokens.errors import AccessDenied, Unauthenticated
from ..tokens.service import TokenLifecycleService

logger = get_logger(__name__)

# Password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=102400,
    argon2__parallelism=8
)

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password + settings.PASSWORD_PEPPER, hashed_password)

def get_password_hash(password):
    return pwd_context.hash(password + settings.PASSWORD_PEPPER)


def authenticate_user(session: Session, username: str, password: str) -> User | None:
    statement = select(User).where(User.username == username)
    user = session.exec(statement).first()
    if not user:
        return None
    if not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user

def register_user(session: Session, request: RegisterRequest) -> User:
    statement = select(User).where(User.username == request.username)
    if session.exec(statement).first():
        raise HTTPException(status_code=400, detail="Username already registered")
    if request.email:
        statement = select(User).where(User.email == request.email)
        if session.exec(statement).first():
            raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        username=request.username,
        email=request.email,
        hashed_password=get_password_hash(request.password),
        roles=["USER"],
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("user_registered", user_id=user.id)
    return user


# ==========================================
# Request-scoped dependencies
# ==========================================

def get_token_service(request: Request) -> TokenLifecycleService:
    return request.app.state.token_service

def get_auth_context(request: Request) -> AuthContext:
    # Set by the request interceptor; routes mounted without it are anonymous
    return getattr(request.state, "auth", ANONYMOUS)

def require_principal(context: Annotated[AuthContext, Depends(get_auth_context)]) -> Principal:
    if context.principal is None:
        raise Unauthenticated()
    return context.principal

def require_role(role: str):
    def check_role(principal: Annotated[Principal, Depends(require_principal)]) -> Principal:
        if not principal.has_role(role):
            logger.warning("access_denied", user_id=principal.user_id, role=role)
            raise AccessDenied(role)
        return principal
    return check_role

def get_current_user(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TokenLifecycleService, Depends(get_token_service)],
) -> User:
    return service.current_user(context)
