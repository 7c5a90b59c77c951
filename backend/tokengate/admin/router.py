from datetime import datetime
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from ..core.logging import get_logger
from ..models.JWTAuthToken import ExpiredTokenReport
from ..tokens.context import Principal
from ..tokens.service import TokenLifecycleService
from ..auth.service import get_token_service, require_role

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/tokens/expired", response_model=list[ExpiredTokenReport])
async def expired_tokens(
    admin: Annotated[Principal, Depends(require_role("ADMIN"))],
    service: Annotated[TokenLifecycleService, Depends(get_token_service)],
    as_of: datetime | None = None,
):
    """
    Report tokens expired as of `as_of` (default: now). Nothing is purged.
    """
    records = service.sweep_expired(as_of)
    return [
        ExpiredTokenReport(
            user_id=record.user_id,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            revoked=record.revoked,
        )
        for record in records
    ]

@router.post("/users/{user_id}/revoke")
async def revoke_user_token(
    user_id: int,
    admin: Annotated[Principal, Depends(require_role("ADMIN"))],
    service: Annotated[TokenLifecycleService, Depends(get_token_service)],
):
    """
    Revoke the most recently issued token of a user (Admin only).
    """
    record = service.find_latest_for_user(user_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No token issued for user")
    if record.revoked:
        return {"message": "Token already revoked", "already_revoked": True}
    service.revoke(record)
    logger.info("admin_revoked_token", admin_id=admin.user_id, user_id=user_id)
    return {"message": "Token revoked", "already_revoked": False}
