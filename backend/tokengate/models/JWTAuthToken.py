from datetime import datetime

from sqlmodel import SQLModel, Field

from ..core.clock import as_utc

class Token(SQLModel):
    access_token: str # JWT Token
    token_type: str # Token type
    expires_at: datetime

class DecodedClaims(SQLModel):
    """Claims recovered from a verified token. Built fresh on every verification."""
    user_id: int
    roles: frozenset[str] = frozenset()
    issued_at: datetime
    expires_at: datetime
    issuer: str
    token_id: str

class JWTAuthToken(SQLModel, table=True):
    __tablename__ = "jwt_auth_tokens"

    access_token: str = Field(primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    issued_at: datetime = Field(index=True)
    expires_at: datetime = Field(index=True)
    revoked: bool = Field(default=False)

    def is_expired(self, now: datetime) -> bool:
        return as_utc(now) > as_utc(self.expires_at)

class ExpiredTokenReport(SQLModel):
    # The token string itself is never echoed back
    user_id: int
    issued_at: datetime
    expires_at: datetime
    revoked: bool
