from datetime import datetime, timedelta
from typing import Optional

from ..core.clock import Clock, utcnow
from ..core.logging import get_logger
from ..models.JWTAuthToken import DecodedClaims, JWTAuthToken
from ..models.User import User
from .context import AuthContext, Principal
from .errors import (
    CryptographicVerificationFailure,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
    Unauthenticated,
)
from .signer import TokenSigner, VerificationFailure
from .store import TokenStore

logger = get_logger(__name__)

DEFAULT_VALIDITY = timedelta(hours=24)


class TokenLifecycleService:
    """
    Issues, validates, revokes and reports on bearer tokens.

    Two independent checks guard a token. The signer is the authority for the
    claims embedded in the token text; the store is the authority for
    revocation and expiry, which a signature alone cannot express.
    """

    def __init__(
        self,
        signer: TokenSigner,
        store: TokenStore,
        validity: timedelta = DEFAULT_VALIDITY,
        clock: Clock = utcnow,
    ):
        self.signer = signer
        self.store = store
        self.validity = validity
        self.clock = clock

    def issue(self, user: User) -> JWTAuthToken:
        # Whole seconds, so the record and the signed iat/exp agree exactly
        now = self.clock().replace(microsecond=0)
        expires_at = now + self.validity
        token = self.signer.sign(user.id, user.role_set(), now, expires_at)
        record = JWTAuthToken(
            access_token=token,
            user_id=user.id,
            issued_at=now,
            expires_at=expires_at,
            revoked=False,
        )
        saved = self.store.save(record)
        logger.info("token_issued", user_id=user.id, expires_at=expires_at.isoformat())
        return saved

    def validate(self, token: str) -> JWTAuthToken:
        """
        Business validation against the store: existence, then revocation,
        then expiry. Does not re-check the signature.
        """
        record = self.store.find_by_token(token)
        if record is None:
            logger.warning("token_rejected", reason=TokenNotFound.kind)
            raise TokenNotFound()
        if record.revoked:
            logger.warning("token_rejected", reason=TokenRevoked.kind, user_id=record.user_id)
            raise TokenRevoked()
        if record.is_expired(self.clock()):
            logger.warning("token_rejected", reason=TokenExpired.kind, user_id=record.user_id)
            raise TokenExpired()
        return record

    def decode(self, token: str) -> DecodedClaims:
        result = self.signer.verify(token)
        if isinstance(result, VerificationFailure):
            logger.warning("token_rejected", reason=CryptographicVerificationFailure.kind, detail=result.reason)
            raise CryptographicVerificationFailure(result.reason)
        return result

    def authenticate(self, token: str) -> AuthContext:
        """Signature check and store check combined into a request context."""
        claims = self.decode(token)
        record = self.validate(token)
        if record.user_id != claims.user_id:
            logger.error("token_owner_mismatch", claimed=claims.user_id, stored=record.user_id)
            raise CryptographicVerificationFailure("claims do not match stored owner")
        return AuthContext(token=token, principal=Principal(user_id=claims.user_id, roles=claims.roles))

    def revoke(self, record: JWTAuthToken) -> JWTAuthToken:
        """Idempotent: revoking an already revoked record leaves it revoked."""
        logger.info("token_revoke", user_id=record.user_id, already_revoked=record.revoked)
        record.revoked = True
        return self.store.save(record)

    def find_latest_for_user(self, user_id: int) -> Optional[JWTAuthToken]:
        """Most recently issued record of a user, whether or not it is still usable."""
        return self.store.find_by_owner(user_id)

    def sweep_expired(self, as_of: Optional[datetime] = None) -> list[JWTAuthToken]:
        """
        Reports records expired as of `as_of` (default: now). Nothing is
        deleted; purging is left to whoever schedules the sweep.
        """
        as_of = as_of or self.clock()
        expired = self.store.find_expired(as_of)
        logger.info("token_sweep", as_of=as_of.isoformat(), expired=len(expired))
        return expired

    def current_token(self, context: AuthContext) -> JWTAuthToken:
        if context.token is None:
            logger.warning("no_token_in_context")
            raise Unauthenticated()
        record = self.store.find_by_token(context.token)
        if record is None:
            # Most likely revoked or evicted since the request was authenticated
            logger.error("context_token_not_in_store")
            raise Unauthenticated("token no longer resolves")
        return record

    def current_user(self, context: AuthContext) -> User:
        if context.token is None:
            logger.warning("no_token_in_context")
            raise Unauthenticated()
        user = self.store.find_owner_by_token(context.token)
        if user is None:
            logger.error("context_token_not_in_store")
            raise Unauthenticated("token no longer resolves")
        return user
