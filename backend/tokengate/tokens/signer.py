import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from ..models.JWTAuthToken import DecodedClaims


@dataclass(frozen=True)
class VerificationFailure:
    """
    Result of a failed verification. Deliberately a value, not an exception:
    callers decide how a cryptographic failure combines with store state.
    """
    reason: str


def _is_canonical(segment: str) -> bool:
    # base64url ignores the spare bits of the final character, so two different
    # strings can decode to the same signature bytes. Only accept the canonical one.
    try:
        return base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii") == segment
    except (ValueError, UnicodeEncodeError):
        return False


class TokenSigner:
    """Creates and checks HMAC-signed JWTs carrying the issuer, user id and roles."""

    def __init__(self, secret: str, issuer: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("token secret must not be empty")
        self.secret = secret
        self.issuer = issuer
        self.algorithm = algorithm

    def sign(self, user_id: int, roles: Iterable[str], issued_at: datetime, expires_at: datetime) -> str:
        to_encode = {
            "iss": self.issuer,
            "sub": str(user_id),
            "roles": sorted(set(roles)),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            # Unique per issue, so two tokens signed in the same second never collide
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> DecodedClaims | VerificationFailure:
        """
        Checks signature and issuer only. Expiry is business state owned by the
        token store, so `exp` is deliberately not enforced here.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            return VerificationFailure("malformed token")
        if not all(_is_canonical(segment) for segment in token.split(".")):
            return VerificationFailure("non-canonical encoding")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": False},
            )
        except JWTError as e:
            return VerificationFailure(str(e))

        try:
            roles = payload.get("roles", [])
            if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
                return VerificationFailure("invalid roles claim")
            return DecodedClaims(
                user_id=int(payload["sub"]),
                roles=frozenset(roles),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                issuer=payload["iss"],
                token_id=payload["jti"],
            )
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            return VerificationFailure(f"invalid claims: {e}")
