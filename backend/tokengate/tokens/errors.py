from typing import Optional


class AuthenticationError(Exception):
    """
    Base class for every reason a bearer token is not accepted.
    All subclasses surface to clients as the same 401 response.
    """

    kind: str = "unauthenticated"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind


class CryptographicVerificationFailure(AuthenticationError):
    """Malformed, forged or issuer-mismatched token."""
    kind = "verification_failed"


class TokenNotFound(AuthenticationError):
    """Token string unknown to the store."""
    kind = "not_found"


class TokenRevoked(AuthenticationError):
    kind = "revoked"


class TokenExpired(AuthenticationError):
    kind = "expired"


class Unauthenticated(AuthenticationError):
    """No token in the request context, or the context token no longer resolves."""
    kind = "unauthenticated"


class AccessDenied(Exception):
    """Authenticated principal lacks a required role."""

    def __init__(self, role: str) -> None:
        super().__init__(f"missing role {role}")
        self.role = role


__all__ = [
    "AuthenticationError",
    "CryptographicVerificationFailure",
    "TokenNotFound",
    "TokenRevoked",
    "TokenExpired",
    "Unauthenticated",
    "AccessDenied",
]
