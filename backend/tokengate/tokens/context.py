from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Principal:
    user_id: int
    roles: frozenset[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class AuthContext:
    """
    Immutable per-request authentication state. The request interceptor builds
    one for every request and it is passed explicitly to whoever needs it.
    """
    token: Optional[str] = None
    principal: Optional[Principal] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None


ANONYMOUS = AuthContext()
