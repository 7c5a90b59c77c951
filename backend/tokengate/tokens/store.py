import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from ..core.clock import as_utc
from ..models.JWTAuthToken import JWTAuthToken
from ..models.User import User


class TokenStore(Protocol):
    """
    Persistence for issued tokens. Historical records accumulate: a user may
    own any number of expired or revoked records, so no lookup by owner may
    assume there is only one.
    """

    def save(self, record: JWTAuthToken) -> JWTAuthToken: ...

    def find_by_token(self, token: str) -> Optional[JWTAuthToken]: ...

    def find_owner_by_token(self, token: str) -> Optional[User]: ...

    def find_by_owner(self, user_id: int) -> Optional[JWTAuthToken]: ...

    def find_expired(self, as_of: datetime) -> list[JWTAuthToken]: ...


def _copy(record: JWTAuthToken) -> JWTAuthToken:
    return JWTAuthToken(
        access_token=record.access_token,
        user_id=record.user_id,
        issued_at=record.issued_at,
        expires_at=record.expires_at,
        revoked=record.revoked,
    )


class SQLTokenStore:
    """SQLModel-backed store. Each call runs in its own short session."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def save(self, record: JWTAuthToken) -> JWTAuthToken:
        with self._session() as session:
            existing = session.get(JWTAuthToken, record.access_token)
            if existing is None:
                existing = _copy(record)
            else:
                existing.user_id = record.user_id
                existing.issued_at = record.issued_at
                existing.expires_at = record.expires_at
                # Revocation is one-way: a stale copy never un-revokes a record
                existing.revoked = existing.revoked or record.revoked
            session.add(existing)
            session.commit()
            session.refresh(existing)
            return existing

    def find_by_token(self, token: str) -> Optional[JWTAuthToken]:
        with self._session() as session:
            return session.get(JWTAuthToken, token)

    def find_owner_by_token(self, token: str) -> Optional[User]:
        with self._session() as session:
            statement = (
                select(User)
                .join(JWTAuthToken, JWTAuthToken.user_id == User.id)
                .where(JWTAuthToken.access_token == token)
            )
            return session.exec(statement).first()

    def find_by_owner(self, user_id: int) -> Optional[JWTAuthToken]:
        with self._session() as session:
            statement = (
                select(JWTAuthToken)
                .where(JWTAuthToken.user_id == user_id)
                .order_by(JWTAuthToken.issued_at.desc())
            )
            return session.exec(statement).first()

    def find_expired(self, as_of: datetime) -> list[JWTAuthToken]:
        with self._session() as session:
            statement = (
                select(JWTAuthToken)
                .where(JWTAuthToken.expires_at <= as_utc(as_of))
                .order_by(JWTAuthToken.expires_at)
            )
            return list(session.exec(statement).all())


class MemoryTokenStore:
    """
    Dict-backed store for tests and single-process deployments.
    Owners are resolved through `user_lookup`, the user collaborator.
    """

    def __init__(self, user_lookup: Callable[[int], Optional[User]]):
        self.user_lookup = user_lookup
        self._records: dict[str, JWTAuthToken] = {}
        self._lock = threading.Lock()

    def save(self, record: JWTAuthToken) -> JWTAuthToken:
        with self._lock:
            stored = _copy(record)
            existing = self._records.get(record.access_token)
            if existing is not None:
                stored.revoked = existing.revoked or record.revoked
            self._records[record.access_token] = stored
            return _copy(stored)

    def find_by_token(self, token: str) -> Optional[JWTAuthToken]:
        with self._lock:
            record = self._records.get(token)
            return _copy(record) if record else None

    def find_owner_by_token(self, token: str) -> Optional[User]:
        with self._lock:
            record = self._records.get(token)
        if record is None:
            return None
        return self.user_lookup(record.user_id)

    def find_by_owner(self, user_id: int) -> Optional[JWTAuthToken]:
        with self._lock:
            owned = [r for r in self._records.values() if r.user_id == user_id]
        if not owned:
            return None
        return _copy(max(owned, key=lambda r: as_utc(r.issued_at)))

    def find_expired(self, as_of: datetime) -> list[JWTAuthToken]:
        cutoff = as_utc(as_of)
        with self._lock:
            expired = [r for r in self._records.values() if as_utc(r.expires_at) <= cutoff]
        return [_copy(r) for r in sorted(expired, key=lambda r: as_utc(r.expires_at))]
