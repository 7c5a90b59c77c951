from datetime import datetime, timedelta, timezone

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tokengate.models.User import User
from tokengate.models.JWTAuthToken import JWTAuthToken  # noqa: F401 (registers the table)

SECRET = "unit-test-secret"
ISSUER = "tokengate-tests"


class FakeClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 15, 12, 0, 0, 250000, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


def memory_engine():
    # One shared connection, so every session sees the same in-memory database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def make_user(user_id: int, roles=("USER",), username: str | None = None) -> User:
    return User(
        id=user_id,
        username=username or f"user{user_id}",
        hashed_password="not-a-real-hash",
        roles=list(roles),
    )


def add_user(engine, user: User) -> User:
    with Session(engine, expire_on_commit=False) as session:
        session.add(user)
        session.commit()
        session.refresh(user)
    return user
