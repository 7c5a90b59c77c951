from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from .core.database import create_db_and_tables, engine as default_engine
from .core.init_db import init_db
from .core.logging import configure_logging
from .core.settings import Settings, settings as default_settings
from .models.User import User # Import models to register them with SQLModel
from .models.JWTAuthToken import JWTAuthToken
from .tokens.signer import TokenSigner
from .tokens.store import SQLTokenStore
from .tokens.service import TokenLifecycleService
from .auth.middleware import install_token_auth

from .auth.router import router as auth_router
from .admin.router import router as admin_router


def create_app(settings: Settings = default_settings, engine: Engine = default_engine) -> FastAPI:
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_db_and_tables(engine)
        init_db(engine, settings)
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    signer = TokenSigner(settings.TOKEN_SECRET, settings.TOKEN_ISSUER, settings.TOKEN_ALGORITHM)
    token_service = TokenLifecycleService(
        signer,
        SQLTokenStore(engine),
        validity=timedelta(hours=settings.TOKEN_VALIDITY_HOURS),
    )
    app.state.engine = engine
    app.state.token_service = token_service
    install_token_auth(app, token_service)

    app.include_router(auth_router)
    app.include_router(admin_router)

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
