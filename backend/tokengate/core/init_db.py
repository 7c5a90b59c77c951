from sqlalchemy.engine import Engine
from sqlmodel import Session, select
from .logging import get_logger
from .settings import Settings
from ..models.User import User
from ..auth.service import get_password_hash

logger = get_logger(__name__)

def init_db(engine: Engine, settings: Settings):
    with Session(engine) as session:
        statement = select(User).where(User.username == settings.ADMIN_USERNAME)
        user = session.exec(statement).first()

        if not user:
            logger.info("creating_admin_user", username=settings.ADMIN_USERNAME)

            admin_user = User(
                username=settings.ADMIN_USERNAME,
                hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
                is_active=True,
                roles=["ADMIN", "USER"],
            )

            session.add(admin_user)
            session.commit()
            logger.info("admin_user_created", user_id=admin_user.id)
        else:
            logger.info("admin_user_exists", user_id=user.id)
