"""Create all tables. Run on app startup.

DB_RESET=true drops everything first. With API_SECURE=false a development
user (id 1) is seeded so bypassed requests have an owner row; its password
is random and printed once.
"""
import logging
import secrets

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from invoice_server.core.config import settings
from invoice_server.core.security import get_password_hash
from invoice_server.db.base import Base
from invoice_server.db.session import engine as default_engine, SessionLocal
from invoice_server.db.unit_of_work import session_scope
from invoice_server import models  # noqa: F401 - register models
from invoice_server.models.user import User

logger = logging.getLogger(__name__)


def init_db(engine: Engine = default_engine, session_factory: sessionmaker = SessionLocal):
    if settings.DB_RESET:
        logger.warning("DB_RESET is enabled, dropping all tables...")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)

    if not settings.API_SECURE:
        _ensure_dev_user(session_factory)


def _ensure_dev_user(session_factory: sessionmaker) -> None:
    with session_scope(session_factory) as db:
        if db.query(User).filter(User.id == 1).first():
            return
        if db.query(User).count():
            logger.warning("API_SECURE is disabled but user 1 does not exist; bypassed writes will fail")
            return

        # SECURITY: Generate random password (not hardcoded weak password)
        default_password = secrets.token_urlsafe(16)
        db.add(
            User(
                username="devuser",
                email="dev@example.com",
                password_hash=get_password_hash(default_password),
            )
        )

    print("\n" + "=" * 70)
    print("DEVELOPMENT USER CREATED (API_SECURE is disabled)")
    print("=" * 70)
    print("Email:    dev@example.com")
    print(f"Password: {default_password}")
    print("=" * 70 + "\n")
