from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from compliance_engine.config import SETTINGS

Base = declarative_base()


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine | None = None, create_schema: bool = False) -> None:
    target = bind or engine
    with target.connect() as connection:
        connection.execute(text("SELECT 1"))
    if create_schema:
        # models must be registered on Base before create_all
        from compliance_engine.infra import models  # noqa: F401

        Base.metadata.create_all(target)
