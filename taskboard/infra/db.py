from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from taskboard.config import SETTINGS

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db(create_schema: bool = False) -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    if create_schema:
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=engine)
