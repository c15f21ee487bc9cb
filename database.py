from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from constants import DATABASE_URL, DATABASE_TIMEOUT_SECONDS


def create_db_engine(database_url: str = DATABASE_URL, **kwargs):
    # Render.com style postgres URLs
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": DATABASE_TIMEOUT_SECONDS}
    else:
        connect_args = {"connect_timeout": int(DATABASE_TIMEOUT_SECONDS)}
        kwargs.setdefault("pool_timeout", DATABASE_TIMEOUT_SECONDS)

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        **kwargs,
    )


engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
