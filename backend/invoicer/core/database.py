from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from invoicer.core.config import settings

engine = create_engine(
    settings.APP_DATABASE_DSN,
    echo=settings.DEBUG,
    connect_args=({"check_same_thread": False} if "sqlite" in settings.APP_DATABASE_DSN else {}),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database tables."""
    import invoicer.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def dialect_insert(db: Session, model: Any) -> Any:
    """INSERT construct for ``model`` supporting ``on_conflict_do_nothing``."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported on {dialect}")
