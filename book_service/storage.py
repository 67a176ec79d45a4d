# book_service/storage.py
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings


logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
SessionLocal = sessionmaker(autoflush=False)


def build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI runs sync routes in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = get_settings().database_url
        logger.info("[DB] Using URL: %s", url)
        _engine = build_engine(url)
        SessionLocal.configure(bind=_engine)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    # register the ORM tables on Base.metadata
    from .catalog import store  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def get_db() -> Iterator[Session]:
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
