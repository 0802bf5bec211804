# backend/database.py

import logging
from pathlib import Path
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool
from backend.models import Base


logger = logging.getLogger(__name__)


class Database:
    """
    Owns the SQLAlchemy engine and session factory of the user store.
    """

    def __init__(self, url: str):
        url_obj = make_url(url)
        connect_args = {}
        if url_obj.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if url_obj.database and url_obj.database != ":memory:":
                Path(url_obj.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, connect_args=connect_args)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )
        self.closed = False

    def init(self):
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    async def close(self):
        if self.closed:
            return
        self.closed = True
        await run_in_threadpool(self.engine.dispose)
        logger.info("Database connection closed")


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
