from contextlib import contextmanager

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from textile_pos.database.base import Base
from textile_pos.database.engine import create_database_engine, ensure_sqlite_schema


class Database:
    """Ready-to-use store handle: an engine plus its session factory."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self):
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        from textile_pos.models import import_all_models

        import_all_models()
        Base.metadata.create_all(bind=self.engine)
        ensure_sqlite_schema(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def init_database(database_url: str, *, seed: bool = False) -> Database:
    database = Database(create_database_engine(database_url))
    database.create_all()
    if seed:
        from textile_pos.services.seed import seed_database

        with database.session_scope() as db:
            seed_database(db)
    return database


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
