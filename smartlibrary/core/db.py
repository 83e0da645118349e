import logging
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from smartlibrary.configs import DB_URI, DEBUG

logger = logging.getLogger(__name__)


class LibraryBase:
    @classmethod
    def get_many(cls, session, offset=None, limit=None):
        return session.query(cls).order_by(cls.id.desc()).offset(offset).limit(limit).all()

Base = declarative_base(cls=LibraryBase)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(uri=DB_URI, echo=DEBUG):
    engine_kwargs = {'echo': echo}
    if uri.startswith('sqlite'):
        # Sessions of one engine are shared across worker threads
        engine_kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 30}
        if uri in ('sqlite://', 'sqlite:///:memory:'):
            engine_kwargs['poolclass'] = StaticPool
    else:
        # Only use client_encoding for PostgreSQL, not SQLite
        engine_kwargs['client_encoding'] = 'utf8'
    engine = create_engine(uri, **engine_kwargs)
    if engine.dialect.name == 'sqlite':
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine):
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init(engine):
    """Creates any missing tables."""
    # Models must be registered on Base before create_all
    from smartlibrary.core import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready on {engine.url.render_as_string(hide_password=True)}")


def supports_row_locks(session) -> bool:
    return session.get_bind().dialect.name != 'sqlite'


class Transaction:
    """One open database transaction plus the item locks taken inside it.

    Locks registered with `hold` are released by `transaction()` only
    after the session has committed or rolled back.
    """

    def __init__(self, session):
        self.session = session
        self._held = {}

    def hold(self, item_id, lock=None):
        self._held[item_id] = lock

    def holds(self, item_id) -> bool:
        return item_id in self._held

    def release(self):
        while self._held:
            _, lock = self._held.popitem()
            if lock is not None:
                lock.release()


@contextmanager
def transaction(session_factory):
    """Commits on success and rolls back on any exception, then releases
    every item lock held by the transaction and closes its session.
    """
    session = session_factory()
    tx = Transaction(session)
    try:
        with session.begin():
            yield tx
    finally:
        tx.release()
        session.close()
