import logging
from typing import Any, Callable, Union

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

def foreign_key_pragma(enforce_integrity: bool) -> Callable[..., None]:
    """ Build an event listener which sets the SQLite foreign key pragma on a DBAPI connection.
        SQLite does not persist this setting in the store, so it has to be issued each time a
        connection is opened, and again each time a pooled connection is handed out in case it
        was changed while checked out.

        Arguments:
        enforce_integrity -- whether FK relationships are enforced on the connection
    """

    pragma = f"PRAGMA foreign_keys={'ON' if enforce_integrity else 'OFF'}"

    def set_sqlite_pragma(dbapi_connection, connection_record: Any, connection_proxy: Any=None):
        ''' Event listener to apply the FK enforcement choice during database handling. '''

        cursor = dbapi_connection.cursor()
        cursor.execute(pragma)
        cursor.close()

    return set_sqlite_pragma

def attach_foreign_key_pragma(engine: Engine, enforce_integrity: bool) -> None:
    """ Register the foreign key pragma listener against a single Engine, rather than every
        Engine in the process.

        Arguments:
        engine            -- the Engine whose connections are to be configured
        enforce_integrity -- whether FK relationships are enforced on its connections
    """

    set_sqlite_pragma = foreign_key_pragma(enforce_integrity)
    event.listen(engine, 'connect', set_sqlite_pragma)
    event.listen(engine, 'checkout', set_sqlite_pragma)

    if not enforce_integrity:
        logger.warning("Foreign key enforcement is disabled for %s", engine.url)

def enable_integrity_enforcement(connection: Connection) -> None:
    """ Switch on FK enforcement for an already open connection. The setting lasts until the
        Connection is closed, after which the Engine reapplies its own choice on the next
        checkout. SQLite ignores it while a write transaction is pending.

        Arguments:
        connection -- an open Connection obtained from Engine.connect()
    """

    connection.exec_driver_sql('PRAGMA foreign_keys=ON')

def is_integrity_enforced(bind: Union[Connection, Engine]) -> bool:
    """ Read back the foreign key pragma for a connection, or for a fresh connection checked
        out of an Engine.

        Arguments:
        bind -- either an open Connection or an Engine
    """

    if isinstance(bind, Engine):
        with bind.connect() as connection:
            return is_integrity_enforced(connection)

    return bool(bind.exec_driver_sql('PRAGMA foreign_keys').scalar())

BASE = declarative_base()
